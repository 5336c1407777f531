"""
Advised Routes.

``AdvisedRoute`` sends every exception raised while handling a request
(endpoint, dependencies, request validation) through the application's
``ExceptionResolver`` before Starlette's own error middleware can see it.
"""

from typing import Callable, Coroutine, Any

from fastapi import APIRouter, Request
from fastapi.routing import APIRoute
from starlette.responses import Response


class AdvisedRoute(APIRoute):
    """APIRoute resolving raised exceptions through the exception advices."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_route_handler = super().get_route_handler()

        async def advised_route_handler(request: Request) -> Response:
            try:
                return await original_route_handler(request)
            except Exception as exc:
                return await request.app.state.exception_resolver.resolve(request, exc)

        return advised_route_handler


def advised_router(**kwargs: Any) -> APIRouter:
    """Create an ``APIRouter`` whose routes are ``AdvisedRoute``s."""
    return APIRouter(route_class=AdvisedRoute, **kwargs)
