"""
Static Resources.

Serves files from the configured directory under the configured path
pattern. ``/**`` mounts the handler on the root, behind every API route, so
the handler sees every request no route matched. Missing files raise
``NoResourceFoundError`` and reach the exception advices like any other error.

A root mount also receives requests whose path matches an API route but whose
method does not; those raise ``MethodNotAllowedError`` with the route's
methods, as the router itself does under any other pattern.
"""

import os
from typing import Iterable, Optional, Set

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.routing import BaseRoute, Match
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from problem_details_demo.core.logging_config import get_logger

from .core.config import StaticResourcesConfig
from .errors import MethodNotAllowedError, NoResourceFoundError

logger = get_logger(__name__)

STATIC_MOUNT_NAME = "static"
RESOURCE_METHODS = ("GET", "HEAD")


def _route_methods(routes: Iterable[BaseRoute], scope: Scope) -> Optional[Set[str]]:
    """Methods of the routes matching the path of ``scope`` but not its method; None when no route does."""
    methods: Optional[Set[str]] = None
    for route in routes:
        match, _ = route.matches(scope)
        if match != Match.PARTIAL:
            continue
        methods = methods or set()
        route_methods = getattr(route, "methods", None)
        if route_methods:
            methods.update(route_methods)
        elif getattr(route, "routes", None):
            methods.update(_route_methods(route.routes, scope) or ())
    return methods


class ResourceHandler(StaticFiles):
    """``StaticFiles`` raising error-response exceptions instead of bare HTTP errors."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        router = scope.get("router")
        if router is not None:
            route_methods = _route_methods(router.routes, scope)
            if route_methods is not None:
                raise MethodNotAllowedError(scope["method"], route_methods)
        if scope["method"] not in RESOURCE_METHODS:
            raise MethodNotAllowedError(scope["method"], RESOURCE_METHODS)
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code == 404:
                raise NoResourceFoundError(path) from exc
            raise

    async def check_config(self) -> None:
        if self.directory is not None and not os.path.isdir(self.directory):
            logger.warning(f"Static resource directory '{self.directory}' does not exist; every lookup will miss")
            return
        await super().check_config()


def mount_static_resources(app: FastAPI, config: StaticResourcesConfig) -> ResourceHandler:
    """Mount the resource handler; call after every router is included."""
    handler = ResourceHandler(directory=config.directory, check_dir=False)
    app.mount(config.mount_path, handler, name=STATIC_MOUNT_NAME)
    logger.info(f"Serving static resources from '{config.directory}' on {config.path_pattern}")
    return handler
