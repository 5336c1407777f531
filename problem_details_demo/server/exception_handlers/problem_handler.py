"""
Built-in Problem Details Advice.

Turns framework errors into RFC 7807 problem details: error-response
exceptions (unknown endpoint, missing static resource, unsupported method,
explicitly raised problems) and request validation failures.

Starlette ``HTTPException``s are translated into error-response exceptions
before any advice runs, so they are covered by ``handle_problem_response``.
"""

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError

from ..errors import ProblemResponseError
from ..schemas import ProblemDetail
from .advice import ExceptionAdvice, exception_handler


class ProblemDetailsExceptionHandler(ExceptionAdvice):
    """Advice rendering framework exceptions as problem details."""

    @exception_handler()
    def handle_problem_response(self, exc: ProblemResponseError, request: Request) -> ProblemDetail:
        return exc.body.model_copy(deep=True)

    @exception_handler()
    def handle_request_validation(self, exc: RequestValidationError, request: Request) -> ProblemDetail:
        problem = ProblemDetail.for_status_and_detail(400, "Invalid request content.")
        problem.set_property("errors", jsonable_encoder(exc.errors()))
        return problem
