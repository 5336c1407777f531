"""
Exception handling for the problem details server.

This package contains the ordered exception advice machinery, the built-in
problem details and catch-all advices, error rendering, and a setup function
registering all of it with the FastAPI application.
"""

from .advice import ExceptionAdvice, ExceptionAdviceRegistry, exception_handler
from .global_handler import CatchAllExceptionAdvice, setup_exception_handlers
from .problem_handler import ProblemDetailsExceptionHandler
from .rendering import ErrorRenderer, preferred_error_format
from .resolver import ExceptionResolver

__all__ = [
    "CatchAllExceptionAdvice",
    "ErrorRenderer",
    "ExceptionAdvice",
    "ExceptionAdviceRegistry",
    "ExceptionResolver",
    "ProblemDetailsExceptionHandler",
    "exception_handler",
    "preferred_error_format",
    "setup_exception_handlers",
]
