"""
Ordered Exception Advice.

An *exception advice* groups exception handlers that apply to every route.
Handlers are methods marked with ``@exception_handler``; each takes the
exception and the request and returns a ``ProblemDetail``, a Starlette
``Response`` or ``None`` (meaning "not handled, ask the next advice").

Advices are consulted by ascending ``order``. Within one advice the handler
declared for the closest exception class in the MRO wins.
"""

import inspect
import itertools
import typing
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type, Union

from fastapi import Request
from starlette.responses import Response

from problem_details_demo.core.logging_config import get_logger

from ..core.constant import LOWEST_PRECEDENCE
from ..schemas import ProblemDetail

logger = get_logger(__name__)

ExceptionHandlerResult = Union[ProblemDetail, Response, None]
ExceptionHandler = Callable[[BaseException, Request], Any]

_EXCEPTION_TYPES_ATTR = "__exception_types__"


def exception_handler(*exception_types: Type[BaseException]) -> Callable:
    """
    Mark an advice method as an exception handler.

    Without arguments the handled type is read from the annotation of the
    method's exception parameter.
    """

    def decorator(func: Callable) -> Callable:
        setattr(func, _EXCEPTION_TYPES_ATTR, exception_types)
        return func

    return decorator


def _is_exception_type(candidate: Any) -> bool:
    return inspect.isclass(candidate) and issubclass(candidate, BaseException)


def _infer_exception_types(func: Callable) -> Tuple[Type[BaseException], ...]:
    hints = typing.get_type_hints(func)
    for name in inspect.signature(func).parameters:
        hint = hints.get(name)
        if hint is None:
            continue
        if _is_exception_type(hint):
            return (hint,)
        args = typing.get_args(hint)
        if args and all(_is_exception_type(arg) for arg in args):
            return tuple(args)
    raise TypeError(f"Cannot infer handled exception type for {func.__qualname__}; pass it to @exception_handler")


class ExceptionAdvice:
    """Base class for objects grouping ``@exception_handler`` methods."""

    order: int = LOWEST_PRECEDENCE

    def __init__(self, order: Optional[int] = None):
        if order is not None:
            self.order = order
        self._handlers = self._collect_handlers()
        self._resolved: Dict[type, Optional[ExceptionHandler]] = {}

    def _collect_handlers(self) -> Dict[Type[BaseException], ExceptionHandler]:
        handlers: Dict[Type[BaseException], ExceptionHandler] = {}
        for name, func in inspect.getmembers(type(self), inspect.isfunction):
            declared = getattr(func, _EXCEPTION_TYPES_ATTR, None)
            if declared is None:
                continue
            for exc_type in declared or _infer_exception_types(func):
                if exc_type in handlers:
                    raise ValueError(f"Ambiguous exception handlers for {exc_type.__name__} in {type(self).__name__}")
                handlers[exc_type] = getattr(self, name)
        return handlers

    @property
    def handled_types(self) -> List[Type[BaseException]]:
        return list(self._handlers)

    def find_handler(self, exc_type: type) -> Optional[ExceptionHandler]:
        """Return the handler whose declared type is nearest to ``exc_type`` in its MRO."""
        if exc_type not in self._resolved:
            best: Optional[ExceptionHandler] = None
            best_depth: Optional[int] = None
            for handled, handler in self._handlers.items():
                if not issubclass(exc_type, handled):
                    continue
                depth = exc_type.__mro__.index(handled)
                if best_depth is None or depth < best_depth:
                    best, best_depth = handler, depth
            self._resolved[exc_type] = best
        return self._resolved[exc_type]

    async def handle(self, exc: BaseException, request: Request) -> ExceptionHandlerResult:
        handler = self.find_handler(type(exc))
        if handler is None:
            return None
        result = handler(exc, request)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}(order={self.order})"


class ExceptionAdviceRegistry:
    """Keeps advices sorted by order; equal orders keep registration order."""

    def __init__(self) -> None:
        self._entries: List[Tuple[int, ExceptionAdvice]] = []
        self._sequence = itertools.count()

    def register(self, advice: ExceptionAdvice, order: Optional[int] = None) -> ExceptionAdvice:
        if order is not None:
            advice.order = order
        self._entries.append((next(self._sequence), advice))
        logger.debug(f"Registered exception advice {advice!r}")
        return advice

    def ordered(self) -> List[ExceptionAdvice]:
        return [advice for _, advice in sorted(self._entries, key=lambda entry: (entry[1].order, entry[0]))]

    def __iter__(self) -> Iterator[ExceptionAdvice]:
        return iter(self.ordered())

    def __len__(self) -> int:
        return len(self._entries)
