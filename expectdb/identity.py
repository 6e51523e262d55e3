from __future__ import annotations

import functools
import inspect
import re
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_name(name: str) -> str:
    """
    Map an operation name onto the facade's method naming.

    ``"CreateTable"``, ``"createTable"`` and ``"create_table"`` all become
    ``"create_table"``, so expectations can be declared with the ORM-style
    spelling as well as the Python one.
    """
    if not name or not name.strip():
        raise ValueError("operation name must be a non-empty string")
    return _CAMEL_BOUNDARY.sub("_", name.strip()).lower()


def caller_name(depth: int = 1) -> str:
    """
    Return the short name of the function ``depth`` frames above the caller.

    ``caller_name(0)`` is the function calling ``caller_name`` itself.
    """
    frame = inspect.currentframe()
    try:
        for _ in range(depth + 1):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            raise ValueError(f"call stack is shallower than depth {depth}")
        return frame.f_code.co_name
    finally:
        del frame


def _flatten_arguments(sig: inspect.Signature, bound: inspect.BoundArguments) -> tuple:
    observed: list[Any] = []
    # First parameter is the handle itself.
    for param in list(sig.parameters.values())[1:]:
        if param.name not in bound.arguments:
            continue
        value = bound.arguments[param.name]
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            observed.extend(value)
        elif param.kind is inspect.Parameter.VAR_KEYWORD:
            observed.extend(value.values())
        else:
            observed.append(value)
    return tuple(observed)


def intercepted(func: F) -> F:
    """
    Mark a handle method as an intercepted operation.

    Each call reports the method's own name and its arguments, in declaration
    order, to ``self._report`` before the method body runs.
    """
    name = func.__name__
    sig = inspect.signature(func)

    @functools.wraps(func)
    def wrapper(self, *args: Any, **kwargs: Any):
        bound = sig.bind(self, *args, **kwargs)
        self._report(name, *_flatten_arguments(sig, bound))
        return func(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]
