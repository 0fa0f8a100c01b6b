"""DEBUG-level call tracing for the pointer-event pipeline."""

from __future__ import annotations

import dataclasses
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxlist = 6
_repr.maxtuple = 6
_repr.maxdict = 6


def compact_repr(value: Any, *, max_items: int = 4, max_length: int = 240) -> str:
    """Short, single-line repr for log messages.

    Matrices collapse to their shape, dataclasses to their class name and
    scalar fields, containers are cut after ``max_items`` entries.
    """

    if isinstance(value, np.ndarray):
        if value.size <= max_items:
            return f"ndarray({np.array2string(value, precision=4, separator=',')})"
        return f"ndarray(shape={tuple(value.shape)})"

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        parts = []
        for field in dataclasses.fields(value)[:max_items]:
            parts.append(f"{field.name}={compact_repr(getattr(value, field.name), max_items=2)}")
        return f"{type(value).__name__}({', '.join(parts)})"

    if isinstance(value, (list, tuple)):
        shown = [compact_repr(item, max_items=2) for item in list(value)[:max_items]]
        if len(value) > max_items:
            shown.append("...")
        open_br, close_br = ("(", ")") if isinstance(value, tuple) else ("[", "]")
        return open_br + ", ".join(shown) + close_br

    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "..."
    return rendered


def _format_call(args: Sequence[Any], kwargs: Mapping[str, Any]) -> str:
    parts = [compact_repr(arg) for arg in args]
    parts.extend(f"{key}={compact_repr(val)}" for key, val in kwargs.items())
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator logging entry, exit and exceptions of a call at DEBUG."""

    def decorator(func: F) -> F:
        qualname = name or func.__qualname__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("-> %s(%s)", qualname, _format_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("!! %s raised", qualname)
                raise
            if log_result:
                logger.debug("<- %s = %s", qualname, compact_repr(result))
            else:
                logger.debug("<- %s", qualname)
            return result

        return cast(F, wrapper)

    return decorator


__all__ = ["compact_repr", "debug_log_call"]
