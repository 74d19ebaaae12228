from __future__ import annotations

import dataclasses
import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, Set, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxstring = 80


def _summarize_array(value: np.ndarray, max_items: int) -> str:
    head = f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"
    if value.size == 0:
        return head
    if value.size <= max_items:
        return f"{head} values={_repr.repr(value.tolist())}"
    if np.issubdtype(value.dtype, np.number):
        finite = value[np.isfinite(value)] if np.issubdtype(value.dtype, np.floating) else value
        if finite.size == 0:
            return f"{head} all-nonfinite"
        return f"{head} min={float(finite.min()):.4g} max={float(finite.max()):.4g}"
    return head


def _summarize_record(value: Any) -> str:
    name = type(value).__name__
    ident = getattr(value, "id", None)
    if ident is not None:
        return f"{name}(id={ident!r})"
    sized = []
    for field in dataclasses.fields(value):
        item = getattr(value, field.name)
        if isinstance(item, (list, tuple, dict, set, frozenset)):
            sized.append(f"{field.name}=<{len(item)}>")
        elif isinstance(item, (int, float, str, bool)) or item is None:
            sized.append(f"{field.name}={item!r}")
    return f"{name}({', '.join(sized)})"


def summarize(value: Any, *, max_items: int = 4, max_length: int = 300) -> str:
    """Render ``value`` compactly for DEBUG call traces."""

    if isinstance(value, np.ndarray):
        return _summarize_array(value, max_items)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _summarize_record(value)

    if isinstance(value, dict):
        parts = []
        for idx, (key, item) in enumerate(value.items()):
            if idx >= max_items:
                parts.append(f"... {len(value) - max_items} more")
                break
            parts.append(f"{key!r}: {summarize(item)}")
        return "{" + ", ".join(parts) + "}"

    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
        parts = [summarize(item) for item in items[:max_items]]
        if len(items) > max_items:
            parts.append(f"... {len(items) - max_items} more")
        return f"{type(value).__name__}[{', '.join(parts)}]"

    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "..."
    return rendered


def _describe_call(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [summarize(arg) for arg in args]
    parts.extend(f"{key}={summarize(item)}" for key, item in kwargs.items())
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator tracing calls of the wrapped function at DEBUG level."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        label = name or getattr(func, "__qualname__", func.__name__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("-> %s(%s)", label, _describe_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.debug("!! %s raised", label, exc_info=True)
                raise
            if log_result:
                logger.debug("<- %s = %s", label, summarize(result))
            else:
                logger.debug("<- %s", label)
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
) -> None:
    """Wrap the public functions defined in a module namespace with call tracing.

    Private helpers (leading underscore) and names listed in ``skip`` are left
    alone so inner loops stay cheap.
    """

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(module_name if isinstance(module_name, str) else __name__)
    skip_set: Set[str] = set(skip or ())

    for attr, value in list(namespace.items()):
        if attr.startswith("_") or attr in skip_set:
            continue
        if inspect.isfunction(value) and value.__module__ == module_name:
            namespace[attr] = debug_log_call(logger, name=attr)(value)


__all__ = ["apply_debug_logging", "debug_log_call", "summarize"]
