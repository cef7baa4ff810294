from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, Set, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxdict = 8
_repr.maxlist = 8
_repr.maxtuple = 8
_repr.maxset = 8


def _is_position(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and all(isinstance(v, float) for v in value)
    )


def _safe_repr(value: Any, *, max_items: int = 6, max_length: int = 300) -> str:
    if isinstance(value, np.ndarray):
        if value.size == 0:
            return f"ndarray(shape={tuple(value.shape)})"
        return (
            f"ndarray(shape={tuple(value.shape)}, min={float(value.min()):.6g}, "
            f"max={float(value.max()):.6g})"
        )

    describe = getattr(value, "describe", None)
    if callable(describe) and not inspect.isclass(value):
        try:
            return str(describe())
        except TypeError:
            pass

    if _is_position(value):
        return f"({value[0]:.6g}, {value[1]:.6g})"

    if isinstance(value, dict):
        items = []
        for idx, (key, val) in enumerate(value.items()):
            if idx >= max_items:
                items.append("...")
                break
            items.append(f"{_safe_repr(key)}: {_safe_repr(val)}")
        return "{" + ", ".join(items) + "}"

    if isinstance(value, (list, tuple, set, frozenset)):
        open_br, close_br = ("(", ")") if isinstance(value, tuple) else ("[", "]")
        items = []
        for idx, item in enumerate(value):
            if idx >= max_items:
                items.append(f"... +{len(value) - max_items}")
                break
            items.append(_safe_repr(item))
        return f"{open_br}{', '.join(items)}{close_br}"

    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "..."
    return rendered


def _format_arguments(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [_safe_repr(arg) for arg in args]
    parts.extend(f"{key}={_safe_repr(value)}" for key, value in kwargs.items())
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator that logs entry, exit and exceptions at DEBUG level."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        qualname = name or getattr(func, "__qualname__", getattr(func, "__name__", "<callable>"))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("-> %s(%s)", qualname, _format_arguments(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.debug("<- %s raised %s: %s", qualname, type(exc).__name__, exc)
                raise
            if log_result:
                logger.debug("<- %s = %s", qualname, _safe_repr(result))
            else:
                logger.debug("<- %s", qualname)
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


def _wrap_class(cls: type, logger: logging.Logger, skip: Set[str]) -> None:
    for attr_name, attr_value in list(cls.__dict__.items()):
        if attr_name.startswith("_"):
            continue
        qualified = f"{cls.__name__}.{attr_name}"
        if attr_name in skip or qualified in skip:
            continue
        if inspect.isfunction(attr_value) and attr_value.__module__ == cls.__module__:
            setattr(cls, attr_name, debug_log_call(logger, name=qualified)(attr_value))


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
    wrap_methods: bool = False,
) -> None:
    """Wrap the public callables defined in ``namespace`` with DEBUG tracing.

    Private helpers (leading underscore) stay unwrapped so that tight inner
    loops do not pay for the wrapper.
    """

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(module_name or __name__)
    skip_set: Set[str] = set(skip or [])

    for name, value in list(namespace.items()):
        if name.startswith("_") or name in skip_set:
            continue
        if inspect.isfunction(value) and value.__module__ == module_name:
            namespace[name] = debug_log_call(logger, name=name)(value)
        elif wrap_methods and inspect.isclass(value) and value.__module__ == module_name:
            _wrap_class(value, logger, skip_set)


__all__ = ["apply_debug_logging", "debug_log_call"]
