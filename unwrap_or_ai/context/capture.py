"""Decoration-time capture of a callable's source for recovery prompts.

``@recoverable`` snapshots the signature, docstring and source text of a
function when it is defined and stores the text on the function
(``__recovery_context__``) and in a process-wide registry keyed by
qualified name. ``source_of`` reads it back.

Source is unavailable for callables defined in a REPL, for builtins and for
C extensions; the snapshot then degrades to the signature and docstring.
The captured text is opaque: it is concatenated verbatim into the prompt.
"""

from __future__ import annotations

import functools
import inspect
import textwrap
import threading
from typing import Any, Callable, Dict, Optional, TypeVar, Union, overload

F = TypeVar("F", bound=Callable[..., Any])

CONTEXT_ATTR = "__recovery_context__"

_REGISTRY: Dict[str, str] = {}
_REGISTRY_LOCK = threading.Lock()


def callable_name(func: Any) -> str:
    """Return the qualified name used in prompts and logs."""
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)


def _registry_keys(func: Any) -> tuple:
    qualname = callable_name(func)
    module = getattr(func, "__module__", None)
    return (f"{module}.{qualname}", qualname) if module else (qualname,)


def _header(func: Any) -> str:
    try:
        sig = str(inspect.signature(func))
    except (TypeError, ValueError):
        sig = "(...)"
    prefix = "async def" if inspect.iscoroutinefunction(func) else "def"
    return f"{prefix} {getattr(func, '__name__', callable_name(func))}{sig}:"


def _degraded_snapshot(func: Any, body: Optional[str] = None) -> str:
    lines = [_header(func)]
    doc = inspect.getdoc(func)
    if doc:
        lines.append(textwrap.indent(f'"""{doc}"""', "    "))
    if body:
        lines.append(textwrap.indent(body.strip("\n"), "    "))
    return "\n".join(lines)


def capture_source(func: Any, context: Optional[str] = None) -> str:
    """Return the context snapshot for ``func`` without registering it.

    With ``context`` the text replaces the captured body; the signature and
    docstring are kept.
    """
    if context is not None:
        return _degraded_snapshot(func, textwrap.dedent(context))
    try:
        return textwrap.dedent(inspect.getsource(func)).rstrip("\n")
    except (OSError, TypeError):
        return _degraded_snapshot(func)


def register(func: Any, text: str) -> None:
    with _REGISTRY_LOCK:
        for key in _registry_keys(func):
            _REGISTRY[key] = text


@overload
def recoverable(func: F) -> F: ...


@overload
def recoverable(*, context: Optional[str] = None) -> Callable[[F], F]: ...


def recoverable(func: Optional[F] = None, *, context: Optional[str] = None) -> Union[F, Callable[[F], F]]:
    """Mark ``func`` as a recovery site and capture its context now.

    Usable bare (``@recoverable``) or with an explicit context string
    (``@recoverable(context="...")``). The function itself is returned
    unchanged apart from the ``__recovery_context__`` attribute; callables
    that do not accept attributes are wrapped with ``functools.wraps``.
    """

    def decorate(fn: F) -> F:
        text = capture_source(fn, context)
        register(fn, text)
        try:
            setattr(fn, CONTEXT_ATTR, text)
            return fn
        except (AttributeError, TypeError):
            pass

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return fn(*args, **kwargs)

        setattr(wrapper, CONTEXT_ATTR, text)
        return wrapper  # type: ignore[return-value]

    if func is not None:
        return decorate(func)
    return decorate


def source_of(func_or_name: Union[Callable[..., Any], str]) -> Optional[str]:
    """Return the captured context text, or ``None`` if nothing was captured.

    Accepts the decorated callable itself, its qualified name, or its
    ``module.qualname``.
    """
    if isinstance(func_or_name, str):
        with _REGISTRY_LOCK:
            return _REGISTRY.get(func_or_name)
    text = getattr(func_or_name, CONTEXT_ATTR, None)
    if text is not None:
        return text
    with _REGISTRY_LOCK:
        for key in _registry_keys(func_or_name):
            if key in _REGISTRY:
                return _REGISTRY[key]
    return None


def snapshot_of(func: Any) -> str:
    """Captured text when ``func`` is decorated, otherwise a fresh capture."""
    text = source_of(func)
    return text if text is not None else capture_source(func)


def clear_registry() -> None:
    with _REGISTRY_LOCK:
        _REGISTRY.clear()


__all__ = [
    "CONTEXT_ATTR",
    "recoverable",
    "source_of",
    "snapshot_of",
    "capture_source",
    "callable_name",
    "register",
    "clear_registry",
]
