"""Orchestration entry points.

``resolve_or_recover`` calls a function once, normalizes what it returned (or
raised) into an outcome and hands it to a :class:`RecoveryResolver`. The
returned outcome has the same family as the original one.
``unwrap_or_recover`` does the same and unwraps to a plain value.

The recovery target type is taken from ``target=`` or inferred from the
function's return annotation: ``Result[T, E]``, ``Option[T]``,
``Optional[T]``, ``Success[T]``/``Present[T]`` or a bare ``T``.
"""

from __future__ import annotations

import inspect
import threading
import types
import typing
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from ..backend.factory import create_backend
from ..base.errors import OriginalFailureError
from ..context import call_context_factory
from ..context.capture import callable_name
from .outcome import Absent, Failure, Outcome, Present, Success, as_outcome
from .resolver import RecoveryResolver

T = TypeVar("T")

_DEFAULT_RESOLVER: Optional[RecoveryResolver] = None
_DEFAULT_LOCK = threading.Lock()


def default_resolver() -> RecoveryResolver:
    """Return the process-wide resolver built from configuration on first use."""
    global _DEFAULT_RESOLVER
    with _DEFAULT_LOCK:
        if _DEFAULT_RESOLVER is None:
            _DEFAULT_RESOLVER = RecoveryResolver(create_backend())
        return _DEFAULT_RESOLVER


def set_default_resolver(resolver: Optional[RecoveryResolver]) -> None:
    """Replace the process-wide resolver (``None`` rebuilds it lazily)."""
    global _DEFAULT_RESOLVER
    with _DEFAULT_LOCK:
        _DEFAULT_RESOLVER = resolver


# ----- target inference -----

_OUTCOME_VALUE_TYPES = (Success, Present)
_UNION_ORIGINS = (Union, getattr(types, "UnionType", Union))


def _return_annotation(func: Callable[..., Any]) -> Any:
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError, AttributeError):
        hints = {}
    if "return" in hints:
        return hints["return"]
    try:
        annotation = inspect.signature(func).return_annotation
    except (TypeError, ValueError):
        return None
    if annotation is inspect.Signature.empty or isinstance(annotation, str):
        return None
    return annotation


def _concrete(tp: Any) -> Any:
    return None if isinstance(tp, TypeVar) else tp


def target_from_annotation(annotation: Any) -> Any:
    """Return the value type ``T`` described by a return annotation, or ``None``."""
    if annotation is None or annotation is type(None):
        return None
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin in _OUTCOME_VALUE_TYPES:
        return _concrete(args[0]) if args else None
    if origin in _UNION_ORIGINS:
        for arg in args:
            arg_origin = typing.get_origin(arg)
            if arg_origin in _OUTCOME_VALUE_TYPES:
                inner = typing.get_args(arg)
                return _concrete(inner[0]) if inner else None
            if arg in _OUTCOME_VALUE_TYPES:
                return None
        members = [a for a in args if a is not type(None) and a not in (Failure, Absent) and typing.get_origin(a) is not Failure]
        if len(members) == 1:
            return members[0]
        return Union[tuple(members)] if members else None
    if isinstance(annotation, type) and issubclass(annotation, Outcome):
        return None
    return annotation


def infer_target(func: Callable[..., Any]) -> Any:
    return target_from_annotation(_return_annotation(func))


# ----- invocation -----


def call_as_outcome(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Outcome[Any]:
    """Call ``func`` once; a raised ``Exception`` becomes ``Failure(exc)``."""
    try:
        raw = func(*args, **kwargs)
    except Exception as exc:
        return Failure(exc)
    return as_outcome(raw)


async def acall_as_outcome(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Outcome[Any]:
    """Async variant: awaits the result when ``func`` returns an awaitable."""
    try:
        raw = func(*args, **kwargs)
        if inspect.isawaitable(raw):
            raw = await raw
    except Exception as exc:
        return Failure(exc)
    return as_outcome(raw)


def resolve_or_recover(
    func: Callable[..., Any],
    *args: Any,
    target: Any = None,
    resolver: Optional[RecoveryResolver] = None,
    **kwargs: Any,
) -> Outcome[Any]:
    """Call ``func`` and return its outcome, recovered when it failed.

    ``target`` and ``resolver`` are reserved keyword names; every other
    positional and keyword argument is passed to ``func``.
    """
    outcome = call_as_outcome(func, *args, **kwargs)
    if outcome.has_value():
        return outcome
    return (resolver or default_resolver()).resolve(
        outcome,
        target if target is not None else infer_target(func),
        call_context_factory(func, args, kwargs),
        function=callable_name(func),
    )


async def aresolve_or_recover(
    func: Callable[..., Union[Awaitable[Any], Any]],
    *args: Any,
    target: Any = None,
    resolver: Optional[RecoveryResolver] = None,
    **kwargs: Any,
) -> Outcome[Any]:
    """Async variant of :func:`resolve_or_recover` for coroutine functions.

    Cancelling the awaiting task abandons the in-flight backend request.
    """
    outcome = await acall_as_outcome(func, *args, **kwargs)
    if outcome.has_value():
        return outcome
    return await (resolver or default_resolver()).aresolve(
        outcome,
        target if target is not None else infer_target(func),
        call_context_factory(func, args, kwargs),
        function=callable_name(func),
    )


def unwrap(outcome: Outcome[T]) -> Optional[T]:
    """Return the outcome's value, re-raising an unrecovered failure.

    - ``Success``/``Present``: the value.
    - ``Failure`` with an exception reason: that exception is raised.
    - ``Failure`` with any other reason: ``OriginalFailureError(reason)``.
    - ``Absent``: ``None``.
    """
    if outcome.has_value():
        return outcome.value  # type: ignore[attr-defined]
    reason = outcome.reason
    if isinstance(outcome, Failure):
        if isinstance(reason, BaseException):
            raise reason
        raise OriginalFailureError(reason)
    return None


def unwrap_or_recover(
    func: Callable[..., Any],
    *args: Any,
    target: Any = None,
    resolver: Optional[RecoveryResolver] = None,
    **kwargs: Any,
) -> Any:
    """Call ``func`` and return its value, a recovered value, or raise.

    Under the default ``propagate`` policy an unrecovered failure re-raises
    the original exception; under ``abort`` ``RecoveryAbortedError`` is
    raised instead.
    """
    return unwrap(resolve_or_recover(func, *args, target=target, resolver=resolver, **kwargs))


async def aunwrap_or_recover(
    func: Callable[..., Any],
    *args: Any,
    target: Any = None,
    resolver: Optional[RecoveryResolver] = None,
    **kwargs: Any,
) -> Any:
    return unwrap(await aresolve_or_recover(func, *args, target=target, resolver=resolver, **kwargs))


__all__ = [
    "resolve_or_recover",
    "aresolve_or_recover",
    "unwrap_or_recover",
    "aunwrap_or_recover",
    "unwrap",
    "call_as_outcome",
    "acall_as_outcome",
    "infer_target",
    "target_from_annotation",
    "default_resolver",
    "set_default_resolver",
]
