"""Per-attempt description of a failing call, rendered into the user prompt."""

from __future__ import annotations

import reprlib
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

from .capture import callable_name, snapshot_of

_ARG_REPR = reprlib.Repr()
_ARG_REPR.maxstring = 200
_ARG_REPR.maxother = 200

_CLOSING = "This function should return the appropriate type. Generate a reasonable response as valid JSON."


@dataclass(frozen=True)
class CallContext:
    """What the backend is told about the failed call.

    Attributes:
        function: Qualified name of the callable.
        arguments: ``repr`` of each argument (keyword arguments as ``k=v``).
        source: Captured source or signature snapshot; ``None`` if unknown.
        reason: The failure reason. ``None`` means the call returned no value.
    """

    function: str
    arguments: Tuple[str, ...] = ()
    source: Optional[str] = None
    reason: Any = None

    def with_reason(self, reason: Any) -> "CallContext":
        return replace(self, reason=reason)

    @property
    def call_text(self) -> str:
        return f"{self.function}({', '.join(self.arguments)})"

    def describe_reason(self) -> str:
        if self.reason is None:
            return "the call returned no value"
        if isinstance(self.reason, BaseException):
            return f"{type(self.reason).__name__}: {self.reason}"
        return str(self.reason)

    def render_prompt(self) -> str:
        lines = [
            f"The following function call failed: {self.call_text}",
            f"Function name: {self.function}",
            f"Parameters: {', '.join(self.arguments)}",
            f"Failure: {self.describe_reason()}",
        ]
        if self.source:
            lines.append(f"Source code:\n{self.source}")
        lines.extend(["", _CLOSING])
        return "\n".join(lines)


def format_arguments(args: Sequence[Any], kwargs: Mapping[str, Any]) -> Tuple[str, ...]:
    rendered = [_ARG_REPR.repr(a) for a in args]
    rendered.extend(f"{k}={_ARG_REPR.repr(v)}" for k, v in kwargs.items())
    return tuple(rendered)


def call_context_factory(
    func: Callable[..., Any], args: Sequence[Any], kwargs: Mapping[str, Any]
) -> Callable[[], CallContext]:
    """Return a zero-argument factory building the context on demand.

    Nothing is captured until the factory is called, which the resolver only
    does for failed outcomes.
    """

    def build() -> CallContext:
        return CallContext(
            function=callable_name(func),
            arguments=format_arguments(args, kwargs),
            source=snapshot_of(func),
        )

    return build


__all__ = ["CallContext", "format_arguments", "call_context_factory"]
