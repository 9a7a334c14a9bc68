"""
Exceptions surfaced by the recovery layer to callers.

- ``RecoveryAbortedError``: terminal failure under the abort policy.
- ``OriginalFailureError``: raised by the unwrapping entry point when an
  unrecovered failure reason is a plain value rather than an exception.
- ``SchemaDerivationError``: the requested target type has no structural
  description and cannot be used as a recovery target.
"""
from __future__ import annotations

from typing import Any, Optional


class RecoveryAbortedError(Exception):
    """Recovery was required, was not possible, and the policy aborts the flow.

    Attributes:
        reason: The original failure reason (exception, message, or ``None``
            for an absent value). Always preserved.
        function: Name of the callable whose outcome could not be recovered.
        recovery_error: The backend or configuration error that prevented
            recovery. Also chained as ``__cause__``.
    """

    def __init__(
        self,
        reason: Any,
        *,
        function: Optional[str] = None,
        recovery_error: Optional[BaseException] = None,
    ) -> None:
        self.reason = reason
        self.function = function
        self.recovery_error = recovery_error
        where = f" in {function}" if function else ""
        original = "value absent" if reason is None else str(reason)
        super().__init__(f"AI recovery failed{where}: {recovery_error} (original failure: {original})")


class OriginalFailureError(Exception):
    """Carries a non-exception failure reason out of ``unwrap_or_recover``."""

    def __init__(self, reason: Any) -> None:
        self.reason = reason
        super().__init__(str(reason))


class SchemaDerivationError(TypeError):
    """Raised when a target type lacks the structural metadata a schema needs."""


__all__ = ["RecoveryAbortedError", "OriginalFailureError", "SchemaDerivationError"]
