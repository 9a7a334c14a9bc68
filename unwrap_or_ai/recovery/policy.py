"""Policy applied when recovery is required but unavailable or failed."""

from __future__ import annotations

from enum import Enum
from typing import Union

from ..config import get_default_policy_name


class RecoveryPolicy(str, Enum):
    """``PROPAGATE`` returns the original outcome; ``ABORT`` raises."""

    PROPAGATE = "propagate"
    ABORT = "abort"

    @classmethod
    def coerce(cls, value: Union["RecoveryPolicy", str, None]) -> "RecoveryPolicy":
        """Return a policy from an enum member, a name, or ``None`` (configured default)."""
        if isinstance(value, cls):
            return value
        name = (value or get_default_policy_name()).strip().lower()
        try:
            return cls(name)
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown recovery policy '{value or name}' (expected one of: {choices})") from None


__all__ = ["RecoveryPolicy"]
