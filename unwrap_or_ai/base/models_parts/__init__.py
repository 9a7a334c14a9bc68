"""One-class-per-file DTO implementations re-exported by ``base.models``."""

from .message import Message, Role
from .recovery_request import RecoveryRequest

__all__ = ["Message", "Role", "RecoveryRequest"]
