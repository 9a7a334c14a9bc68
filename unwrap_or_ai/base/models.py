"""
Backend-agnostic request models public surface.

This module re-exports the one-class-per-file implementations under
``unwrap_or_ai.base.models_parts`` to preserve a stable import path.
"""

from .models_parts.message import Message, Role
from .models_parts.recovery_request import RecoveryRequest

__all__ = ["Message", "Role", "RecoveryRequest"]
