"""Outcome types, policies, the resolver and the orchestration entry points."""

from .entry import (
    aresolve_or_recover,
    aunwrap_or_recover,
    default_resolver,
    infer_target,
    resolve_or_recover,
    set_default_resolver,
    unwrap,
    unwrap_or_recover,
)
from .outcome import Absent, Failure, Option, Outcome, Present, Result, Success, as_outcome
from .policy import RecoveryPolicy
from .resolver import RecoveryResolver, RecoveryState, RecoveryTrace

__all__ = [
    "Outcome",
    "Success",
    "Failure",
    "Present",
    "Absent",
    "Result",
    "Option",
    "as_outcome",
    "RecoveryPolicy",
    "RecoveryResolver",
    "RecoveryState",
    "RecoveryTrace",
    "resolve_or_recover",
    "aresolve_or_recover",
    "unwrap_or_recover",
    "aunwrap_or_recover",
    "unwrap",
    "infer_target",
    "default_resolver",
    "set_default_resolver",
]
