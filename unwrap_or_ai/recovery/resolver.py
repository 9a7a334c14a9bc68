"""Recovery resolver: decide between returning, recovering and applying the policy.

State machine (per resolution)::

    EVALUATING ──value──▶ RETURNED
         │
         └─failure──▶ AWAITING_RECOVERY ──backend ok──▶ RECOVERED
                                  └──backend/config error──▶ UNRECOVERED

On a value nothing else happens: the context factory is not called, no
schema is derived and the backend client is not touched. On a failure the
context is built, the schema for the target type is derived and exactly one
backend request is made. ``UNRECOVERED`` applies the policy:

- ``PROPAGATE``: the original outcome is returned unchanged.
- ``ABORT``: ``RecoveryAbortedError`` is raised with the recovery error as
  ``__cause__``.

The original failure is logged at warning level in both cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Union

from ..backend.client import BackendClient
from ..base.constants import DEFAULT_SYSTEM_INSTRUCTION
from ..base.errors import BackendError, ConfigurationError, ErrorCode, RecoveryAbortedError, SchemaDerivationError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import RecoveryRequest
from ..context import CallContext
from ..schema import derive_schema
from .outcome import Outcome
from .policy import RecoveryPolicy

ContextFactory = Callable[[], CallContext]


class RecoveryState(str, Enum):
    EVALUATING = "evaluating"
    RETURNED = "returned"
    AWAITING_RECOVERY = "awaiting_recovery"
    RECOVERED = "recovered"
    UNRECOVERED = "unrecovered"


_TERMINAL = frozenset({RecoveryState.RETURNED, RecoveryState.RECOVERED, RecoveryState.UNRECOVERED})


@dataclass
class RecoveryTrace:
    """Diagnostic record of one resolution.

    Attributes:
        function: Name of the recovered callable, when known.
        state: Current (finally: terminal) state.
        reason: The original failure reason, ``None`` for an absent value.
        recovery_error: The backend or configuration error, if recovery failed.
        transitions: Every state entered, in order.
    """

    function: Optional[str] = None
    state: RecoveryState = RecoveryState.EVALUATING
    reason: Any = None
    recovery_error: Optional[BaseException] = None
    transitions: List[RecoveryState] = field(default_factory=lambda: [RecoveryState.EVALUATING])

    def advance(self, state: RecoveryState) -> None:
        if self.state in _TERMINAL:
            raise RuntimeError(f"resolution already finished in state {self.state.value}")
        self.state = state
        self.transitions.append(state)

    @property
    def finished(self) -> bool:
        return self.state in _TERMINAL


class RecoveryResolver:
    """Turn failed outcomes into recovered ones through a backend client."""

    def __init__(
        self,
        client: BackendClient,
        policy: Union[RecoveryPolicy, str, None] = None,
        model: Optional[str] = None,
        system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION,
    ) -> None:
        """``policy=None`` uses the configured default (``propagate`` unless
        ``UNWRAP_OR_AI_POLICY`` or the config file says otherwise)."""
        self.client = client
        self.policy = RecoveryPolicy.coerce(policy)
        self.model = model
        self.system_instruction = system_instruction
        self._logger = get_logger("recovery")

    # ----- public API -----

    def resolve(self, outcome: Outcome[Any], target: Any, context_factory: Optional[ContextFactory] = None, *, function: Optional[str] = None) -> Outcome[Any]:
        return self.resolve_with_trace(outcome, target, context_factory, function=function)[0]

    async def aresolve(self, outcome: Outcome[Any], target: Any, context_factory: Optional[ContextFactory] = None, *, function: Optional[str] = None) -> Outcome[Any]:
        result, _ = await self.aresolve_with_trace(outcome, target, context_factory, function=function)
        return result

    def resolve_with_trace(
        self,
        outcome: Outcome[Any],
        target: Any,
        context_factory: Optional[ContextFactory] = None,
        *,
        function: Optional[str] = None,
    ) -> Tuple[Outcome[Any], RecoveryTrace]:
        """Resolve ``outcome`` and return it together with its trace.

        Raises:
            RecoveryAbortedError: recovery failed under the ``ABORT`` policy.
            SchemaDerivationError: ``target`` cannot be described as a schema.
        """
        trace = RecoveryTrace(function=function)
        if self._returned(outcome, trace):
            return outcome, trace
        try:
            request = self._prepare(outcome, target, context_factory, trace)
        except ConfigurationError as err:
            return self._unrecovered(outcome, trace, err, self.model), trace
        try:
            value = self.client.send(request)
        except (BackendError, ConfigurationError) as err:
            return self._unrecovered(outcome, trace, err, request.model), trace
        return self._recovered(outcome, trace, value, request.model), trace

    async def aresolve_with_trace(
        self,
        outcome: Outcome[Any],
        target: Any,
        context_factory: Optional[ContextFactory] = None,
        *,
        function: Optional[str] = None,
    ) -> Tuple[Outcome[Any], RecoveryTrace]:
        """Async variant of :meth:`resolve_with_trace`; the backend call is awaited."""
        trace = RecoveryTrace(function=function)
        if self._returned(outcome, trace):
            return outcome, trace
        try:
            request = self._prepare(outcome, target, context_factory, trace)
        except ConfigurationError as err:
            return self._unrecovered(outcome, trace, err, self.model), trace
        try:
            value = await self.client.asend(request)
        except (BackendError, ConfigurationError) as err:
            return self._unrecovered(outcome, trace, err, request.model), trace
        return self._recovered(outcome, trace, value, request.model), trace

    # ----- state transitions -----

    def _log_ctx(self, trace: RecoveryTrace, model: Optional[str] = None) -> LogContext:
        return LogContext(backend=self.client.backend_name, model=model, function=trace.function)

    def _returned(self, outcome: Outcome[Any], trace: RecoveryTrace) -> bool:
        if not outcome.has_value():
            return False
        trace.advance(RecoveryState.RETURNED)
        normalized_log_event(
            self._logger,
            "recovery.returned",
            self._log_ctx(trace),
            phase="finalize",
            emitted=False,
            family=outcome.family,
            level=logging.DEBUG,
        )
        return True

    def _prepare(
        self,
        outcome: Outcome[Any],
        target: Any,
        context_factory: Optional[ContextFactory],
        trace: RecoveryTrace,
    ) -> RecoveryRequest:
        trace.reason = outcome.reason
        trace.advance(RecoveryState.AWAITING_RECOVERY)
        if target is None:
            raise SchemaDerivationError(
                f"no recovery target type for {trace.function or 'this call'}; pass target= or annotate the return type"
            )
        schema = derive_schema(target)
        if context_factory is not None:
            call_ctx = context_factory()
        else:
            call_ctx = CallContext(function=trace.function or "<unknown>")
        if trace.function is None:
            trace.function = call_ctx.function
        prompt = call_ctx.with_reason(outcome.reason).render_prompt()
        request = self.client.build_request(self.system_instruction, prompt, self.model, schema)
        normalized_log_event(
            self._logger,
            "recovery.start",
            self._log_ctx(trace, request.model),
            phase="start",
            attempt=1,
            family=outcome.family,
            schema_name=schema.name,
        )
        return request

    def _recovered(self, outcome: Outcome[Any], trace: RecoveryTrace, value: Any, model: str) -> Outcome[Any]:
        trace.advance(RecoveryState.RECOVERED)
        normalized_log_event(
            self._logger,
            "recovery.recovered",
            self._log_ctx(trace, model),
            phase="finalize",
            attempt=1,
            emitted=True,
            family=outcome.family,
            original_failure=_describe(outcome.reason),
        )
        return outcome.recovered(value)

    def _unrecovered(
        self,
        outcome: Outcome[Any],
        trace: RecoveryTrace,
        err: Union[BackendError, ConfigurationError],
        model: Optional[str],
    ) -> Outcome[Any]:
        trace.recovery_error = err
        trace.advance(RecoveryState.UNRECOVERED)
        code: ErrorCode = err.code
        normalized_log_event(
            self._logger,
            "recovery.unrecovered",
            self._log_ctx(trace, model),
            phase="finalize",
            attempt=1,
            emitted=False,
            error_code=code.value,
            policy=self.policy.value,
            family=outcome.family,
            original_failure=_describe(outcome.reason),
            recovery_error=str(err),
            level=logging.WARNING,
        )
        if self.policy is RecoveryPolicy.ABORT:
            raise RecoveryAbortedError(outcome.reason, function=trace.function, recovery_error=err) from err
        return outcome


def _describe(reason: Any) -> str:
    if reason is None:
        return "value absent"
    if isinstance(reason, BaseException):
        return f"{type(reason).__name__}: {reason}"
    return str(reason)


__all__ = ["RecoveryResolver", "RecoveryState", "RecoveryTrace", "ContextFactory"]
