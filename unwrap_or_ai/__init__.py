"""unwrap_or_ai package

Synthesize a plausible fallback value with an AI backend when a fallible or
optional computation fails.

Public API (re-exported):
    - Version: ``__version__``
    - Outcomes: ``Success``, ``Failure``, ``Present``, ``Absent``,
      ``Result``, ``Option``, ``as_outcome``
    - Entry points: ``resolve_or_recover``, ``aresolve_or_recover``,
      ``unwrap_or_recover``, ``aunwrap_or_recover``
    - Context capture: ``recoverable``, ``source_of``
    - Resolver: ``RecoveryResolver``, ``RecoveryPolicy``, ``RecoveryState``
    - Backend: ``BackendClient``, ``create_backend``
    - Schema: ``derive_schema``, ``TargetSchema``
    - Errors: ``BackendError``, ``ConfigurationError``, ``ErrorCode``,
      ``RecoveryAbortedError``, ``OriginalFailureError``,
      ``SchemaDerivationError``

Example::

    from unwrap_or_ai import Result, Success, Failure, recoverable, unwrap_or_recover

    @recoverable
    def fetch_user(user_id: int) -> Result[User, str]:
        \"\"\"Load a user from the database.\"\"\"
        return Failure(f"User with id {user_id} not found in database")

    user = unwrap_or_recover(fetch_user, 42)
"""

from .backend import BackendClient, UnknownBackendError, create_backend
from .base.errors import (
    BackendError,
    ConfigurationError,
    ErrorCode,
    OriginalFailureError,
    RecoveryAbortedError,
    SchemaDerivationError,
)
from .base.logging import configure_logger, get_logger
from .config.keys import EnvKeyProvider, KeyProvider, StaticKeyProvider
from .context import CallContext, recoverable, source_of
from .recovery import (
    Absent,
    Failure,
    Option,
    Outcome,
    Present,
    RecoveryPolicy,
    RecoveryResolver,
    RecoveryState,
    RecoveryTrace,
    Result,
    Success,
    aresolve_or_recover,
    as_outcome,
    aunwrap_or_recover,
    resolve_or_recover,
    set_default_resolver,
    unwrap_or_recover,
)
from .schema import TargetSchema, derive_schema

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Outcome",
    "Success",
    "Failure",
    "Present",
    "Absent",
    "Result",
    "Option",
    "as_outcome",
    "resolve_or_recover",
    "aresolve_or_recover",
    "unwrap_or_recover",
    "aunwrap_or_recover",
    "set_default_resolver",
    "recoverable",
    "source_of",
    "CallContext",
    "RecoveryResolver",
    "RecoveryPolicy",
    "RecoveryState",
    "RecoveryTrace",
    "BackendClient",
    "UnknownBackendError",
    "create_backend",
    "KeyProvider",
    "EnvKeyProvider",
    "StaticKeyProvider",
    "TargetSchema",
    "derive_schema",
    "BackendError",
    "ConfigurationError",
    "ErrorCode",
    "RecoveryAbortedError",
    "OriginalFailureError",
    "SchemaDerivationError",
    "configure_logger",
    "get_logger",
]
