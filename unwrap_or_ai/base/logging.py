"""Structured logging for the recovery library.

Every module logs through a child of the shared ``unwrap_or_ai`` logger,
which owns the only console handler (JSON lines on stderr by default). The
level is read from ``UNWRAP_OR_AI_LOG_LEVEL`` each time a logger is handed
out, so it can be changed without restarting the process.

Events are emitted as one JSON object per record. ``normalized_log_event``
adds the canonical keys every backend and recovery event carries:
``structured``, ``phase``, ``attempt``, ``error_code`` (only when set) and
``emitted``.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Iterator, Optional, Union

from .log_support import JsonFormatter, LogContext

BASE_LOGGER_NAME = "unwrap_or_ai"
LOG_LEVEL_ENV = "UNWRAP_OR_AI_LOG_LEVEL"
PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# rotating file: 10 MB per file, 5 backups
_FILE_MAX_BYTES = 10 * 1024 * 1024
_FILE_BACKUPS = 5

_INIT_MARK = "_unwrap_or_ai_ready"
_CONSOLE_MARK = "_unwrap_or_ai_console_handler"
_FILE_MARK = "_unwrap_or_ai_file_handler"
_SUPPRESSED_MARK = "_unwrap_or_ai_suppressed"

_LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

REQUIRED_NORMALIZED_KEYS = ("structured", "phase", "attempt", "error_code", "emitted")


def _parse_level(value: Optional[str], default: int = logging.INFO) -> int:
    """Map a level name (any case, ``WARN`` accepted) to its number; ``default`` otherwise."""
    if not value:
        return default
    return _LEVEL_NAMES.get(value.strip().upper(), default)


def _formatter(json_mode: bool) -> logging.Formatter:
    if json_mode:
        return JsonFormatter()
    return logging.Formatter(PLAIN_FORMAT)


def _console_handlers(logger: logging.Logger) -> list:
    return [h for h in logger.handlers if getattr(h, _CONSOLE_MARK, False)]


def _new_console(json_mode: bool, level: int) -> logging.StreamHandler:
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(json_mode))
    console.setLevel(level)
    setattr(console, _CONSOLE_MARK, True)
    return console


def _stream_closed(handler: logging.Handler) -> bool:
    stream = getattr(handler, "stream", None)
    return stream is None or getattr(stream, "closed", False)


def _base_logger(json_mode: bool, level: int) -> logging.Logger:
    base = logging.getLogger(BASE_LOGGER_NAME)
    wanted = _parse_level(os.getenv(LOG_LEVEL_ENV), default=level)

    if not getattr(base, _INIT_MARK, False):
        base.handlers[:] = [_new_console(json_mode, wanted)]
        base.propagate = False
        base.setLevel(wanted)
        setattr(base, _INIT_MARK, True)
        return base

    if base.level != wanted:
        base.setLevel(wanted)
    for console in _console_handlers(base):
        suppressed = getattr(console, _SUPPRESSED_MARK, False)
        if _stream_closed(console):
            # flushing a closed stream raises, so swap the handler out
            base.removeHandler(console)
            with contextlib.suppress(Exception):
                console.close()
            replacement = _new_console(json_mode, console.level if suppressed else wanted)
            setattr(replacement, _SUPPRESSED_MARK, suppressed)
            base.addHandler(replacement)
            continue
        if not suppressed:
            console.setLevel(wanted)
        # pytest capture replaces sys.stderr between tests
        with contextlib.suppress(Exception):
            console.setStream(sys.stderr)
    return base


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return ``name`` as a logger under ``unwrap_or_ai``.

    Names without the ``unwrap_or_ai.`` prefix get it added. Child loggers
    have no handlers; they propagate to the base logger.
    """
    base = _base_logger(json_mode, level)
    if name == BASE_LOGGER_NAME:
        return base
    qualified = name if name.startswith(BASE_LOGGER_NAME + ".") else f"{BASE_LOGGER_NAME}.{name}"
    child = logging.getLogger(qualified)
    child.setLevel(logging.NOTSET)
    child.propagate = True
    return child


def configure_logger(
    *,
    level: Union[int, str, None] = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
) -> logging.Logger:
    """Adjust the shared logger at runtime and return it.

    Parameters
    ----------
    level:
        Numeric level or level name. ``None`` keeps the current level.
    file_path:
        Also write to this file through a rotating handler. ``None`` removes a
        file handler added by an earlier call.
    json_mode:
        JSON formatter (default) or plain text for the file handler.
    """
    base = _base_logger(json_mode, logging.INFO)

    if level is not None:
        numeric = _parse_level(level, default=base.level) if isinstance(level, str) else level
        base.setLevel(numeric)
        for h in base.handlers:
            h.setLevel(numeric)

    file_handlers = [h for h in base.handlers if getattr(h, _FILE_MARK, False)]
    target = os.path.abspath(os.path.expanduser(file_path)) if file_path else None

    keep = None
    for h in file_handlers:
        if target is not None and getattr(h, "baseFilename", None) == target:
            keep = h
            continue
        base.removeHandler(h)
        h.close()

    if target is None:
        return base

    if keep is None:
        folder = os.path.dirname(target)
        if folder:
            os.makedirs(folder, exist_ok=True)
        keep = RotatingFileHandler(target, maxBytes=_FILE_MAX_BYTES, backupCount=_FILE_BACKUPS, encoding="utf-8")
        setattr(keep, _FILE_MARK, True)
        base.addHandler(keep)
    keep.setFormatter(_formatter(json_mode))
    keep.setLevel(base.level)
    return base


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: Optional[LogContext] = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Log ``event`` as a single JSON object.

    ``ctx`` contributes backend/model/function keys. ``None`` field values are
    dropped unless ``keep_none`` is set. Values JSON cannot encode are
    stringified.
    """
    payload: Dict[str, Any] = {"event": event}
    if ctx is not None:
        payload.update(ctx.to_dict())
    for key, value in fields.items():
        if value is None and not keep_none:
            continue
        payload[key] = value
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


def normalized_log_event(
    logger: logging.Logger,
    event: str,
    ctx: Optional[LogContext] = None,
    *,
    phase: str,
    attempt: Optional[int] = None,
    error_code: Optional[str] = None,
    emitted: Optional[bool] = None,
    structured: bool = True,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Log ``event`` with the normalized key set plus ``extra_fields``.

    Extra fields set to ``None`` are skipped and never replace a normalized
    key that already has a value.
    """
    fields: Dict[str, Any] = {
        "structured": structured,
        "phase": phase,
        "attempt": attempt,
        "emitted": emitted,
    }
    if error_code is not None:
        fields["error_code"] = error_code
    for key, value in extra_fields.items():
        if value is None or fields.get(key) is not None:
            continue
        fields[key] = value
    log_event(logger, event, ctx, level=level, keep_none=True, **fields)


@contextlib.contextmanager
def suppressed_console() -> Iterator[None]:
    """Silence the console handler for the duration of the block.

    The CLI uses this so stdout/stderr only carry its own output unless
    ``--verbose`` is given. File handlers keep logging.
    """
    base = logging.getLogger(BASE_LOGGER_NAME)
    consoles = _console_handlers(base)
    saved = {id(h): h.level for h in consoles}
    for h in consoles:
        setattr(h, _SUPPRESSED_MARK, True)
        h.setLevel(logging.CRITICAL + 1)
    try:
        yield
    finally:
        # handlers replaced inside the block fall back to the logger level
        for h in _console_handlers(base):
            setattr(h, _SUPPRESSED_MARK, False)
            h.setLevel(saved.get(id(h), base.level))


__all__ = [
    "LogContext",
    "get_logger",
    "configure_logger",
    "log_event",
    "normalized_log_event",
    "suppressed_console",
    "REQUIRED_NORMALIZED_KEYS",
    "BASE_LOGGER_NAME",
]
