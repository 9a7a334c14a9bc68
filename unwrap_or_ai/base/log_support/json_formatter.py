"""JSON line formatter for the ``unwrap_or_ai`` console and file handlers.

``log_event`` already renders its message as a JSON object; the formatter
merges that object into the record envelope instead of nesting it as a
string. Attributes passed through ``extra=`` are copied as well.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

ISO = "%Y-%m-%dT%H:%M:%S.%fZ"

# attributes every LogRecord has; anything else came from ``extra=``
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "taskName"}


def _structured_message(text: str) -> Dict[str, Any]:
    if not text.startswith("{"):
        return {}
    try:
        parsed = json.loads(text)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


class JsonFormatter(logging.Formatter):
    """Render a record as ``{"ts", "level", "logger", "msg", ...event keys}``."""

    def format(self, record: logging.LogRecord) -> str:
        text = record.getMessage()
        out: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(ISO),
            "level": record.levelname,
            "logger": record.name,
            "msg": text,
        }
        out.update(_structured_message(text))
        if record.exc_info:
            out["exc"] = self.formatException(record.exc_info)
        for key, value in vars(record).items():
            if key.startswith("_") or key in _STANDARD_ATTRS:
                continue
            out.setdefault(key, value)
        return json.dumps(out, ensure_ascii=False, default=str)


__all__ = ["JsonFormatter", "ISO"]
