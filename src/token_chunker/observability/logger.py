"""Logging setup for the chunker.

``get_logger`` installs a single stderr handler on the root logger, either
human-readable or JSON Lines (:class:`JSONFormatter`). Library modules
never configure logging; they call ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Attributes every LogRecord has; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JSONFormatter(logging.Formatter):
    """Formats each record as a single-line JSON object.

    Keys are ``timestamp`` (UTC, ISO-8601), ``level``, ``logger`` and
    ``message``, then every ``extra=`` field (stringified when it is not
    JSON-serialisable), then ``exception`` when a traceback is attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, _jsonable(value))
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in payload
        )
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _parse_level(log_level: Optional[str]) -> int:
    if not log_level:
        return logging.INFO
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(
    name: str = "token-chunker",
    log_level: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure root logging and return the logger called *name*.

    Follows ``logging.basicConfig``: once the root logger has a handler,
    later calls change neither level nor format.

    Args:
        name: Logger name.
        log_level: Level name such as ``"INFO"``; unknown names mean INFO.
        json_format: Emit JSON Lines instead of plain text.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    logging.basicConfig(level=_parse_level(log_level), handlers=[handler])

    # tiktoken fetches encoding files over HTTP on first use
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger(name)
