"""Structured Logging: render-scoped log fields, JSON and text formatters.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Render fields (render_id, type_handle, entity_id, cache_event, error_code, link_count)
      surfaced when present; absent fields are omitted, never logged as null
    - Every log line emitted inside a cache context carries that context's render_id
    - Text format tags the line with the render id so one render can be grepped end to end

Design Decisions:
    - render_extra builds the `extra=` dict from a CacheContext; call sites never read
      context_id themselves and a None context simply yields no render_id
    - JSONFormatter on stdlib logging: no extra dependency, host app keeps its own handlers
    - setup_logging called once by the host application on startup
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any

RENDER_FIELDS = (
    "render_id", "type_handle", "entity_id", "cache_event", "error_code",
    "link_count",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s%(render_tag)s: %(message)s"


def render_extra(context: Any = None, **fields: Any) -> dict[str, Any]:
    """`extra=` mapping for a log call made on behalf of one render."""
    extra = {key: val for key, val in fields.items() if val is not None}
    context_id = getattr(context, "context_id", None)
    if context_id is not None:
        extra["render_id"] = context_id
    if "type_handle" in extra:
        extra["type_handle"] = str(extra["type_handle"])
    return extra


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in RENDER_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        # entity ids may be tuples from first-pair identities
        return json.dumps(log, ensure_ascii=False, default=str)


class RenderTextFormatter(logging.Formatter):
    """Human-readable format with a ` [render=<id>]` tag for render-scoped lines."""

    def __init__(self):
        super().__init__(_TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        render_id = record.__dict__.get("render_id")
        record.render_tag = f" [render={render_id}]" if render_id else ""
        return super().format(record)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging. Returns the installed handler so callers can detach it."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else RenderTextFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
