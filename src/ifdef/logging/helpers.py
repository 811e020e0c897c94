from __future__ import annotations

"""Logger naming, base configuration and structured diagnostics for ifdef.

This module provides:
    - JsonLogFormatter: one JSON object per record, carrying the record's
      `context` dict (diagnostic location, IO trace data) as `ctx`.
    - setup_base_logger: (re)configure the single handler on 'ifdef'.
    - get_logger: namespaced loggers ('ifdef.*').
    - log_diagnostic: report a Diagnostic with its location as context.
    - trace_io: IO tracing gated by IFDEF_TRACE_IO.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from ifdef.core.interfaces.logging import LoggerLikeProtocol
from ifdef.core.models import Diagnostic

BASE_LOGGER = "ifdef"

# Marks the handler installed by setup_base_logger so later calls reuse it.
_HANDLER_FLAG = "_ifdef_handler"
_PLAIN_FORMAT = "%(levelname)s: %(message)s"


class JsonLogFormatter(logging.Formatter):
    """Emit logs as compact JSON.

    Fields:
        - ts: ISO-8601 UTC timestamp, millisecond precision.
        - level: Log level name.
        - logger: Logger name (e.g., 'ifdef.cli').
        - msg: Formatted message string.
        - version: ifdef.__version__.
        - ctx: The record's `context` dict, when present and non-empty.
    """

    def format(self, record: logging.LogRecord) -> str:
        from ifdef import __version__

        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "ts": ts.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "version": __version__,
        }
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict) and ctx:
            payload["ctx"] = ctx
        return json.dumps(payload, ensure_ascii=False, default=str)


def _owned_handler(base: logging.Logger) -> Optional[logging.StreamHandler]:
    for h in base.handlers:
        if getattr(h, _HANDLER_FLAG, False):
            return h  # type: ignore[return-value]
    return None


def setup_base_logger(
    *, json_logs: bool = False, level: int = logging.INFO, stream: Optional[TextIO] = None
) -> logging.Logger:
    """Configure the base 'ifdef' logger and return it.

    The first call installs one stream handler; later calls update that
    handler's formatter (and stream, when given) instead of stacking more
    handlers, so a process can switch between text and JSON output.
    """
    base = logging.getLogger(BASE_LOGGER)
    base.setLevel(level)
    base.propagate = False

    handler = _owned_handler(base)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        setattr(handler, _HANDLER_FLAG, True)
        base.addHandler(handler)
    elif stream is not None:
        handler.setStream(stream)

    handler.setFormatter(JsonLogFormatter() if json_logs else logging.Formatter(_PLAIN_FORMAT))
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a namespaced logger under 'ifdef'."""
    if not name or name == BASE_LOGGER:
        return logging.getLogger(BASE_LOGGER)
    if name.startswith(BASE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{BASE_LOGGER}.{name}")


def diagnostic_context(diag: Diagnostic) -> Dict[str, Any]:
    """Structured location of *diag*; unset fields are left out."""
    ctx: Dict[str, Any] = {
        "severity": diag.severity,
        "file": diag.file,
        "line": diag.line,
        "column": diag.column,
        "length": diag.length,
    }
    return {k: v for k, v in ctx.items() if v is not None}


def log_diagnostic(logger: LoggerLikeProtocol, diag: Diagnostic) -> None:
    """Log *diag* at its severity with `diagnostic_context` attached."""
    emit = logger.error if diag.severity == "error" else logger.warning
    emit("%s", diag.format(), extra={"context": diagnostic_context(diag)})


def is_trace_io_enabled() -> bool:
    return os.getenv("IFDEF_TRACE_IO") == "1"


def trace_io(logger: LoggerLikeProtocol, message: str, **ctx: Any) -> None:
    """Debug-level IO trace, emitted only when IFDEF_TRACE_IO=1."""
    if not is_trace_io_enabled():
        return
    if ctx:
        logger.debug("%s | ctx=%r", message, ctx, extra={"context": ctx})
    else:
        logger.debug("%s", message)
