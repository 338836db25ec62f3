"""
Structured JSON logging configuration.

Provides structured logging with channels (http, sessions, admission,
identity), request ID tracking, and context-rich log entries. All log output
is valid JSON written to stdout for container log aggregation.
"""

import logging
import json
import os
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

# Each incoming HTTP request gets a unique UUID, attached to every log entry
# produced while that request is handled.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CHANNELS = ["http", "sessions", "admission", "identity"]


class StructuredJsonFormatter(logging.Formatter):
    """
    Logging formatter that emits one JSON object per log line.

    Each entry contains:
    - timestamp: ISO 8601 timestamp in UTC
    - level: Log severity (INFO, WARNING, ERROR, DEBUG)
    - message: Human-readable log message
    - channel: Log source category (http, sessions, admission, identity)
    - context: Business context (request_id, session_id, student_id, ...)
    - extra: Additional metadata (ip, duration_ms, ...)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", record.name.split(".")[-1] if "." in record.name else "app"),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        return json.dumps(log_entry, default=str)


def setup_logging():
    """
    Configure the root logger and all channel-specific loggers.

    Channel loggers inherit the root stdout handler but keep distinct names
    so entries can be filtered by channel.
    """
    formatter = StructuredJsonFormatter()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logger = logging.getLogger(f"app.{channel}")
        logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Get a channel-specific logger (http, sessions, admission, identity)."""
    return logging.getLogger(f"app.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None):
    """
    Emit a structured log entry with business context and extra metadata.

    Args:
        logger: The channel logger to use
        level: Log level string (INFO, WARNING, ERROR, DEBUG)
        message: Human-readable log message
        context: Business context dict (session_id, student_id, owner_id)
        extra_data: Additional metadata dict (ip, duration_ms, code)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(
        log_level,
        message,
        extra={"context": context or {}, "extra_data": extra_data or {}, "channel": logger.name.split(".")[-1]}
    )


def generate_request_id() -> str:
    """Generate a new UUID for request tracking."""
    return str(uuid.uuid4())
