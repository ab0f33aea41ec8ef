"""
Logging setup for harness runs.

Provides:
- Structured logging with JSON format and the current scenario as correlation
- Plain console format for interactive runs
- Context management for the scenario name

Usage:
    from harness.core.observability import configure_logging, set_scenario_id

    configure_logging("DEBUG", structured=True)
"""

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime

# ============================================================================
# Context Variables
# ============================================================================

# Scenario currently executing on this thread - links all logs for one scenario
_scenario_id_ctx: ContextVar[str] = ContextVar("scenario_id", default="")


def get_scenario_id() -> str:
    """Get the current scenario id from context."""
    return _scenario_id_ctx.get()


def set_scenario_id(scenario_id: str) -> None:
    """Set the scenario id for the current thread."""
    _scenario_id_ctx.set(scenario_id)


# ============================================================================
# Logging Configuration
# ============================================================================

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
    "getMessage",
    "exc_info",
    "exc_text",
    "stack_info",
}

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] [%(threadName)s] %(name)s: %(message)s"


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - logger: Logger name
    - message: Log message
    - scenario: Current scenario (if available)
    - thread: Worker thread name
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "thread": record.threadName,
        }

        scenario_id = get_scenario_id()
        if scenario_id:
            log_entry["scenario"] = scenario_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        # These come from logger.info("msg", extra={"key": "value"})
        extra_keys = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_logging(level: str = "INFO", structured: bool = False) -> None:
    """
    Configure the root logger for a harness run.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Emit JSON lines instead of the plain console format
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    root_logger.addHandler(handler)

    # httpx logs every request at INFO; the API client already does
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
