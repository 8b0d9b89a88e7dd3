"""
Core Logging Module

Centralized logging configuration with trace_id injection.
A ContextVar carries the trace_id of the current request through the async
verification fan-out, so upstream lookup logs can be tied back to the
request that triggered them.

Usage:
    from freight_match.core.logging import setup_logging, set_trace_id
    import logging

    setup_logging()
    set_trace_id("abc123")
    logging.getLogger(__name__).info("Verifying carrier")
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional


# ==================== Context Variables ====================

TRACE_ID: ContextVar[str] = ContextVar("trace_id", default="-")


def set_trace_id(trace_id: Optional[str]) -> str:
    """
    Set the trace_id for the current context.

    A missing or blank value generates a fresh uuid4 hex id.

    Returns:
        The trace_id now in effect
    """
    trace_id = (trace_id or "").strip() or uuid.uuid4().hex
    TRACE_ID.set(trace_id)
    return trace_id


def get_trace_id() -> str:
    """Return the current trace_id or "-" if none is set."""
    return TRACE_ID.get()


# ==================== Log Filters ====================

class TraceIdFilter(logging.Filter):
    """Logging filter that copies the context trace_id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


# ==================== Logging Setup ====================

_logging_setup_done = False


def setup_logging(log_level: Optional[str] = None, force: bool = False) -> None:
    """
    Configure application-wide logging with trace_id support.

    Idempotent unless force=True.

    Args:
        log_level: Optional level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        force: Reconfigure even if already set up
    """
    global _logging_setup_done

    if _logging_setup_done and not force:
        return

    if log_level is None:
        from freight_match.core.config import settings
        log_level = settings.LOG_LEVEL

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    if force:
        root_logger.handlers.clear()

    if not root_logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)

        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] [%(trace_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        console_handler.setFormatter(formatter)
        console_handler.addFilter(TraceIdFilter())

        root_logger.addHandler(console_handler)

    _logging_setup_done = True

    logging.getLogger(__name__).info(f"Logging configured with level: {log_level.upper()}")


def reset_logging() -> None:
    """Reset setup state; call setup_logging(force=True) afterwards to reconfigure."""
    global _logging_setup_done
    _logging_setup_done = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger, making sure logging has been configured first.

    Args:
        name: Logger name (usually __name__)
    """
    if not _logging_setup_done:
        setup_logging()

    return logging.getLogger(name)
