"""
Structured logging for the session and identity core.

Library modules only call get_logger() / get_error_tracker(); handlers are
installed once by the Streamlit entry point through initialize_logging().
"""

import json
import logging
import logging.handlers
import time
import traceback
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit as st

from config.app_config import AppConfig, get_config


# Attributes every LogRecord carries; anything else was passed through ``extra``
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {'message', 'asctime', 'taskName'}

_TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s [%(filename)s:%(lineno)d]'


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line: base fields, exception details and any extra fields
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        extra = {
            key: value for key, value in vars(record).items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, ensure_ascii=False, default=str)


class StreamlitLogHandler(logging.Handler):
    """
    Echo warnings and errors into the page while developing
    """

    def emit(self, record: logging.LogRecord):
        try:
            if record.levelno >= logging.ERROR:
                st.error(f"🚨 {record.getMessage()}")
            else:
                st.warning(f"⚠️ {record.getMessage()}")
        except Exception:
            self.handleError(record)


def setup_logging(config: Optional[AppConfig] = None) -> logging.Logger:
    """
    Install console, file and (in development) page handlers on the root logger

    Args:
        config: Application configuration (defaults to the global config)

    Returns:
        logging.Logger: Configured root logger
    """
    config = config or get_config()
    level = getattr(logging, config.logging.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Readable lines while debugging, JSON otherwise
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter(_TEXT_FORMAT) if config.debug else StructuredFormatter()
    )
    root_logger.addHandler(console_handler)

    if config.logging.enable_file_logging:
        log_path = Path(config.logging.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    if config.debug and config.environment == "development":
        page_handler = StreamlitLogHandler()
        page_handler.setLevel(logging.WARNING)
        root_logger.addHandler(page_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger (pass __name__)"""
    return logging.getLogger(name)


def mask_email(email: Optional[str]) -> str:
    """
    Mask an email address for log output ("jane@acme.com" -> "j***@acme.com")

    Args:
        email: Address to mask

    Returns:
        Masked address, or "<empty>" when nothing was given
    """
    if not email:
        return "<empty>"
    local, sep, domain = email.partition("@")
    if not sep:
        return f"{local[:1]}***"
    return f"{local[:1]}***@{domain}"


@contextmanager
def log_execution_time(logger: logging.Logger, operation: str, **extra_fields):
    """
    Time a block and log its duration; failures are logged and re-raised

    Args:
        logger: Logger instance
        operation: Name of the timed block
        **extra_fields: Additional fields to include in the record
    """
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(f"{operation} failed after {time.perf_counter() - started:.3f}s: {e}", extra={
            "operation": operation,
            "duration_seconds": time.perf_counter() - started,
            "status": "error",
            "error_type": type(e).__name__,
            **extra_fields
        })
        raise
    else:
        logger.debug(f"{operation} took {time.perf_counter() - started:.3f}s", extra={
            "operation": operation,
            "duration_seconds": time.perf_counter() - started,
            "status": "success",
            **extra_fields
        })


def log_auth_event(logger: logging.Logger, event_type: str, success: bool, **details):
    """
    Log session and identity events (login, register, logout, profile update)

    Args:
        logger: Logger instance
        event_type: Type of event (e.g., "login", "register")
        success: Whether the operation succeeded
        **details: Additional event details (never raw credentials)
    """
    level = logging.INFO if success else logging.WARNING
    logger.log(level, f"Auth event: {event_type} ({'ok' if success else 'failed'})", extra={
        "event_type": "auth_event",
        "auth_event_type": event_type,
        "success": success,
        **details
    })


def log_link_event(logger: logging.Logger, from_state: str, to_state: str, **details):
    """
    Log ad-account link state transitions

    Args:
        logger: Logger instance
        from_state: State before the transition
        to_state: State after the transition
        **details: Additional event details
    """
    logger.info(f"Ad-account link: {from_state} -> {to_state}", extra={
        "event_type": "link_event",
        "from_state": from_state,
        "to_state": to_state,
        **details
    })


class ErrorTracker:
    """
    Counts unexpected errors per (type, context) and logs each with its traceback
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.error_counts: Dict[str, int] = {}
        self.last_error: Optional[Dict[str, Any]] = None

    def track_error(self, error: Exception, context: str = "", **extra_info):
        """
        Count and log an error

        Args:
            error: Exception that occurred
            context: Operation where it occurred
            **extra_info: Additional fields for the record
        """
        error_key = f"{type(error).__name__}:{context}"
        self.error_counts[error_key] = self.error_counts.get(error_key, 0) + 1
        self.last_error = {
            "key": error_key,
            "message": str(error),
            "at": datetime.now().isoformat(),
        }

        self.logger.error(f"Error in {context}: {error}", extra={
            "event_type": "error",
            "error_type": type(error).__name__,
            "context": context,
            "error_count": self.error_counts[error_key],
            **extra_info
        }, exc_info=error)

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Error statistics for the diagnostics panel

        Returns:
            Dict with totals, per-key counts and the most recent error
        """
        return {
            "total_errors": sum(self.error_counts.values()),
            "unique_errors": len(self.error_counts),
            "error_breakdown": dict(self.error_counts),
            "last_error": self.last_error,
        }


_logging_configured = False
_error_tracker: Optional[ErrorTracker] = None


def initialize_logging(config: Optional[AppConfig] = None) -> ErrorTracker:
    """
    Configure handlers once per process and return the error tracker

    Args:
        config: Application configuration (defaults to the global config)

    Returns:
        ErrorTracker: Global error tracker instance
    """
    global _logging_configured
    if not _logging_configured:
        setup_logging(config)
        _logging_configured = True
    return get_error_tracker()


def get_error_tracker() -> ErrorTracker:
    """
    Get the error tracker without reconfiguring handlers

    Library code calls this; only the application entry point calls
    initialize_logging().

    Returns:
        ErrorTracker: Global error tracker
    """
    global _error_tracker
    if _error_tracker is None:
        _error_tracker = ErrorTracker(logging.getLogger())
    return _error_tracker
