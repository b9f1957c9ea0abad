"""
Logging configuration shared by the CEP temperature services.

Provides centralized logging setup with consistent formatting across both
services. Log lines carry the request ID of the request being handled so that
gateway and resolver logs can be correlated.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional
from uuid import uuid4

# Context variable for request ID tracking across async calls
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class StructuredFormatter(logging.Formatter):
    """
    Log formatter that outputs one JSON object per line.

    Includes the request ID from context and any structured fields passed
    through ``extra={"extra_fields": {...}}``.
    """

    def __init__(self, service_name: str, datefmt: Optional[str] = None) -> None:
        super().__init__(datefmt=datefmt)
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON with structured fields.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        request_id = request_id_context.get()

        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable log formatter for development environments.

    Colors the level name and appends structured fields as ``key=value``.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        request_id = request_id_context.get()
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        log_parts = [
            self.formatTime(record, self.datefmt),
            f"{color}{record.levelname:8}{reset}",
            f"[{record.name}]",
        ]

        if request_id:
            log_parts.append(f"[req:{request_id[:8]}]")

        log_parts.append(record.getMessage())

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_parts.append(
                " ".join(f"{key}={value}" for key, value in extra_fields.items())
            )

        message = " ".join(log_parts)

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def setup_logging(
    log_level: str = "INFO",
    service_name: str = "cep-service",
    use_json: bool = False,
) -> logging.Logger:
    """
    Configure root logging for a service process.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Name of the service for log identification
        use_json: Use JSON structured logging instead of human-readable format

    Returns:
        Logger named after the service
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter: logging.Formatter
    if use_json:
        formatter = StructuredFormatter(service_name, datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = HumanReadableFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger = logging.getLogger(service_name)
    logger.setLevel(numeric_level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name for the logger (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name or "cep-service")


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set request ID in context.

    Args:
        request_id: Request ID to set, generates new UUID if None

    Returns:
        The request ID that was set
    """
    if request_id is None:
        request_id = str(uuid4())
    request_id_context.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    """Get current request ID from context, or None if not set."""
    return request_id_context.get()


def clear_request_id() -> None:
    """Clear request ID from context."""
    request_id_context.set(None)
