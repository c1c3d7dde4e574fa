"""
Centralized logging configuration for the money tracker backend.

Every Lambda function logs single-line JSON records so CloudWatch Logs
Insights can filter on fields such as ``owner_id`` or ``status_code``.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Formats log records as JSON objects, one per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logger(
    name: str, level: Optional[str] = None, structured: bool = True
) -> logging.Logger:
    """
    Set up a logger with consistent configuration.

    Args:
        name: Logger name (typically __name__)
        level: Log level; defaults to the LOG_LEVEL environment variable or INFO
        structured: Whether to use structured JSON logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers on warm starts
    if logger.handlers:
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)

    if structured:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def log_lambda_event(
    logger: logging.Logger, event: Dict[str, Any], context: Any
) -> None:
    """
    Log the incoming API Gateway event.

    Headers are not logged as a whole since they carry bearer tokens.
    """
    http = event.get("requestContext", {}).get("http", {})
    logger.info(
        "Lambda invocation started",
        extra={
            "request_id": getattr(context, "aws_request_id", "unknown"),
            "function_name": getattr(context, "function_name", "unknown"),
            "http_method": http.get("method") or event.get("httpMethod"),
            "path": event.get("rawPath") or event.get("path"),
            "user_agent": (event.get("headers") or {}).get("user-agent"),
            "source_ip": http.get("sourceIp"),
        },
    )


def log_lambda_response(
    logger: logging.Logger,
    response: Dict[str, Any],
    execution_time_ms: Optional[float] = None,
) -> None:
    """Log the status code and size of the outgoing response."""
    logger.info(
        "Lambda invocation completed",
        extra={
            "status_code": response.get("statusCode"),
            "execution_time_ms": execution_time_ms,
            "response_size": len(str(response.get("body", ""))),
        },
    )


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log errors with additional context.

    Args:
        logger: Logger instance
        error: Exception that occurred
        context: Additional context information (operation, resource ids, ...)
    """
    extra = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "occurred_at": datetime.now(timezone.utc).isoformat(),
    }

    if context:
        extra.update(context)

    logger.error(f"Error occurred: {str(error)}", extra=extra, exc_info=True)
