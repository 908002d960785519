"""
Structured logging configuration.

JSON lines in production, readable text in development. Either way the
training context attached through `log_fields` (child id, mode, arc, path)
ends up in the output, so one grep finds a child's whole day.

Usage:
    logger.info("Plan built", extra=log_fields(child_id=child_id, mode="PEAK"))
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from core.config import settings

SERVICE_NAME = "training-engine"


def log_fields(**fields: Any) -> Dict[str, Dict[str, Any]]:
    """Wrap context for the `extra=` argument of a logging call."""
    return {"extra_fields": {k: v for k, v in fields.items() if v is not None}}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "extra_fields", None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Context never overwrites the base keys
        for key, value in _extra_fields(record).items():
            log_data.setdefault(key, value)

        return json.dumps(log_data, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text with the structured context appended as key=value pairs."""

    def __init__(self):
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        context = " ".join(f"{k}={v}" for k, v in sorted(fields.items()))
        return f"{line} [{context}]"


def build_formatter(log_format: Optional[str] = None, environment: Optional[str] = None) -> logging.Formatter:
    log_format = log_format or settings.LOG_FORMAT
    environment = environment or settings.ENVIRONMENT
    if log_format == "json" or environment == "production":
        return JSONFormatter()
    return ContextTextFormatter()


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Overrides LOG_LEVEL
        log_format: "json" or "text", overrides LOG_FORMAT
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    formatter = build_formatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Set levels for noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root_logger


# Initialize logging on import
setup_logging()
