"""Structured logging configuration."""

import logging
import sys

from wildlife_triage.core.config import settings


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured log output."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured data."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "request_id"):
            log_data["request_id"] = record.request_id
        if hasattr(record, "strategy"):
            log_data["strategy"] = record.strategy
        if hasattr(record, "species_slug"):
            log_data["species_slug"] = record.species_slug

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Simple key=value format for readability
        parts = [f"{k}={v}" for k, v in log_data.items()]
        return " ".join(parts)


def setup_logging() -> None:
    """Configure application logging."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if settings.is_dev:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = StructuredFormatter()

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class DecisionLogger:
    """Logger specifically for routing decisions."""

    def __init__(self) -> None:
        self.logger = get_logger("decisions")

    def log(
        self,
        decision: str,
        urgency: str,
        strategy: str,
        species_slug: str | None = None,
        after_hours_note: str | None = None,
    ) -> None:
        """Log a routing decision."""
        self.logger.info(
            f"DECISION: decision={decision} urgency={urgency} "
            f"species={species_slug or 'unknown'} note={after_hours_note or '-'}",
            extra={"strategy": strategy},
        )


decision_logger = DecisionLogger()
