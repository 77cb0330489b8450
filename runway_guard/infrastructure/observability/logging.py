"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from runway_guard.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_evaluation(
    organization_id: str,
    user_id: str,
    alert_count: int,
    duration_ms: float,
    partial: bool = False,
    request_id: str | None = None,
) -> None:
    """Log structured threshold evaluation outcome"""
    logging.info(
        "Threshold evaluation completed",
        extra={
            "request_id": request_id,
            "organization_id": organization_id,
            "user_id": user_id,
            "step": "threshold_evaluation",
            "alert_count": alert_count,
            "partial": partial,
            "duration_ms": duration_ms,
        },
    )


def log_dispatch(user_id: str, channel: str, success: bool, error: str | None = None) -> None:
    """Log structured notification delivery outcome"""
    logging.log(
        logging.INFO if success else logging.WARNING,
        "Notification dispatched" if success else "Notification failed",
        extra={
            "user_id": user_id,
            "step": "notification_dispatch",
            "channel": channel,
            "delivery_outcome": "delivered" if success else "failed",
            "error": error,
        },
    )
