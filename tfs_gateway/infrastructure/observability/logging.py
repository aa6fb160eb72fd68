"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "tfs-gateway"


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


def log_ranking(
    request_id: str,
    vehicle_count: int,
    succeeded: bool,
    duration_ms: float,
) -> None:
    """Log structured ranking outcome for analysis"""
    logging.info(
        "Ranking completed",
        extra={
            "request_id": request_id,
            "step": "ranking_complete",
            "ranking_outcome": "ranked" if succeeded else "failed",
            "vehicle_count": vehicle_count,
            "duration_ms": duration_ms,
        },
    )


def log_score(request_id: str, score: int, band: str) -> None:
    logging.info(
        "Score calculated",
        extra={"request_id": request_id, "step": "score", "score": score, "band": band},
    )
