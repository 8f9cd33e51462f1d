"""JSON logs with service and wallet metadata"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from savelo_gateway.config import settings
from savelo_gateway.utils.units import short_address

plan_logger = logging.getLogger("savelo_gateway.plans")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds timestamp, level, service and a shortened wallet to every record"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name
        wallet = log_record.get("wallet")
        if isinstance(wallet, str) and wallet:
            log_record["wallet_short"] = short_address(wallet)


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to stdout as JSON"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    # httpx logs every ledger request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_plan_event(
    event: str,
    wallet: str,
    plan_id: Optional[int],
    duration_ms: float,
    request_id: str = "unknown",
    **fields: Any,
) -> None:
    """One record per confirmed create/pay, keyed by `event`"""
    plan_logger.info(
        event,
        extra={
            "event": event,
            "request_id": request_id,
            "wallet": wallet,
            "plan_id": plan_id,
            "duration_ms": round(duration_ms, 2),
            **fields,
        },
    )
