"""
Structured JSON logging for the bank service.

Every record carries level, logger and service name. Card numbers must
never reach the logs in clear: any ``card_number`` field is reduced to
its last four digits before serialization.
"""

import logging
import sys
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from bank.cards import mask_card_number

SENSITIVE_KEYS = ("card_number",)


class ServiceJsonFormatter(JsonFormatter):
    """JSON formatter that tags records with the service name and scrubs card data."""

    def __init__(self, *args, service_name: str = "bank", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self.service_name
        self.scrub_sensitive_data(log_record)

    @staticmethod
    def scrub_sensitive_data(log_record: Dict[str, Any]) -> Dict[str, Any]:
        for key in SENSITIVE_KEYS:
            if key in log_record:
                log_record[key] = mask_card_number(log_record[key])
        return log_record


def setup_logging(level: str = "INFO", service_name: str = "bank") -> None:
    """
    Route the root logger to stdout as JSON.

    Safe to call more than once: the handler installed by a previous call
    is replaced rather than duplicated.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ServiceJsonFormatter(
            "%(asctime)s %(message)s",
            rename_fields={"asctime": "timestamp", "message": "msg"},
            service_name=service_name,
        )
    )
    handler.set_name("bank-json")

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == "bank-json":
            root_logger.removeHandler(existing)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root_logger.info("Structured logging initialized", extra={"service_name": service_name})
