import logging
import time
from typing import Optional

from pythonjsonlogger import jsonlogger

from .settings import get_settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        # Required fields from the format string arrive as None
        log_record["timestamp"] = log_record.get("timestamp") or time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime())
        log_record["level"] = log_record.get("level") or record.levelname
        log_record["logger"] = record.name
        # Country of the quote being computed, injected via logger extra
        pais = getattr(record, 'pais', None)
        if pais:
            log_record["pais"] = pais


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a JSON handler to the package logger (idempotent)."""
    logger = logging.getLogger("cotizador")
    if not any(isinstance(h.formatter, CustomJsonFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level or get_settings().log_level)
    logger.propagate = False
    return logger
