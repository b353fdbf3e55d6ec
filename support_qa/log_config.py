"""
Logging setup.

Every module logs through ``logging.getLogger(__name__)``; this module only
configures the root handler once at start-up, either as plain text or as
JSON lines via python-json-logger.

Usage:
    from support_qa.log_config import setup_logging

    setup_logging("INFO", json_format=True)
    logger.info("Segment indexed", extra={"document_id": 3, "segment": 1})
"""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Chatty third-party loggers kept at WARNING
_NOISY_LOGGERS = ("httpx", "httpcore", "chromadb")


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        json_format: Emit JSON records instead of plain text
    """
    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JsonFormatter(
            JSON_FORMAT,
            rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        ))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
