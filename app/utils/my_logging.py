# app/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
from app.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

# Loggers that only add noise outside of debugging
THIRD_PARTY_LOGGERS = ("sqlalchemy", "alembic", "uvicorn.access")


class CorrelationIdFilter(logging.Filter):
    """Default correlation_id for records logged outside a request"""

    def filter(self, record):
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


def setup_logging(verbose=True):
    """
    Configure root logging once per process.

    verbose=False keeps our own loggers at WARNING and silences
    third-party ones below ERROR.
    """
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO) if verbose else logging.WARNING

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.basicConfig(level=level, handlers=[handler])

    third_party_level = logging.WARNING if verbose and settings.DEBUG else logging.ERROR
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
