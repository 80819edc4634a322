"""
Logging configuration.

Plain text output for development, JSON lines (python-json-logger) when
``LOG_FORMAT=json``.
"""
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from infrastructure.config import Settings


class HotelJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with timestamp, level, logger and environment fields"""

    def __init__(self, *args, environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['environment'] = self.environment


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    formatter = "json" if settings.LOG_FORMAT.lower() == "json" else "standard"
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': HotelJsonFormatter,
                'fmt': '%(message)s',
                'environment': settings.ENVIRONMENT,
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': formatter,
                'stream': 'ext://sys.stdout',
            },
        },
        'root': {
            'handlers': ['console'],
            'level': settings.LOG_LEVEL.upper(),
        },
        'loggers': {
            'uvicorn.access': {'level': 'WARNING'},
        },
    }


def configure_logging(settings: Settings) -> None:
    logging.config.dictConfig(build_logging_config(settings))
    logging.getLogger(__name__).debug("Logging configured (format=%s)", settings.LOG_FORMAT)
