import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional
import os

_STANDARD_RECORD_FIELDS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
    'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'taskName', 'message', 'asctime',
    'request_id', 'event',
))


class StructuredJSONFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging compatible with Railway and ELK stacks"""

    def __init__(self, service_name: str = "galaxy-map"):
        super().__init__()
        self.service_name = service_name
        self.hostname = os.environ.get('RAILWAY_SERVICE_NAME', 'localhost')

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "service": self.service_name,
            "hostname": self.hostname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, 'request_id'):
            log_entry["request_id"] = record.request_id
        if hasattr(record, 'event'):
            log_entry["event"] = record.event

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        # Everything passed through extra= that is not a standard attribute
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_FIELDS and not key.startswith('_'):
                log_entry.setdefault("extra", {})[key] = value

        return json.dumps(log_entry, default=str, separators=(',', ':'))


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development"""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s | %(levelname)8s | %(name)20s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(
    level: str = "INFO",
    use_json: bool = None,
    service_name: str = "galaxy-map",
    log_file: Optional[str] = None,
) -> None:
    """Setup console (and optionally file) logging for the Galaxy Map service"""

    if use_json is None:
        # Use JSON in production (Railway) or when explicitly requested
        use_json = (
            os.environ.get('RAILWAY_ENVIRONMENT') == 'production' or
            os.environ.get('LOG_FORMAT', '').lower() == 'json'
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = StructuredJSONFormatter(service_name) if use_json else DevelopmentFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        # File transport always writes JSON lines so it can be shipped as-is
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(StructuredJSONFormatter(service_name))
        root_logger.addHandler(file_handler)

    configure_galaxy_loggers(level)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "log_format": "json" if use_json else "development",
            "log_level": level,
            "log_file": log_file,
        }
    )


def configure_galaxy_loggers(level: str) -> None:
    """Configure specific loggers for Galaxy Map components"""

    logging.getLogger('galaxy_map').setLevel(getattr(logging, level.upper()))

    # Suppress noisy third-party loggers
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
