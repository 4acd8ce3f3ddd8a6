import json
import logging
from datetime import UTC, datetime

from epliteclient.config import Settings

# Package logger; module loggers propagate to it.
logger = logging.getLogger("epliteclient")


class JsonFormatter(logging.Formatter):
    """Formatter to output one JSON object per log line."""

    def format(self, record):
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "path": record.pathname,
            "lineno": record.lineno,
        }
        if hasattr(record, "props"):
            log_record.update(record.props)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Configure the package logger based on settings."""
    if settings is None:
        settings = Settings()
    handler = logging.StreamHandler()

    if settings.log_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    # Reset handlers to avoid duplication if called multiple times
    logger.handlers = []
    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger
