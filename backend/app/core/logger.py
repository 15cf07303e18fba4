import logging
import json
import os
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone

from app.core.config import settings

LOG_DIR = settings.LOG_DIR
os.makedirs(LOG_DIR, exist_ok=True)

# extra={} fields copied into the JSON record when present
CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "storage_key",
    "crop",
    "confidence",
    "error_type",
)

def json_formatter(record):
    log = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": record.levelname,
        "service": "yield-estimator",
        "logger": record.name,
        "message": record.getMessage(),
    }

    for field in CONTEXT_FIELDS:
        if hasattr(record, field):
            log[field] = getattr(record, field)

    if record.exc_info:
        log["exc_info"] = logging.Formatter().formatException(record.exc_info)

    return json.dumps(log, default=str)

class JSONFormatter(logging.Formatter):
    def format(self, record):
        return json_formatter(record)

logger = logging.getLogger("yield")
logger.setLevel(settings.LOG_LEVEL)

json_f = JSONFormatter()

file_handler = RotatingFileHandler(
    os.path.join(LOG_DIR, "app.json.log"),
    maxBytes=5 * 1024 * 1024,
    backupCount=5
)
file_handler.setLevel(settings.LOG_LEVEL)
file_handler.setFormatter(json_f)

console_handler = logging.StreamHandler()
console_handler.setLevel(settings.LOG_LEVEL)
console_handler.setFormatter(json_f)

if not logger.handlers:
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Child logger sharing the JSON handlers, e.g. get_logger("engine") -> "yield.engine"."""
    return logger.getChild(name)
