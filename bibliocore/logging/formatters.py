"""
Custom log formatters.

Limitations:
- Extra fields passed to the logger (via extra=...) are not included.
"""

import json
import logging
from datetime import datetime


class JsonFormatter(logging.Formatter):
    """
    Format log records as one JSON object per line.

    Each line carries the timestamp, level, logger name and message, plus the
    formatted traceback when the record has exception info.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)
