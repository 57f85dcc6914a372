import logging
import sys
import time
from typing import Any

try:
    from pythonjsonlogger.json import JsonFormatter
except ImportError:  # python-json-logger < 3.1
    from pythonjsonlogger.jsonlogger import JsonFormatter

# chatty third-party loggers, capped at WARNING
_NOISY_LOGGERS = ("httpx", "httpcore", "psycopg.pool")


class UTCJsonFormatter(JsonFormatter):
    converter = time.gmtime


def setup_logging(level: str = "INFO", static_fields: dict[str, Any] | None = None) -> None:
    """
    One JSON line per record on stdout. `static_fields` (e.g. app name and
    environment) are stamped on every record.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
    handler.setFormatter(UTCJsonFormatter(fmt, static_fields=static_fields or {}))
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel("WARNING")
