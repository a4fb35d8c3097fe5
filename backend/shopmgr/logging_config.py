"""Configure application logging using the Python standard library.

Console output goes to stderr so command output on stdout stays clean for
piping. When a log directory is configured, a rotating file handler records
the same events as JSON lines (timestamp, level, module, message, plus any
fields passed through ``extra={"extra": {...}}``).
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone

_HANDLER_MARK = "_shopmgr_handler"


class JsonFormatter(logging.Formatter):
    """Format log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            log_record.update(extra)
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


class StderrHandler(logging.StreamHandler):
    """StreamHandler that writes to whatever sys.stderr is at emit time."""

    def __init__(self, level=logging.NOTSET):
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


class ConsoleFormatter(logging.Formatter):
    """Plain ``LEVEL message key=value`` lines for the terminal."""

    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname} {record.getMessage()}"
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict) and extra:
            line += " " + " ".join(f"{k}={v}" for k, v in extra.items())
        return line


def configure_logging(level="WARNING", log_dir=None) -> None:
    """Configure the ``shopmgr`` logger with console and optional rotating file output.

    Args:
        level: Level name or number for the package logger.
        log_dir: Directory for ``shopmgr.log``. Created if missing. ``None``
            skips the file handler.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger("shopmgr")
    logger.setLevel(level)
    # Replace handlers from an earlier call (tests build several apps)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = StderrHandler()
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(level)
    setattr(console_handler, _HANDLER_MARK, True)
    logger.addHandler(console_handler)

    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=os.path.join(log_dir, "shopmgr.log"),
            maxBytes=5 * 1024 * 1024,  # 5 MB per log file
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(JsonFormatter())
        file_handler.setLevel(level)
        setattr(file_handler, _HANDLER_MARK, True)
        logger.addHandler(file_handler)
