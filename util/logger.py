import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, MutableMapping, Tuple
from config.settings import settings

logging.captureWarnings(True)

TEXT_FMT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
DATE_FMT = "%Y-%m-%dT%H:%M:%S%z"


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[37m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Colorize a copy so file handlers sharing the record stay plain
        lvl = record.levelname
        record.levelname = f"{self.COLORS.get(lvl, self.RESET)}{lvl}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = lvl


class JobLogAdapter(logging.LoggerAdapter):
    """
    Prefix every line with the owning job so interleaved requests stay readable:
      job=import-1700000000000-ab12cd34 import.batch.failed size=10000
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"job={self.extra['job_id']} {msg}", kwargs


def job_logger(logger: logging.Logger, job_id: str) -> JobLogAdapter:
    return JobLogAdapter(logger, {"job_id": job_id})


def init_logger() -> logging.Logger:
    """
    Idempotent logger init:
    - Always logs to stdout.
    - Writes to LOG_DIR/LOG_FILE_NAME only when settings.LOG_TO_FILE is True.
    - Rotates file logs by size (maxBytes/backupCount in settings).
    - Respects settings.LOG_LEVEL.
    """
    root = logging.getLogger()
    if getattr(root, "_kvmanager_inited", False):
        return logging.getLogger(settings.LOGGER_NAME)

    level = getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO)
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(ColoredFormatter(TEXT_FMT, datefmt=DATE_FMT))
    root.addHandler(ch)

    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        fh = RotatingFileHandler(
            os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(TEXT_FMT, datefmt=DATE_FMT))
        root.addHandler(fh)

    # Every store call is an httpx request; keep those at WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)

    root._kvmanager_inited = True  # type: ignore[attr-defined]
    logger = logging.getLogger(settings.LOGGER_NAME)
    logger.debug("Logger initialized", extra={"component": "bootstrap"})
    return logger
