import logging
import os
import sys
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOGGER_NAME = "codemocklab"
LOG_DIR = Path(os.getenv("CODEMOCKLAB_LOG_DIR", Path(__file__).parent / "logs"))

# every record carries the id of the request that produced it
LINE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(correlation_id)s | %(message)s"
ERROR_LINE_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(correlation_id)s | "
    "%(pathname)s:%(lineno)d | %(funcName)s | %(message)s"
)
DATEFMT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("uvicorn.access", "asyncio", "urllib3", "pdfminer", "multipart")

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


def _rotating_handler(file_name: str, level: int, fmt: str, keep_days: int):
    handler = TimedRotatingFileHandler(
        filename=str(LOG_DIR / file_name),
        when="midnight",
        backupCount=keep_days,
        encoding="utf8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATEFMT))
    return handler


def configure_logging(level: str = None) -> logging.Logger:
    """
    Attach console and rotating file handlers to the application logger.

    Safe to call more than once; handlers are only added the first time.
    ``app.log`` keeps two weeks of INFO and above, ``error.log`` a month of
    errors with source locations.
    """
    app_logger = logging.getLogger(LOGGER_NAME)
    if app_logger.handlers:
        return app_logger

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    console.setFormatter(logging.Formatter(LINE_FORMAT, datefmt=DATEFMT))

    handlers = [
        console,
        _rotating_handler("app.log", logging.INFO, LINE_FORMAT, keep_days=14),
        _rotating_handler("error.log", logging.ERROR, ERROR_LINE_FORMAT, keep_days=30),
    ]
    correlation_filter = CorrelationIdFilter()
    for handler in handlers:
        handler.addFilter(correlation_filter)
        app_logger.addHandler(handler)

    app_logger.setLevel(logging.DEBUG)
    app_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return app_logger


logger = configure_logging()


def get_logger(name: str) -> logging.Logger:
    """Child logger sharing the application handlers."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logger.getChild(name)
