"""JSON structured logging configuration."""

import logging
import sys
from typing import TextIO

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "feedwatch"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")
NOISY_LOGGERS = ("httpx", "httpcore")


def build_formatter() -> JsonFormatter:
    return JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
        static_fields={"service": SERVICE_NAME},
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def setup_logging(log_level: str = "INFO", stream: TextIO | None = None) -> None:
    """Send every log record as one JSON line to *stream* (stdout by default).

    The CLI passes stderr so its own stdout output stays parseable.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(build_formatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in UVICORN_LOGGERS:
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.addHandler(handler)
        uv_logger.propagate = False

    # Request lines from the HTTP client only at WARNING and above
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
