"""Root logger configuration for the worker process."""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from pythonjsonlogger.json import JsonFormatter

from sqs_processor.config.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s %(threadName)s"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")


def parse_level(level: str) -> int:
    """Map a configured level name (case-insensitive) to a logging level."""
    try:
        return _LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def configure_logging(config: Optional[LoggingConfig] = None, stream: Optional[TextIO] = None) -> logging.Handler:
    """Install a single stream handler on the root logger.

    Any handlers previously installed by this function are replaced, so calling
    it twice (e.g. once with defaults, again after config loads) is safe.
    """
    config = config or LoggingConfig()
    level = parse_level(config.level)

    handler = logging.StreamHandler(stream or sys.stderr)
    if config.format == "json":
        handler.setFormatter(JsonFormatter(JSON_FIELDS))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler.set_name("sqs_processor")

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "sqs_processor":
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # AWS SDK debug output is only useful when explicitly asked for
    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return handler
