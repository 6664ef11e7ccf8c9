"""Configuration dataclasses for the SQS processor.

All settings are read from the environment once at startup by `load_config`
and are immutable afterwards. The resulting `WorkerConfig` is owned by the
worker and handed by reference to the queue client and probe server.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from sqs_processor.errors import ConfigError

LOG_LEVELS = ("trace", "debug", "info", "warn", "warning", "error", "critical")
LOG_FORMATS = ("text", "json")

# SQS service limits for ReceiveMessage.
MAX_MESSAGES_RANGE = (1, 10)
WAIT_TIME_RANGE = (0, 20)
VISIBILITY_TIMEOUT_RANGE = (0, 43200)


@dataclass(frozen=True)
class SqsConfig:
    """AWS SQS configuration.

    :param queue_url: URL of the queue to poll
    :param aws_region: AWS region of the queue
    :param max_messages: maximum number of messages per receive call (1-10)
    :param wait_time_seconds: long-poll wait time (0-20)
    :param visibility_timeout: visibility timeout applied to received messages
    :param endpoint_url: optional endpoint override (LocalStack, ElasticMQ)
    :param aws_access_key_id: optional explicit access key
    :param aws_secret_access_key: optional explicit secret key
    """
    queue_url: str
    aws_region: str
    max_messages: int = 10
    wait_time_seconds: int = 20
    visibility_timeout: int = 30
    endpoint_url: Optional[str] = None
    aws_access_key_id: Optional[str] = field(default=None, repr=False)
    aws_secret_access_key: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class HealthConfig:
    """Probe server bind address."""
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass(frozen=True)
class LoggingConfig:
    """Log level (trace, debug, info, warn, error) and output format (text, json)."""
    level: str = "info"
    format: str = "text"


@dataclass(frozen=True)
class BackoffConfig:
    """Delay policy applied after a failed poll.

    The defaults give a flat one second delay. Set `multiplier` above 1.0 for
    exponential growth capped at `max_seconds`, and `jitter_seconds` to add a
    random component.
    """
    initial_seconds: float = 1.0
    multiplier: float = 1.0
    max_seconds: float = 30.0
    jitter_seconds: float = 0.0


@dataclass(frozen=True)
class WorkerConfig:
    """Top-level configuration snapshot."""
    sqs: SqsConfig
    health: HealthConfig = field(default_factory=HealthConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    backoff: BackoffConfig = field(default_factory=BackoffConfig)


def _required(environ: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = environ.get(name, "").strip()
        if value:
            return value
    raise ConfigError(f"{names[0]} is not set")


def _optional(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(name, "").strip()
    return value or None


def _int(environ: Mapping[str, str], name: str, default: int, bounds: Optional[tuple] = None) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if bounds is not None:
        low, high = bounds
        if not low <= value <= high:
            raise ConfigError(f"{name} must be between {low} and {high}, got {value}")
    return value


def _float(environ: Mapping[str, str], name: str, default: float, minimum: float = 0.0) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _choice(environ: Mapping[str, str], name: str, default: str, choices: tuple) -> str:
    value = environ.get(name, "").strip().lower() or default
    if value not in choices:
        raise ConfigError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> WorkerConfig:
    """Build a `WorkerConfig` from environment variables.

    Args:
        environ: Mapping to read from. Defaults to `os.environ`.

    Raises:
        ConfigError: a required variable is missing or a value is out of range.
    """
    env = os.environ if environ is None else environ

    sqs = SqsConfig(
        queue_url=_required(env, "SQS_QUEUE_URL"),
        aws_region=_required(env, "AWS_REGION", "AWS_DEFAULT_REGION"),
        max_messages=_int(env, "SQS_MAX_MESSAGES", 10, MAX_MESSAGES_RANGE),
        wait_time_seconds=_int(env, "SQS_WAIT_TIME_SECONDS", 20, WAIT_TIME_RANGE),
        visibility_timeout=_int(env, "SQS_VISIBILITY_TIMEOUT", 30, VISIBILITY_TIMEOUT_RANGE),
        endpoint_url=_optional(env, "SQS_ENDPOINT_URL"),
        aws_access_key_id=_optional(env, "AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=_optional(env, "AWS_SECRET_ACCESS_KEY"),
    )
    health = HealthConfig(
        host=env.get("HEALTH_HOST", "").strip() or "0.0.0.0",
        port=_int(env, "HEALTH_PORT", 8080, (0, 65535)),
    )
    logging_config = LoggingConfig(
        level=_choice(env, "LOG_LEVEL", "info", LOG_LEVELS),
        format=_choice(env, "LOG_FORMAT", "text", LOG_FORMATS),
    )

    initial = _float(env, "POLL_BACKOFF_SECONDS", 1.0)
    backoff = BackoffConfig(
        initial_seconds=initial,
        multiplier=_float(env, "POLL_BACKOFF_MULTIPLIER", 1.0, minimum=1.0),
        max_seconds=_float(env, "POLL_BACKOFF_MAX_SECONDS", max(30.0, initial)),
        jitter_seconds=_float(env, "POLL_BACKOFF_JITTER_SECONDS", 0.0),
    )
    if backoff.max_seconds < backoff.initial_seconds:
        raise ConfigError("POLL_BACKOFF_MAX_SECONDS must be >= POLL_BACKOFF_SECONDS")

    return WorkerConfig(sqs=sqs, health=health, logging=logging_config, backoff=backoff)
