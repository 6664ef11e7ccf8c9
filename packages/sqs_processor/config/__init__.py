from sqs_processor.config.config import (
    BackoffConfig,
    HealthConfig,
    LoggingConfig,
    SqsConfig,
    WorkerConfig,
    load_config,
)

__all__ = [
    "BackoffConfig",
    "HealthConfig",
    "LoggingConfig",
    "SqsConfig",
    "WorkerConfig",
    "load_config",
]
