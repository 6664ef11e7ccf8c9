"""Exception hierarchy for the SQS processor.

Startup errors (`ConfigError`, `QueueClientError`) are fatal and surface as a
non-zero exit code. Steady-state errors (`QueuePollError`, `QueueDeleteError`)
are logged by the processing loop and never terminate it.
"""
from __future__ import annotations


class SqsProcessorError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(SqsProcessorError, ValueError):
    """Raised when required configuration is missing or invalid."""


class QueueClientError(SqsProcessorError):
    """Raised when the SQS client cannot be constructed."""


class QueuePollError(SqsProcessorError):
    """Raised when a receive call against the queue fails."""


class QueueDeleteError(SqsProcessorError):
    """Raised when deleting a received message fails."""
