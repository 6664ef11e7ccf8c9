"""Delay policy applied between failed polls."""
from __future__ import annotations

import logging
import random
from typing import Callable, Optional

from sqs_processor.config.config import BackoffConfig

module_logger = logging.getLogger(__name__)


class Backoff:
    """Compute the delay to insert after a poll failure.

    With the default config this is a flat one second after every failure.
    A multiplier above 1.0 grows the delay per consecutive failure up to
    `max_seconds`; `reset()` after any successful poll starts over.
    """

    def __init__(
        self,
        config: Optional[BackoffConfig] = None,
        rand: Optional[Callable[[float, float], float]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or BackoffConfig()
        self.consecutive_failures = 0
        self._base_delay = 0.0
        self._rand = rand or random.uniform
        self._logger = logger or module_logger

    def next_delay(self) -> float:
        """Record a failure and return the delay in seconds before retrying."""
        self.consecutive_failures += 1
        cfg = self.config
        # Running delay capped at max_seconds; stays finite however long the outage
        if self.consecutive_failures == 1:
            self._base_delay = min(cfg.initial_seconds, cfg.max_seconds)
        else:
            self._base_delay = min(self._base_delay * cfg.multiplier, cfg.max_seconds)
        delay = self._base_delay
        if cfg.jitter_seconds > 0:
            delay += self._rand(0.0, cfg.jitter_seconds)
        self._logger.debug(
            "Backoff: failure %d, waiting %.2fs before next poll", self.consecutive_failures, delay
        )
        return delay

    def reset(self) -> None:
        if self.consecutive_failures:
            self._logger.info("Backoff: poll succeeded after %d failures; resetting", self.consecutive_failures)
        self.consecutive_failures = 0
        self._base_delay = 0.0
