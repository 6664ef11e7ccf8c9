"""Shared lifecycle flags.

Both flags are written by exactly one role and read by any thread:

- `ReadinessState` is written only by the worker and read by the probe server.
- `ShutdownSignal` is written only by the signal listener (or a test) and read
  by the processing loop before every poll.

Instances are passed explicitly to every component that needs them.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class ReadinessState:
    """Thread-safe readiness flag. Starts not ready."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ready = False

    def set_ready(self, ready: bool) -> None:
        with self._lock:
            changed = self._ready != ready
            self._ready = ready
        if changed:
            logger.info("Readiness changed to %s", "ready" if ready else "not ready")

    def is_ready(self) -> bool:
        with self._lock:
            return self._ready


class ShutdownSignal:
    """Monotonic shutdown flag backed by `threading.Event`.

    Once requested it stays set for the life of the process. Repeated
    requests are harmless; only the first one is logged.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self.reason: Optional[str] = None

    def request(self, reason: str = "requested") -> None:
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
        logger.info("Shutdown requested (%s)", reason)

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until shutdown is requested or `timeout` elapses.

        Returns True if shutdown was requested.
        """
        return self._event.wait(timeout)
