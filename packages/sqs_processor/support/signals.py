"""Bridge SIGTERM/SIGINT into the in-process shutdown signal.

Python runs signal handlers on the main thread between bytecodes, so the
handler installed here only enqueues the signal number. A dedicated listener
thread blocks on that queue, logs the notification and requests shutdown.
`close()` restores the previous handlers and joins the thread, so the
subscription never outlives the worker.
"""
from __future__ import annotations

import logging
import queue
import signal
import threading
from types import FrameType
from typing import Any, Dict, Iterable, Optional

from sqs_processor.support.state import ShutdownSignal

logger = logging.getLogger(__name__)

TERM_SIGNALS = (signal.SIGTERM, signal.SIGINT)

_STOP = None


class SignalListener:
    """Listen for termination signals on a background thread.

    Usage:
        listener = SignalListener(shutdown)
        listener.start()     # main thread only
        ...
        listener.close()
    """

    def __init__(
        self,
        shutdown: ShutdownSignal,
        signals: Iterable[signal.Signals] = TERM_SIGNALS,
        join_timeout: float = 5.0,
    ) -> None:
        self._shutdown = shutdown
        self._signals = tuple(signals)
        self._join_timeout = join_timeout
        self._queue: "queue.SimpleQueue[Optional[int]]" = queue.SimpleQueue()
        self._previous: Dict[int, Any] = {}
        self._thread: Optional[threading.Thread] = None
        self._closed = False
        self.received: Optional[int] = None

    def _on_signal(self, signum: int, frame: Optional[FrameType]) -> None:
        # SimpleQueue.put is reentrant, safe to call from a signal handler
        self._queue.put(signum)

    def start(self) -> None:
        """Install handlers and start the listener thread.

        Raises:
            ValueError: called from a thread other than the main thread.
        """
        if self._thread is not None:
            raise RuntimeError("SignalListener already started")
        for sig in self._signals:
            self._previous[sig] = signal.signal(sig, self._on_signal)
        self._thread = threading.Thread(target=self._run, name="signal-listener", daemon=True)
        self._thread.start()
        logger.debug("Listening for signals: %s", ", ".join(signal.Signals(s).name for s in self._signals))

    def _run(self) -> None:
        try:
            signum = self._queue.get()
            if signum is _STOP:
                return
            self.received = signum
            logger.info("Received signal: %s", signal.Signals(signum).name)
            self._shutdown.request(f"signal {signal.Signals(signum).name}")
        except Exception:
            # A failed listener leaves the shutdown signal untouched
            logger.exception("Error in signal handler")

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def close(self) -> None:
        """Revoke the subscription and join the listener thread. Idempotent."""
        if self._closed:
            return
        self._closed = True
        for sig, previous in self._previous.items():
            signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()
        if self._thread is not None:
            self._queue.put(_STOP)
            self._thread.join(self._join_timeout)
            if self._thread.is_alive():
                logger.warning("Signal listener did not stop within %.1fs", self._join_timeout)
        logger.debug("Signal listener closed")
