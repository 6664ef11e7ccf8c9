"""Tests for the OS signal to shutdown-signal bridge.

These deliver real signals to the test process, so they must run on the
main thread (the default for pytest).
"""
from __future__ import annotations

import logging
import os
import signal
import threading
import unittest
from unittest.mock import patch

from sqs_processor.support.signals import SignalListener
from sqs_processor.support.state import ShutdownSignal


def _noop_handler(signum, frame) -> None:
    pass


class SignalListenerTest(unittest.TestCase):
    def setUp(self) -> None:
        self.previous = {sig: signal.getsignal(sig) for sig in (signal.SIGTERM, signal.SIGINT)}
        # Known handlers so restoration can be asserted and a stray signal stays harmless
        signal.signal(signal.SIGTERM, _noop_handler)
        signal.signal(signal.SIGINT, _noop_handler)
        self.shutdown = ShutdownSignal()
        self.listener = SignalListener(self.shutdown)

    def tearDown(self) -> None:
        self.listener.close()
        for sig, handler in self.previous.items():
            signal.signal(sig, handler)

    def test_sigterm_requests_shutdown(self) -> None:
        self.listener.start()

        os.kill(os.getpid(), signal.SIGTERM)

        self.assertTrue(self.shutdown.wait(5.0))
        self.assertEqual(self.listener.received, signal.SIGTERM)
        self.assertIn("SIGTERM", self.shutdown.reason or "")

    def test_repeated_sigint_is_tolerated(self) -> None:
        self.listener.start()

        os.kill(os.getpid(), signal.SIGINT)
        self.assertTrue(self.shutdown.wait(5.0))
        # a second Ctrl-C must not raise KeyboardInterrupt while draining
        os.kill(os.getpid(), signal.SIGINT)
        self.listener.close()

        self.assertEqual(self.listener.received, signal.SIGINT)
        self.assertFalse(self.listener.is_alive())

    def test_listener_failure_is_logged_without_requesting_shutdown(self) -> None:
        with patch.object(self.shutdown, "request", side_effect=RuntimeError("listener broke")):
            with self.assertLogs("sqs_processor.support.signals", level="ERROR") as logs:
                self.listener.start()
                os.kill(os.getpid(), signal.SIGTERM)
                self.listener._thread.join(5.0)  # type: ignore[union-attr]

        self.assertFalse(self.listener.is_alive())
        self.assertFalse(self.shutdown.is_set())
        self.assertIn("Error in signal handler", logs.output[-1])
        self.assertEqual(logs.records[-1].levelno, logging.ERROR)

    def test_close_restores_previous_handlers_and_joins(self) -> None:
        self.listener.start()
        self.assertIs(signal.getsignal(signal.SIGTERM).__self__, self.listener)  # type: ignore[union-attr]

        self.listener.close()

        self.assertIs(signal.getsignal(signal.SIGTERM), _noop_handler)
        self.assertIs(signal.getsignal(signal.SIGINT), _noop_handler)
        self.assertFalse(self.listener.is_alive())
        self.assertFalse(self.shutdown.is_set())

    def test_close_is_idempotent(self) -> None:
        self.listener.start()

        self.listener.close()
        self.listener.close()

        self.assertFalse(self.listener.is_alive())

    def test_close_without_start(self) -> None:
        self.listener.close()

        self.assertIs(signal.getsignal(signal.SIGTERM), _noop_handler)

    def test_start_twice_rejected(self) -> None:
        self.listener.start()

        with self.assertRaises(RuntimeError):
            self.listener.start()

    def test_start_off_main_thread_fails(self) -> None:
        errors = []

        def start() -> None:
            try:
                SignalListener(ShutdownSignal()).start()
            except ValueError as exc:
                errors.append(exc)

        thread = threading.Thread(target=start)
        thread.start()
        thread.join()

        self.assertEqual(len(errors), 1)


if __name__ == "__main__":
    unittest.main()
