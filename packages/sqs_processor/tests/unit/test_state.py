"""Tests for the shared lifecycle flags and the backoff policy."""
from __future__ import annotations

import threading
import unittest
from unittest.mock import Mock

from sqs_processor.config.config import BackoffConfig
from sqs_processor.support.backoff import Backoff
from sqs_processor.support.state import ReadinessState, ShutdownSignal


class ReadinessStateTest(unittest.TestCase):
    def test_ready_state_transitions(self) -> None:
        readiness = ReadinessState()

        self.assertFalse(readiness.is_ready())
        readiness.set_ready(True)
        self.assertTrue(readiness.is_ready())
        readiness.set_ready(False)
        self.assertFalse(readiness.is_ready())

    def test_concurrent_readers_see_written_value(self) -> None:
        readiness = ReadinessState()
        readiness.set_ready(True)
        seen = []

        def reader() -> None:
            for _ in range(1000):
                seen.append(readiness.is_ready())

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(seen), 4000)
        self.assertTrue(all(seen))


class ShutdownSignalTest(unittest.TestCase):
    def test_initially_clear(self) -> None:
        shutdown = ShutdownSignal()

        self.assertFalse(shutdown.is_set())
        self.assertFalse(shutdown.wait(0))

    def test_request_is_monotonic_and_idempotent(self) -> None:
        shutdown = ShutdownSignal()

        with self.assertLogs("sqs_processor.support.state", level="INFO") as logs:
            shutdown.request("first")
            shutdown.request("second")

        self.assertTrue(shutdown.is_set())
        self.assertEqual(shutdown.reason, "first")
        self.assertEqual(len(logs.records), 1)

    def test_wait_wakes_when_requested_from_another_thread(self) -> None:
        shutdown = ShutdownSignal()
        timer = threading.Timer(0.05, shutdown.request, args=("timer",))
        timer.start()
        try:
            self.assertTrue(shutdown.wait(5.0))
        finally:
            timer.cancel()


class BackoffTest(unittest.TestCase):
    def test_default_is_flat_one_second(self) -> None:
        backoff = Backoff()

        self.assertEqual([backoff.next_delay() for _ in range(5)], [1.0] * 5)
        self.assertEqual(backoff.consecutive_failures, 5)

    def test_exponential_growth_is_capped(self) -> None:
        backoff = Backoff(BackoffConfig(initial_seconds=0.5, multiplier=2.0, max_seconds=3.0))

        self.assertEqual([backoff.next_delay() for _ in range(5)], [0.5, 1.0, 2.0, 3.0, 3.0])

    def test_delay_stays_capped_through_long_outage(self) -> None:
        backoff = Backoff(BackoffConfig(initial_seconds=1.0, multiplier=2.0, max_seconds=30.0))

        delays = [backoff.next_delay() for _ in range(1500)]

        self.assertEqual(delays[:6], [1.0, 2.0, 4.0, 8.0, 16.0, 30.0])
        self.assertEqual(max(delays), 30.0)
        self.assertEqual(delays[-1], 30.0)
        self.assertEqual(backoff.consecutive_failures, 1500)

    def test_reset_starts_over(self) -> None:
        backoff = Backoff(BackoffConfig(initial_seconds=1.0, multiplier=3.0, max_seconds=100.0))
        backoff.next_delay()
        backoff.next_delay()

        backoff.reset()

        self.assertEqual(backoff.consecutive_failures, 0)
        self.assertEqual(backoff.next_delay(), 1.0)

    def test_jitter_added_to_delay(self) -> None:
        rand = Mock(return_value=0.25)
        backoff = Backoff(BackoffConfig(jitter_seconds=0.5), rand=rand)

        self.assertEqual(backoff.next_delay(), 1.25)
        rand.assert_called_once_with(0.0, 0.5)


if __name__ == "__main__":
    unittest.main()
