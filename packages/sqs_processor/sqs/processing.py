"""Long-polling processing loop.

The loop hands queue messages to a pluggable handler:

- the shutdown signal is checked before every poll, never mid-batch, so a
  received batch is always fully handled and deleted before the loop exits;
- every message is deleted after its handler runs, whether or not the handler
  raised, so a failing message is logged and dropped rather than redelivered;
- delete failures are logged and the batch continues; SQS redelivers such a
  message after its visibility timeout, so delivery is at-least-once;
- poll failures never escape `run_cycle`; `run` sleeps for the backoff delay
  and tries again.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from sqs_processor.errors import QueueDeleteError
from sqs_processor.models.message import Message, PollOutcome
from sqs_processor.sqs.client import QueueClient
from sqs_processor.support.backoff import Backoff
from sqs_processor.support.state import ShutdownSignal

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Message], None]


def log_message_handler(message: Message) -> None:
    """Default handler: log the message and do nothing else."""
    logger.info("Processing message: %s", message.message_id)
    logger.debug("Message body: %s", message.body)


class ProcessingLoop:
    """Poll, handle and delete messages until shutdown is requested."""

    def __init__(
        self,
        queue_client: QueueClient,
        shutdown: ShutdownSignal,
        handler: Optional[MessageHandler] = None,
        backoff: Optional[Backoff] = None,
        sleep: Optional[Callable[[float], object]] = None,
    ) -> None:
        self._queue = queue_client
        self._shutdown = shutdown
        self._handler = handler or log_message_handler
        self._backoff = backoff or Backoff()
        # Waiting on the shutdown event lets a signal cut a backoff delay short
        self._sleep = sleep or shutdown.wait

        self.cycles = 0
        self.messages_processed = 0
        self.handler_failures = 0
        self.delete_failures = 0
        self.poll_failures = 0

    def run_cycle(self) -> PollOutcome:
        """Run one poll and process whatever it returns. Never raises for a poll failure."""
        self.cycles += 1
        try:
            messages = self._queue.receive()
        except Exception as exc:
            self.poll_failures += 1
            logger.error("Error polling messages: %s", exc)
            return PollOutcome.failure(exc)

        outcome = PollOutcome(messages=messages)
        for message in messages:
            self._process(message, outcome)
        return outcome

    def _process(self, message: Message, outcome: PollOutcome) -> None:
        try:
            self._handler(message)
        except Exception:
            outcome.handler_failures += 1
            self.handler_failures += 1
            logger.exception("Handler failed for message %s", message.message_id)

        try:
            self._queue.delete(message.receipt_handle)
        except QueueDeleteError as exc:
            outcome.delete_failures += 1
            self.delete_failures += 1
            logger.error("Failed to delete message %s: %s", message.message_id, exc)
        except Exception:
            outcome.delete_failures += 1
            self.delete_failures += 1
            logger.exception("Unexpected error deleting message %s", message.message_id)
        self.messages_processed += 1

    def run(self) -> None:
        """Run cycles until the shutdown signal is observed before a poll."""
        logger.info("Processing loop started")
        while not self._shutdown.is_set():
            outcome = self.run_cycle()
            if outcome.failed:
                self._sleep(self._backoff.next_delay())
            else:
                self._backoff.reset()
        logger.info(
            "Processing loop stopped: cycles=%d processed=%d handler_failures=%d "
            "delete_failures=%d poll_failures=%d",
            self.cycles,
            self.messages_processed,
            self.handler_failures,
            self.delete_failures,
            self.poll_failures,
        )
