"""Worker lifecycle controller.

States: STARTING -> RUNNING -> DRAINING -> STOPPED.

Startup order:
    1. build the queue client (fatal on failure, readiness never set)
    2. start the signal listener
    3. start the probe server
    4. mark the worker ready

Shutdown order (always runs once startup succeeded):
    1. mark the worker not ready
    2. revoke the signal subscription and join the listener thread
    3. stop the probe server and join its thread
"""
from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from sqs_processor.config.config import SqsConfig, WorkerConfig
from sqs_processor.errors import QueueClientError
from sqs_processor.health.server import ProbeServer
from sqs_processor.sqs.client import QueueClient, build_sqs_client
from sqs_processor.sqs.processing import MessageHandler, ProcessingLoop
from sqs_processor.support.backoff import Backoff
from sqs_processor.support.signals import SignalListener
from sqs_processor.support.state import ReadinessState, ShutdownSignal

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STARTUP_FAILURE = 1

QueueClientFactory = Callable[[SqsConfig], QueueClient]


class WorkerState(enum.Enum):
    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class Worker:
    """Own startup ordering, the processing loop and graceful shutdown.

    Collaborators default to the production implementations and can be
    injected for tests.
    """

    def __init__(
        self,
        config: WorkerConfig,
        handler: Optional[MessageHandler] = None,
        client_factory: Optional[QueueClientFactory] = None,
        readiness: Optional[ReadinessState] = None,
        shutdown: Optional[ShutdownSignal] = None,
        signal_listener: Optional[SignalListener] = None,
        probe_server: Optional[ProbeServer] = None,
        sleep: Optional[Callable[[float], object]] = None,
    ) -> None:
        self.config = config
        self.handler = handler
        self.readiness = readiness or ReadinessState()
        self.shutdown = shutdown or ShutdownSignal()
        self.signal_listener = signal_listener or SignalListener(self.shutdown)
        self.probe_server = probe_server or ProbeServer(config.health, self.readiness)
        self._client_factory = client_factory or build_sqs_client
        self._sleep = sleep
        self.state = WorkerState.STARTING
        self.loop: Optional[ProcessingLoop] = None

    def _transition(self, state: WorkerState) -> None:
        logger.debug("Worker state %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self) -> int:
        """Run the worker to completion and return the process exit code."""
        logger.info("Starting SQS processor for queue %s", self.config.sqs.queue_url)
        try:
            queue_client = self._client_factory(self.config.sqs)
        except QueueClientError as exc:
            logger.error("Application error: %s", exc)
            self._transition(WorkerState.STOPPED)
            return EXIT_STARTUP_FAILURE
        except Exception as exc:
            logger.exception("Application error: failed to initialize SQS client: %s", exc)
            self._transition(WorkerState.STOPPED)
            return EXIT_STARTUP_FAILURE

        self.loop = ProcessingLoop(
            queue_client,
            self.shutdown,
            handler=self.handler,
            backoff=Backoff(self.config.backoff),
            sleep=self._sleep,
        )

        try:
            self.signal_listener.start()
            self.probe_server.start()
            self.readiness.set_ready(True)
            logger.info("Application is ready")
            self._transition(WorkerState.RUNNING)
            self.loop.run()
        finally:
            self._drain()

        logger.info("Shutdown complete")
        return EXIT_OK

    def _drain(self) -> None:
        self._transition(WorkerState.DRAINING)
        logger.info("Shutting down gracefully...")
        self.readiness.set_ready(False)
        try:
            self.signal_listener.close()
        finally:
            try:
                self.probe_server.stop()
            finally:
                self._transition(WorkerState.STOPPED)
