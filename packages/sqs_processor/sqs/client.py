"""SQS queue client wrapper (DI-friendly).

`SqsQueueClient` narrows the boto3 SQS client down to the two calls the
processing loop needs, `receive` and `delete`, and translates botocore errors
into this package's exception types. Tests inject a mock or stubbed boto3
client; production code builds one with `build_sqs_client`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from sqs_processor.config.config import SqsConfig
from sqs_processor.errors import QueueClientError, QueueDeleteError, QueuePollError
from sqs_processor.models.message import Message

logger = logging.getLogger(__name__)


class QueueClient(Protocol):
    """Capability the processing loop depends on."""

    def receive(self) -> List[Message]:  # pragma: no cover - interface
        ...

    def delete(self, receipt_handle: str) -> None:  # pragma: no cover - interface
        ...


def build_boto3_sqs_client(config: SqsConfig) -> BaseClient:
    """Create the underlying boto3 SQS client.

    Explicit credentials are used only when both key id and secret are set;
    otherwise boto3's default credential chain applies.
    """
    kwargs: Dict[str, Any] = {"region_name": config.aws_region}
    if config.endpoint_url:
        kwargs["endpoint_url"] = config.endpoint_url
    if config.aws_access_key_id and config.aws_secret_access_key:
        kwargs["aws_access_key_id"] = config.aws_access_key_id
        kwargs["aws_secret_access_key"] = config.aws_secret_access_key
    try:
        return boto3.client("sqs", **kwargs)
    except (BotoCoreError, ValueError) as exc:
        raise QueueClientError(f"Failed to initialize SQS client: {exc}") from exc


class SqsQueueClient:
    """Receive and delete messages on a single SQS queue."""

    def __init__(self, config: SqsConfig, sqs_client: Optional[BaseClient] = None) -> None:
        self.config = config
        self.sqs_client = sqs_client or build_boto3_sqs_client(config)

    def receive(self) -> List[Message]:
        """Long-poll the queue once.

        Raises:
            QueuePollError: the receive call failed.
        """
        logger.debug("Polling for messages from queue: %s", self.config.queue_url)
        try:
            response = self.sqs_client.receive_message(
                QueueUrl=self.config.queue_url,
                MaxNumberOfMessages=self.config.max_messages,
                WaitTimeSeconds=self.config.wait_time_seconds,
                VisibilityTimeout=self.config.visibility_timeout,
                AttributeNames=["All"],
                MessageAttributeNames=["All"],
            )
        except (BotoCoreError, ClientError) as exc:
            raise QueuePollError(f"Failed to receive messages from SQS: {exc}") from exc

        messages = [Message.from_sqs(entry) for entry in response.get("Messages") or []]
        if messages:
            logger.info("Received %d messages from SQS", len(messages))
        else:
            logger.debug("Received 0 messages from SQS")
        return messages

    def delete(self, receipt_handle: str) -> None:
        """Delete one received message by its receipt handle.

        Raises:
            QueueDeleteError: the delete call failed.
        """
        logger.debug("Deleting message with receipt handle: %s", receipt_handle)
        try:
            self.sqs_client.delete_message(
                QueueUrl=self.config.queue_url,
                ReceiptHandle=receipt_handle,
            )
        except (BotoCoreError, ClientError) as exc:
            raise QueueDeleteError(f"Failed to delete message from SQS: {exc}") from exc
        logger.debug("Successfully deleted message")


def build_sqs_client(config: SqsConfig) -> SqsQueueClient:
    """Default queue client factory used by the worker at startup.

    Raises:
        QueueClientError: the boto3 client could not be built.
    """
    return SqsQueueClient(config)
