from sqs_processor.sqs.client import QueueClient, SqsQueueClient, build_sqs_client
from sqs_processor.sqs.processing import MessageHandler, ProcessingLoop, log_message_handler

__all__ = [
    "MessageHandler",
    "ProcessingLoop",
    "QueueClient",
    "SqsQueueClient",
    "build_sqs_client",
    "log_message_handler",
]
