from sqs_processor.models.message import Message, PollOutcome

__all__ = ["Message", "PollOutcome"]
