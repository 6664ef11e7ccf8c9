from sqs_processor.health.server import ProbeServer

__all__ = ["ProbeServer"]
