"""Lifecycle support utilities: shared flags, backoff, signals and logging."""
from sqs_processor.support.backoff import Backoff
from sqs_processor.support.signals import SignalListener
from sqs_processor.support.state import ReadinessState, ShutdownSignal

__all__ = ["Backoff", "ReadinessState", "ShutdownSignal", "SignalListener"]
