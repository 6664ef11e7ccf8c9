"""Long-running SQS worker with graceful shutdown and Kubernetes-style probes."""

__version__ = "0.1.0"
