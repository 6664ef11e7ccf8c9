"""HTTP probe endpoints for orchestrator liveness/readiness checks.

- GET /health/live  -> 200 while the process is running
- GET /health/ready -> 200 when the worker is ready, 503 otherwise

The server runs `serve_forever` on its own thread. `stop()` shuts it down,
closes the listening socket and joins the thread.
"""
from __future__ import annotations

import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional, Tuple

from sqs_processor.config.config import HealthConfig
from sqs_processor.support.state import ReadinessState

logger = logging.getLogger(__name__)

LIVE_PATH = "/health/live"
READY_PATH = "/health/ready"


class ProbeHTTPServer(ThreadingHTTPServer):
    """ThreadingHTTPServer carrying the readiness flag for its handlers."""

    daemon_threads = True
    # A second worker on the same host must fail to bind, not share the port
    allow_reuse_port = False

    def __init__(self, server_address: Tuple[str, int], readiness: ReadinessState) -> None:
        self.readiness = readiness
        super().__init__(server_address, ProbeRequestHandler)


class ProbeRequestHandler(BaseHTTPRequestHandler):
    """Answer liveness and readiness probes from the server's readiness flag."""

    server_version = "sqs-processor-health/1.0"
    server: ProbeHTTPServer

    def _probe(self) -> Tuple[int, Dict[str, Any]]:
        path = self.path.split("?", 1)[0]
        if path == LIVE_PATH:
            return 200, {"status": "ok"}
        if path == READY_PATH:
            if self.server.readiness.is_ready():
                return 200, {"status": "ok"}
            return 503, {"status": "unavailable"}
        return 404, {"error": "not found"}

    def _send_json_response(self, code: int, payload: Optional[Dict[str, Any]], include_body: bool = True) -> None:
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self.send_response(code)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body) if include_body else 0))
        self.end_headers()
        if include_body and body:
            self.wfile.write(body)

    def do_GET(self) -> None:
        code, payload = self._probe()
        self._send_json_response(code, payload)

    def do_HEAD(self) -> None:
        code, _ = self._probe()
        self._send_json_response(code, None, include_body=False)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        # Probes arrive every few seconds; keep them out of the default log
        logger.debug("%s - %s", self.address_string(), format % args)


class ProbeServer:
    """Serve probe endpoints on a background thread."""

    def __init__(self, config: HealthConfig, readiness: ReadinessState, join_timeout: float = 5.0) -> None:
        self.config = config
        self.readiness = readiness
        self._join_timeout = join_timeout
        self._httpd: Optional[ProbeHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """Bound (host, port), or None when not running."""
        if self._httpd is None:
            return None
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def start(self) -> bool:
        """Bind and start serving. Returns False if the socket could not be bound."""
        if self._thread is not None:
            raise RuntimeError("ProbeServer already started")
        try:
            self._httpd = ProbeHTTPServer((self.config.host, self.config.port), self.readiness)
        except OSError:
            logger.exception("Health server error: cannot bind %s:%s", self.config.host, self.config.port)
            return False

        self._thread = threading.Thread(target=self._serve, name="probe-server", daemon=True)
        self._thread.start()
        host, port = self.address or (self.config.host, self.config.port)
        logger.info("Health check server listening on %s:%s", host, port)
        return True

    def _serve(self) -> None:
        httpd = self._httpd
        if httpd is None:
            return
        try:
            httpd.serve_forever(poll_interval=0.5)
        except Exception:
            logger.exception("Health server error")

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def stop(self) -> None:
        """Stop serving, close the socket and join the server thread. Idempotent."""
        httpd, thread = self._httpd, self._thread
        if httpd is None:
            return
        if thread is not None and thread.is_alive():
            httpd.shutdown()
            thread.join(self._join_timeout)
            if thread.is_alive():
                logger.warning("Health server did not stop within %.1fs", self._join_timeout)
        httpd.server_close()
        self._httpd = None
        self._thread = None
        logger.info("Health check server stopped")
