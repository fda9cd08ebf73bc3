"""HTTP listener exposing the registry on the metrics path.

Each request is handled in its own thread; the collector lock serializes
the actual scrapes.
"""

from __future__ import annotations

import logging
import socket
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

if TYPE_CHECKING:
    from prometheus_client import CollectorRegistry

logger = logging.getLogger(__name__)

_LANDING_PAGE = """<html>
<head><title>Squid Exporter</title></head>
<body>
<h1>Squid Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


class MetricsHandler(BaseHTTPRequestHandler):
    """Serve ``/`` (landing page) and the metrics path."""

    registry: CollectorRegistry
    metrics_path: str = "/metrics"

    def do_GET(self) -> None:
        path = self.path.split("?", 1)[0]
        if path == self.metrics_path:
            output = generate_latest(self.registry)
            self._reply(200, CONTENT_TYPE_LATEST, output)
        elif path == "/":
            body = _LANDING_PAGE.format(path=self.metrics_path).encode("utf-8")
            self._reply(200, "text/html; charset=utf-8", body)
        else:
            self._reply(404, "text/plain; charset=utf-8", b"Not Found\n")

    def _reply(self, status: int, content_type: str, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)


class _ThreadingHTTPServerV6(ThreadingHTTPServer):
    address_family = socket.AF_INET6


def make_server(
    host: str,
    port: int,
    registry: CollectorRegistry,
    metrics_path: str = "/metrics",
) -> ThreadingHTTPServer:
    """Bind a threaded HTTP server; raises ``OSError`` if the bind fails."""
    handler = type(
        "BoundMetricsHandler",
        (MetricsHandler,),
        {"registry": registry, "metrics_path": metrics_path},
    )
    server_cls = _ThreadingHTTPServerV6 if ":" in host else ThreadingHTTPServer
    server = server_cls((host, port), handler)
    server.daemon_threads = True
    return server


def serve_forever(server: ThreadingHTTPServer) -> None:
    host, port = server.server_address[:2]
    logger.info("Listening on %s:%d", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
