from __future__ import annotations

import asyncio
import enum
import errno
import logging
import socket
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional
from urllib.parse import urlsplit

import uvicorn

from .app import app
from .errors import AcquisitionError, OtherBindError, PortConflict
from .responder import describe_routes, log_request, respond


logger = logging.getLogger(__name__)

BACKLOG = 2048


class Strategy(enum.Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


def bind_error(exc: OSError, port: int) -> AcquisitionError:
    if exc.errno == errno.EADDRINUSE:
        return PortConflict(port)
    return OtherBindError(port, exc)


class Listener:
    """One way of putting the responder on a port.

    ``bind`` either returns a handle holding the port or raises
    ``PortConflict`` / ``OtherBindError``. ``serve`` runs until the process
    stops. ``close`` releases the port once serving ends. ``backoff`` tells
    the controller whether to wait between ports.
    """

    strategy: Strategy
    label: str
    backoff: bool = True

    def bind(self, host: str, port: int) -> Any:
        raise NotImplementedError

    async def serve(self, bound: Any) -> None:
        raise NotImplementedError

    def close(self, bound: Any) -> None:
        raise NotImplementedError

    def announce(self, port: int) -> None:
        logger.info("%s server running on port %d", self.label, port)
        logger.info("Available endpoints:")
        for line in describe_routes():
            logger.info(line)


# === Primary: FastAPI under uvicorn ===


class PrimaryListener(Listener):
    strategy = Strategy.PRIMARY
    label = "Primary"

    def __init__(self, log_level: str = "warning") -> None:
        self.log_level = log_level
        self.server: Optional[uvicorn.Server] = None

    def bind(self, host: str, port: int) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(BACKLOG)
        except OSError as exc:
            sock.close()
            raise bind_error(exc, port) from exc
        return sock

    async def serve(self, bound: socket.socket) -> None:
        config = uvicorn.Config(
            app,
            log_config=None,
            log_level=self.log_level,
            access_log=False,
            lifespan="off",
            backlog=BACKLOG,
        )
        self.server = uvicorn.Server(config)
        await self.server.serve(sockets=[bound])

    def close(self, bound: socket.socket) -> None:
        bound.close()


# === Fallback: bare http.server ===


class FallbackHandler(BaseHTTPRequestHandler):
    def dispatch(self) -> None:
        log_request(self.command, self.path, tag="HTTP Fallback")
        reply = respond(self.command, urlsplit(self.path).path)
        body = reply.encode()
        self.send_response(reply.status)
        self.send_header("Content-Type", reply.content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def __getattr__(self, name: str):
        # handle_one_request looks up do_<METHOD>; every method goes to dispatch
        if name.startswith("do_"):
            return self.dispatch
        raise AttributeError(name)

    def log_message(self, format: str, *args) -> None:  # noqa: A002 - keep default signature
        # Requests are already logged by dispatch()
        pass


class FallbackServer(ThreadingHTTPServer):
    # a second instance must see the port as taken
    allow_reuse_port = False


class FallbackListener(Listener):
    strategy = Strategy.FALLBACK
    label = "HTTP fallback"
    backoff = False

    def bind(self, host: str, port: int) -> FallbackServer:
        try:
            return FallbackServer((host, port), FallbackHandler)
        except OSError as exc:
            raise bind_error(exc, port) from exc

    async def serve(self, bound: FallbackServer) -> None:
        try:
            await asyncio.to_thread(bound.serve_forever)
        except asyncio.CancelledError:
            bound.shutdown()
            raise

    def close(self, bound: FallbackServer) -> None:
        bound.server_close()


def default_listeners() -> dict[Strategy, Listener]:
    return {
        Strategy.PRIMARY: PrimaryListener(),
        Strategy.FALLBACK: FallbackListener(),
    }
