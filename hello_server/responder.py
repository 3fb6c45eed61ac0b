from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


CONTENT_TYPE = "text/plain; charset=utf-8"

# (method, path) -> body
ROUTES = {
    ("GET", "/"): "Hello World!",
    ("GET", "/good-evening"): "Good evening",
}

NOT_FOUND = "Not Found"

access_log = logging.getLogger("hello_server.access")


@dataclass(frozen=True)
class Reply:
    status: int
    body: str
    content_type: str = CONTENT_TYPE

    def encode(self) -> bytes:
        return self.body.encode("utf-8")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def respond(method: str, path: str) -> Reply:
    """Map a request line to its reply.

    ``path`` must already be stripped of the query string. Method and path
    are compared exactly as sent, and anything not in ``ROUTES`` is a 404.
    """
    body = ROUTES.get((method, path))
    if body is None:
        return Reply(404, NOT_FOUND)
    return Reply(200, body)


def log_request(method: str, url: str, tag: Optional[str] = None) -> None:
    line = f"[{now_iso()}] {method} {url}"
    if tag:
        line = f"{line} ({tag})"
    access_log.info(line)


def describe_routes() -> list[str]:
    return [f'  {method} {path} - Returns "{body}"' for (method, path), body in ROUTES.items()]
