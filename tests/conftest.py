import errno

import pytest

from hello_server.config import ServerSettings
from hello_server.errors import OtherBindError, PortConflict
from hello_server.listeners import Listener, Strategy


class FakeListener(Listener):
    """Pretends to bind; ``busy`` ports conflict, ``broken`` ports fail otherwise."""

    def __init__(self, strategy, busy=(), broken=(), backoff=None):
        self.strategy = strategy
        self.label = strategy.value
        if backoff is not None:
            self.backoff = backoff
        else:
            self.backoff = strategy is Strategy.PRIMARY
        self.busy = set(busy)
        self.broken = set(broken)
        self.attempts = []
        self.served = []
        self.closed = []
        self.serve_error = None

    def bind(self, host, port):
        self.attempts.append(port)
        if port in self.broken:
            raise OtherBindError(port, OSError(errno.EACCES, "Permission denied"))
        if port in self.busy:
            raise PortConflict(port)
        return ("bound", host, port)

    async def serve(self, bound):
        self.served.append(bound)
        if self.serve_error is not None:
            raise self.serve_error

    def close(self, bound):
        self.closed.append(bound)


class RecordingDelay:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(host="127.0.0.1")


@pytest.fixture
def delay() -> RecordingDelay:
    return RecordingDelay()


@pytest.fixture
def make_listeners():
    def factory(primary_busy=(), fallback_busy=(), primary_broken=(), fallback_broken=(), fallback_backoff=None):
        return {
            Strategy.PRIMARY: FakeListener(Strategy.PRIMARY, primary_busy, primary_broken),
            Strategy.FALLBACK: FakeListener(Strategy.FALLBACK, fallback_busy, fallback_broken, fallback_backoff),
        }

    return factory


@pytest.fixture
def all_ports():
    return range(3000, 3011)
