from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Mapping, Optional

from .config import ServerSettings
from .errors import AcquisitionError, OtherBindError, PortConflict, PortRangeExhausted
from .listeners import Listener, Strategy, default_listeners


logger = logging.getLogger(__name__)

Delay = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class AttemptState:
    current_port: int
    retry_count: int = 0
    strategy: Strategy = Strategy.PRIMARY

    @classmethod
    def initial(cls, settings: ServerSettings) -> "AttemptState":
        return cls(current_port=settings.preferred_port)


@dataclass(frozen=True)
class Acquired:
    listener: Listener
    bound: Any
    state: AttemptState


def switch_to_fallback(settings: ServerSettings) -> AttemptState:
    logger.info("Attempting fallback to native HTTP server...")
    logger.info("Initializing native HTTP server fallback...")
    return AttemptState(settings.preferred_port, 0, Strategy.FALLBACK)


def next_state(
    state: AttemptState,
    error: AcquisitionError,
    settings: ServerSettings,
    backoff: bool = True,
) -> tuple[AttemptState, float]:
    """Decide what to try after a failed bind.

    Returns the next state and how long to wait before trying it. Raises when
    there is nothing left to try.
    """
    port = state.current_port
    fallback = state.strategy is Strategy.FALLBACK

    if not isinstance(error, PortConflict):
        logger.error("Server error: %s", error)
        if fallback:
            raise error
        return switch_to_fallback(settings), 0.0

    if port >= settings.max_port:
        if fallback:
            raise PortRangeExhausted(settings.preferred_port, settings.max_port)
        logger.error("All ports from %d to %d are in use.", settings.preferred_port, settings.max_port)
        return switch_to_fallback(settings), 0.0

    if fallback:
        logger.info("Port %d is in use, trying port %d...", port, port + 1)
    else:
        logger.info("Port %d is in use, attempting next port...", port)
    delay = settings.retry_delay * 2 ** state.retry_count if backoff else 0.0
    return replace(state, current_port=port + 1, retry_count=state.retry_count + 1), delay


async def acquire(
    listeners: Mapping[Strategy, Listener],
    settings: ServerSettings,
    state: Optional[AttemptState] = None,
    delay: Delay = asyncio.sleep,
) -> Acquired:
    state = state or AttemptState.initial(settings)
    # one full sweep per strategy
    for _ in range(2 * settings.span):
        listener = listeners[state.strategy]
        try:
            bound = listener.bind(settings.host, state.current_port)
        except (PortConflict, OtherBindError) as exc:
            state, wait = next_state(state, exc, settings, backoff=listener.backoff)
            if wait:
                await delay(wait)
            continue
        listener.announce(state.current_port)
        return Acquired(listener, bound, state)
    raise PortRangeExhausted(settings.preferred_port, settings.max_port)


async def run(
    settings: Optional[ServerSettings] = None,
    listeners: Optional[Mapping[Strategy, Listener]] = None,
    delay: Delay = asyncio.sleep,
) -> None:
    settings = settings or ServerSettings()
    listeners = listeners or default_listeners()
    logger.info("Starting web server...")
    acquired = await acquire(listeners, settings, delay=delay)
    try:
        await acquired.listener.serve(acquired.bound)
    finally:
        acquired.listener.close(acquired.bound)
