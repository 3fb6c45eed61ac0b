from __future__ import annotations

import logging
import os
import sys

from pydantic import BaseModel, Field, model_validator


DEFAULT_PORT = 3000
MAX_PORT = 3010
RETRY_DELAY = 1.0  # seconds, doubled on every retry

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class ServerSettings(BaseModel):
    """Where to listen and how hard to try."""

    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    preferred_port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    max_port: int = Field(default=MAX_PORT, ge=1, le=65535)
    retry_delay: float = Field(default=RETRY_DELAY, ge=0)

    @model_validator(mode="after")
    def check_range(self) -> "ServerSettings":
        if self.max_port < self.preferred_port:
            raise ValueError("max_port must not be lower than preferred_port")
        return self

    @property
    def span(self) -> int:
        return self.max_port - self.preferred_port + 1


def configure_logging(level: str | None = None) -> None:
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout, force=True)
