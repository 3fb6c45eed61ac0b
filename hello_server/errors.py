from __future__ import annotations


class AcquisitionError(Exception):
    """Base class for failures while getting a listening socket."""


class PortConflict(AcquisitionError):
    def __init__(self, port: int) -> None:
        super().__init__(f"port {port} is already in use")
        self.port = port


class OtherBindError(AcquisitionError):
    def __init__(self, port: int, cause: OSError) -> None:
        super().__init__(f"cannot bind port {port}: {cause}")
        self.port = port
        self.cause = cause


class PortRangeExhausted(AcquisitionError):
    def __init__(self, first: int, last: int) -> None:
        super().__init__(f"all ports from {first} to {last} are in use")
        self.first = first
        self.last = last
