"""Exceptions raised by the machine events subsystem.

Only ResolutionError ever reaches the command layer. The other failures are
contained: they are logged and, for writes, recorded in a DeliveryResult.
"""

from pathlib import Path


class MachineEventsError(Exception):
    """Base exception for machine events."""


class RuntimeDirError(MachineEventsError):
    """The per-user runtime directory could not be determined."""


class ResolutionError(MachineEventsError):
    """Unexpected filesystem failure while scanning for event sockets."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Failed to scan {path} for machine event sockets: {cause}")
        self.path = path
        self.cause = cause


class EndpointError(MachineEventsError):
    """Failure tied to a single subscriber endpoint."""

    def __init__(self, endpoint: Path, message: str):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint


class DialFailure(EndpointError):
    """An endpoint could not be connected to."""


class WriteFailure(EndpointError):
    """A connection rejected a write."""


class CloseFailure(EndpointError):
    """A connection could not be closed cleanly."""
