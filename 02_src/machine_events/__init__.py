"""Machine lifecycle event broadcasting."""

from .discovery import EndpointResolver, IEndpointResolver, is_event_socket_name
from .errors import (
    CloseFailure,
    DialFailure,
    MachineEventsError,
    ResolutionError,
    RuntimeDirError,
    WriteFailure,
)
from .hub import ConnectionPool, EventBroadcaster, InitState, NotificationHub, deliver
from .lifecycle import close_machine_events, init_machine_events, run_with_machine_events
from .models import DeliveryResult, EventType, MachineEvent, MachineStatus

__all__ = [
    # Models
    "DeliveryResult",
    "EventType",
    "MachineEvent",
    "MachineStatus",
    # Components
    "IEndpointResolver",
    "EndpointResolver",
    "is_event_socket_name",
    "ConnectionPool",
    "InitState",
    "EventBroadcaster",
    "deliver",
    "NotificationHub",
    # Lifecycle
    "init_machine_events",
    "close_machine_events",
    "run_with_machine_events",
    # Errors
    "MachineEventsError",
    "RuntimeDirError",
    "ResolutionError",
    "DialFailure",
    "WriteFailure",
    "CloseFailure",
]
