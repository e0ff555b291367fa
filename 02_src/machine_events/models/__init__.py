"""Data models for machine events."""

from .delivery import DeliveryResult
from .events import EventType, MachineEvent, MachineStatus

__all__ = [
    # Events
    "EventType",
    "MachineEvent",
    "MachineStatus",
    # Delivery
    "DeliveryResult",
]
