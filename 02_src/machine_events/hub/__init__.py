"""Machine event delivery module."""

from .broadcaster import EventBroadcaster, IEventBroadcaster, deliver
from .connection import Dialer, ISubscriberConnection, SubscriberConnection, dial_unix
from .hub import NotificationHub
from .pool import ConnectionPool, InitState

__all__ = [
    "ConnectionPool",
    "Dialer",
    "EventBroadcaster",
    "IEventBroadcaster",
    "ISubscriberConnection",
    "InitState",
    "NotificationHub",
    "SubscriberConnection",
    "deliver",
    "dial_unix",
]
