"""Best-effort broadcast of machine events to subscriber connections."""

from datetime import datetime, timezone
from typing import Callable, Iterable, Protocol

from ..errors import WriteFailure
from ..logging_config import get_logger
from ..models import DeliveryResult, MachineEvent, MachineStatus
from .connection import ISubscriberConnection
from .pool import ConnectionPool

logger = get_logger(__name__)


Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def deliver(
    payload: bytes, connections: Iterable[ISubscriberConnection]
) -> list[DeliveryResult]:
    """Write payload to each connection in order.

    A failed write is logged and recorded; it never stops delivery to the
    remaining connections.
    """
    results: list[DeliveryResult] = []
    for conn in connections:
        try:
            await conn.send(payload)
        except WriteFailure as e:
            logger.error("Unable to write machine event: %s", e)
            results.append(DeliveryResult(conn.endpoint, success=False, error=str(e)))
            continue
        except Exception as e:
            logger.error("Unable to write machine event to %s: %s", conn.endpoint, e, exc_info=True)
            results.append(DeliveryResult(conn.endpoint, success=False, error=str(e) or type(e).__name__))
            continue
        results.append(DeliveryResult(conn.endpoint, success=True))
    return results


class IEventBroadcaster(Protocol):
    """Publishes machine events to every live subscriber."""

    async def publish(
        self, status: MachineStatus, event: MachineEvent | None = None
    ) -> list[DeliveryResult]:
        """Stamp, serialize and deliver an event. Never raises."""
        ...


class EventBroadcaster:
    """Stamps machine events and writes them to the pool's connections."""

    def __init__(self, pool: ConnectionPool, clock: Clock = utcnow):
        self._pool = pool
        self._clock = clock

    async def publish(
        self, status: MachineStatus, event: MachineEvent | None = None
    ) -> list[DeliveryResult]:
        """Stamp, serialize and deliver an event. Never raises."""
        try:
            await self._pool.ensure_initialized()

            stamped = (event or MachineEvent()).stamp(status, self._clock())
            payload = stamped.to_wire()
        except Exception as e:
            logger.error("Unable to publish machine event: %s", e, exc_info=True)
            return []

        return await deliver(payload, self._pool.connections)
