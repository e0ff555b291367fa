"""NotificationHub: the per-command owner of machine event delivery."""

from pathlib import Path

from ..config import (
    DEFAULT_DIAL_TIMEOUT,
    DEFAULT_WRITE_TIMEOUT,
    DIAL_TIMEOUT_ENV,
    WRITE_TIMEOUT_ENV,
    resolve_timeout,
)
from ..discovery import EndpointResolver, IEndpointResolver
from ..logging_config import get_logger
from ..models import DeliveryResult, MachineEvent, MachineStatus
from .broadcaster import Clock, EventBroadcaster, IEventBroadcaster, utcnow
from .connection import Dialer
from .pool import ConnectionPool, InitState

logger = get_logger(__name__)


class NotificationHub:
    """Resolved endpoints, live connections and the broadcaster for one process.

    Passed through the command context instead of living in module globals.
    Usable as an async context manager: connections are closed on exit.
    """

    def __init__(
        self,
        resolver: IEndpointResolver | None = None,
        dial_timeout: float | None = None,
        write_timeout: float | None = None,
        dialer: Dialer | None = None,
        clock: Clock = utcnow,
    ):
        if dial_timeout is None:
            dial_timeout = resolve_timeout(DIAL_TIMEOUT_ENV, DEFAULT_DIAL_TIMEOUT)
        if write_timeout is None:
            write_timeout = resolve_timeout(WRITE_TIMEOUT_ENV, DEFAULT_WRITE_TIMEOUT)

        self._pool = ConnectionPool(
            resolver or EndpointResolver(),
            dial_timeout=dial_timeout,
            write_timeout=write_timeout,
            dialer=dialer,
        )
        self._broadcaster: IEventBroadcaster = EventBroadcaster(self._pool, clock=clock)

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    @property
    def state(self) -> InitState:
        return self._pool.state

    @property
    def endpoints(self) -> list[Path]:
        return self._pool.endpoints

    def prepare(self) -> list[Path]:
        """Resolve and record endpoints without dialing. Raises ResolutionError."""
        endpoints = self._pool.resolve_endpoints()
        if not endpoints:
            logger.debug("No machine event sockets found, events will not be published")
        return endpoints

    async def publish(
        self, status: MachineStatus, event: MachineEvent | None = None
    ) -> list[DeliveryResult]:
        """Publish one event to every live subscriber. Never raises."""
        return await self._broadcaster.publish(status, event)

    async def close(self) -> None:
        """Close every live connection. Idempotent."""
        await self._pool.close()

    async def __aenter__(self) -> "NotificationHub":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
