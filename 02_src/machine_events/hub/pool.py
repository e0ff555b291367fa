"""Lazy, one-time connection pool for subscriber sockets."""

import asyncio
from enum import Enum
from functools import partial
from pathlib import Path

from ..config import DEFAULT_DIAL_TIMEOUT, DEFAULT_WRITE_TIMEOUT
from ..discovery import IEndpointResolver
from ..errors import CloseFailure, DialFailure
from ..logging_config import get_logger
from .connection import Dialer, ISubscriberConnection, dial_unix

logger = get_logger(__name__)


class InitState(str, Enum):
    """Initialization state of a ConnectionPool."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class ConnectionPool:
    """Dials every resolved endpoint once and holds the live connections.

    Resolution and dialing happen at most once per pool. Concurrent first
    callers of ensure_initialized() wait for the single initialization; the
    connection list is never mutated afterwards.
    """

    def __init__(
        self,
        resolver: IEndpointResolver,
        dial_timeout: float = DEFAULT_DIAL_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
        dialer: Dialer | None = None,
    ):
        self._resolver = resolver
        self._dial_timeout = dial_timeout
        self._dialer = dialer or partial(dial_unix, write_timeout=write_timeout)
        self._endpoints: list[Path] | None = None
        self._connections: list[ISubscriberConnection] = []
        self._state = InitState.UNINITIALIZED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> InitState:
        return self._state

    @property
    def endpoints(self) -> list[Path]:
        """Resolved endpoints (empty until resolved)."""
        return list(self._endpoints or [])

    @property
    def connections(self) -> list[ISubscriberConnection]:
        """Live connections (empty until initialized)."""
        return list(self._connections)

    def resolve_endpoints(self) -> list[Path]:
        """Resolve and record endpoints once. Raises ResolutionError."""
        if self._endpoints is None:
            self._endpoints = list(self._resolver.resolve())
        return self.endpoints

    async def ensure_initialized(self) -> None:
        """Dial every endpoint on first call; later calls are no-ops."""
        if self._state is InitState.READY:
            return

        async with self._lock:
            if self._state is InitState.READY:
                return

            self._state = InitState.INITIALIZING
            try:
                await self._initialize()
            finally:
                self._state = InitState.READY

    async def _initialize(self) -> None:
        endpoints = self.resolve_endpoints()

        # No sockets found, so no need to publish events
        if not endpoints:
            return

        for endpoint in endpoints:
            try:
                conn = await self._dialer(endpoint, self._dial_timeout)
            except DialFailure as e:
                logger.warning("Failed to open event socket %s: %s", endpoint, e)
                continue

            logger.debug("Machine event socket %s found", endpoint)
            self._connections.append(conn)

    async def close(self) -> None:
        """Close every live connection, ignoring close errors."""
        for conn in self._connections:
            try:
                await conn.close()
            except CloseFailure as e:
                logger.debug("Ignoring close error: %s", e)
