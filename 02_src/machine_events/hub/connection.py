"""Subscriber connections over Unix domain sockets."""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Protocol

from ..config import DEFAULT_WRITE_TIMEOUT
from ..errors import CloseFailure, DialFailure, WriteFailure
from ..logging_config import get_logger

logger = get_logger(__name__)


class ISubscriberConnection(Protocol):
    """An open channel to one subscriber endpoint."""

    endpoint: Path

    async def send(self, payload: bytes) -> None:
        """Write the full payload. Raises WriteFailure."""
        ...

    async def close(self) -> None:
        """Close the channel. Safe to call more than once."""
        ...


Dialer = Callable[[Path, float], Awaitable[ISubscriberConnection]]


class SubscriberConnection:
    """Stream connection to a subscriber socket."""

    def __init__(
        self,
        endpoint: Path,
        writer: asyncio.StreamWriter,
        write_timeout: float,
    ):
        self.endpoint = endpoint
        self._writer = writer
        self._write_timeout = write_timeout
        self._closed = False
        self._aborted = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, payload: bytes) -> None:
        """Write the full payload and wait for it to be flushed.

        A drain timeout aborts the transport, so later sends fail at once.
        """
        if self._closed:
            raise WriteFailure(self.endpoint, "connection is closed")
        if self._aborted:
            raise WriteFailure(self.endpoint, "connection was aborted after a write timeout")

        try:
            self._writer.write(payload)
            await asyncio.wait_for(self._writer.drain(), self._write_timeout)
        except asyncio.TimeoutError as e:
            self._abort()
            raise WriteFailure(self.endpoint, f"write timed out after {self._write_timeout}s") from e
        except OSError as e:
            raise WriteFailure(self.endpoint, str(e) or type(e).__name__) from e

    async def close(self) -> None:
        """Close the stream once; later calls are no-ops.

        Waiting for the close is bounded by the write timeout; a subscriber
        that never drains its buffer gets the transport aborted.
        """
        if self._closed:
            return
        self._closed = True

        self._writer.close()
        try:
            await asyncio.wait_for(self._writer.wait_closed(), self._write_timeout)
        except asyncio.TimeoutError as e:
            self._abort()
            raise CloseFailure(self.endpoint, f"close timed out after {self._write_timeout}s") from e
        except OSError as e:
            raise CloseFailure(self.endpoint, str(e)) from e

    def _abort(self) -> None:
        logger.debug("Aborting stalled event socket %s", self.endpoint)
        self._aborted = True
        self._writer.transport.abort()


async def dial_unix(
    endpoint: Path,
    timeout: float,
    write_timeout: float = DEFAULT_WRITE_TIMEOUT,
) -> SubscriberConnection:
    """Open a connection to a Unix socket, bounded by timeout.

    Raises:
        DialFailure: the socket could not be connected to in time.
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_unix_connection(str(endpoint)), timeout
        )
    except (OSError, asyncio.TimeoutError) as e:
        raise DialFailure(endpoint, str(e) or type(e).__name__) from e

    return SubscriberConnection(endpoint, writer, write_timeout=write_timeout)
