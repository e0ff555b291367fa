"""Pytest configuration and fixtures."""

import asyncio
import shutil
import socket
import tempfile
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from machine_events.errors import CloseFailure, DialFailure, WriteFailure  # noqa: E402


class StaticResolver:
    """Resolver returning a fixed endpoint list and counting calls."""

    def __init__(self, endpoints=None, error: Exception | None = None):
        self.endpoints = [Path(p) for p in (endpoints or [])]
        self.error = error
        self.calls = 0

    def resolve(self) -> list[Path]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.endpoints)


class FakeConnection:
    """In-memory subscriber connection."""

    def __init__(self, endpoint, fail_writes: bool = False, fail_close: bool = False):
        self.endpoint = Path(endpoint)
        self.fail_writes = fail_writes
        self.fail_close = fail_close
        self.payloads: list[bytes] = []
        self.close_calls = 0

    async def send(self, payload: bytes) -> None:
        if self.fail_writes:
            raise WriteFailure(self.endpoint, "broken pipe")
        self.payloads.append(payload)

    async def close(self) -> None:
        self.close_calls += 1
        if self.fail_close:
            raise CloseFailure(self.endpoint, "bad file descriptor")


class FakeDialer:
    """Dialer producing FakeConnections; endpoints in `refuse` fail to dial."""

    def __init__(self, refuse=(), fail_writes=(), fail_close=()):
        self.refuse = {Path(p) for p in refuse}
        self.fail_writes = {Path(p) for p in fail_writes}
        self.fail_close = {Path(p) for p in fail_close}
        self.dialed: list[Path] = []
        self.connections: dict[Path, FakeConnection] = {}

    async def __call__(self, endpoint: Path, timeout: float) -> FakeConnection:
        self.dialed.append(endpoint)
        await asyncio.sleep(0)  # let concurrent callers interleave
        if endpoint in self.refuse:
            raise DialFailure(endpoint, "connection refused")
        conn = FakeConnection(
            endpoint,
            fail_writes=endpoint in self.fail_writes,
            fail_close=endpoint in self.fail_close,
        )
        self.connections[endpoint] = conn
        return conn


class UnixListener:
    """Unix socket server collecting newline-delimited records."""

    def __init__(self, path: Path):
        self.path = path
        self.lines: list[bytes] = []
        self._server: asyncio.AbstractServer | None = None
        self._writers: list[asyncio.StreamWriter] = []
        self._received = asyncio.Event()

    async def start(self) -> "UnixListener":
        self._server = await asyncio.start_unix_server(self._handle, path=str(self.path))
        return self

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.append(writer)
        while True:
            line = await reader.readline()
            if not line:
                break
            self.lines.append(line)
            self._received.set()
        writer.close()

    async def wait_for_lines(self, count: int, timeout: float = 2.0) -> list[bytes]:
        async def _wait():
            while len(self.lines) < count:
                self._received.clear()
                await self._received.wait()

        await asyncio.wait_for(_wait(), timeout)
        return list(self.lines)

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            for writer in self._writers:
                writer.close()
            await self._server.wait_closed()


@pytest.fixture
def sock_dir():
    """Short temporary directory (AF_UNIX paths are length limited)."""
    path = Path(tempfile.mkdtemp(prefix="me-", dir="/tmp"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def make_dead_socket():
    """Create a socket file nobody listens on."""

    def _make(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.bind(str(path))
        sock.close()
        return path

    return _make


@pytest_asyncio.fixture
async def make_listener():
    """Start UnixListeners, stopping them at teardown."""
    listeners: list[UnixListener] = []

    async def _make(path: Path) -> UnixListener:
        path.parent.mkdir(parents=True, exist_ok=True)
        listener = await UnixListener(path).start()
        listeners.append(listener)
        return listener

    yield _make

    for listener in listeners:
        await listener.stop()


@pytest.fixture
def no_override(monkeypatch):
    """Make sure the discovery override is not inherited from the environment."""
    monkeypatch.delenv("MACHINE_EVENTS_SOCK", raising=False)


@pytest.fixture
def resolver_factory():
    """Build StaticResolvers."""
    return StaticResolver


@pytest.fixture
def dialer_factory():
    """Build FakeDialers."""
    return FakeDialer


@pytest.fixture
def connection_factory():
    """Build FakeConnections."""
    return FakeConnection


@pytest.fixture
def make_stalled_socket():
    """Bind a listening socket that never accepts or reads."""
    socks: list[socket.socket] = []

    def _make(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.bind(str(path))
        sock.listen(1)
        socks.append(sock)
        return path

    yield _make

    for sock in socks:
        sock.close()
