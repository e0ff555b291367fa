"""Machine events configuration and path helpers."""

import os
from pathlib import Path
from typing import Union

from .errors import RuntimeDirError
from .logging_config import get_logger

logger = get_logger(__name__)

EVENTS_SOCK_ENV = "MACHINE_EVENTS_SOCK"
EVENTS_SUBDIR = "machine_events"
EVENTS_SOCKET_PREFIX = "machine_events"
EVENTS_SOCKET_SUFFIX = ".sock"

DIAL_TIMEOUT_ENV = "MACHINE_EVENTS_DIAL_TIMEOUT"
WRITE_TIMEOUT_ENV = "MACHINE_EVENTS_WRITE_TIMEOUT"
DEFAULT_DIAL_TIMEOUT = 5.0  # seconds
DEFAULT_WRITE_TIMEOUT = 2.0  # seconds

MACHINES_ENV = "MACHINE_EVENTS_MACHINES"


PathLike = Union[str, Path]


def resolve_runtime_dir() -> Path:
    """Resolve the per-user runtime directory.

    Uses XDG_RUNTIME_DIR when set, otherwise /run/user/<uid> when it exists.
    Raises RuntimeDirError when neither is available.
    """
    xdg = os.getenv("XDG_RUNTIME_DIR")
    if xdg:
        return Path(xdg)

    candidate = Path("/run/user") / str(os.getuid())
    if candidate.is_dir():
        return candidate

    raise RuntimeDirError(f"XDG_RUNTIME_DIR is not set and {candidate} does not exist")


def resolve_events_dir(runtime_dir: PathLike | None = None) -> Path:
    """Directory scanned for subscriber sockets."""
    base = Path(runtime_dir) if runtime_dir is not None else resolve_runtime_dir()
    return base / EVENTS_SUBDIR


def resolve_timeout(env_name: str, default: float) -> float:
    """Read a positive timeout in seconds from the environment."""
    raw = os.getenv(env_name)
    if raw is None or raw == "":
        return default

    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %.1fs", env_name, raw, default)
        return default

    if value <= 0:
        logger.warning("Non-positive %s=%r, using default %.1fs", env_name, raw, default)
        return default
    return value
