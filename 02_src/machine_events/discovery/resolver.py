"""Discovery of subscriber sockets for machine events."""

import os
import stat
from pathlib import Path
from typing import Iterator, Mapping, Protocol

from ..config import (
    EVENTS_SOCK_ENV,
    EVENTS_SOCKET_PREFIX,
    EVENTS_SOCKET_SUFFIX,
    resolve_events_dir,
)
from ..errors import ResolutionError, RuntimeDirError
from ..logging_config import get_logger

logger = get_logger(__name__)


def is_event_socket_name(name: str) -> bool:
    """Check whether a file name follows the machine_events*.sock convention."""
    return (
        len(name) >= len(EVENTS_SOCKET_PREFIX) + len(EVENTS_SOCKET_SUFFIX)
        and name.startswith(EVENTS_SOCKET_PREFIX)
        and name.endswith(EVENTS_SOCKET_SUFFIX)
    )


class IEndpointResolver(Protocol):
    """Determines which local sockets should receive machine events."""

    def resolve(self) -> list[Path]:
        """Return subscriber socket paths, in discovery order."""
        ...


class EndpointResolver:
    """Resolves endpoints from the override env var or a runtime-dir scan."""

    def __init__(
        self,
        events_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self._events_dir = events_dir
        self._environ = environ if environ is not None else os.environ

    def resolve(self) -> list[Path]:
        """Return subscriber socket paths, in discovery order.

        Raises:
            ResolutionError: on filesystem errors other than a missing directory.
        """
        # Used mostly for testing
        override = self._environ.get(EVENTS_SOCK_ENV)
        if override is not None:
            return [Path(override)]

        events_dir = self._events_dir
        if events_dir is None:
            try:
                events_dir = resolve_events_dir()
            except RuntimeDirError as e:
                logger.warning(
                    "Failed to get runtime dir, machine events will not be published: %s", e
                )
                return []

        try:
            endpoints = list(self._walk(events_dir))
        except FileNotFoundError:
            logger.debug("Machine events directory %s does not exist", events_dir)
            return []
        except OSError as e:
            raise ResolutionError(events_dir, e) from e

        for path in endpoints:
            logger.debug("Machine events will be published on: %s", path)
        return endpoints

    def _walk(self, directory: Path) -> Iterator[Path]:
        """Yield matching sockets below directory, depth first."""
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    try:
                        yield from self._walk(Path(entry.path))
                    except FileNotFoundError:
                        continue  # removed while scanning
                    continue

                if not is_event_socket_name(entry.name):
                    continue

                try:
                    mode = entry.stat(follow_symlinks=False).st_mode
                except FileNotFoundError:
                    continue  # removed while scanning
                if stat.S_ISSOCK(mode):
                    yield Path(entry.path)
