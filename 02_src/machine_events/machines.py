"""Machine name providers used for shell completion."""

import os
from typing import Protocol

from .config import MACHINES_ENV
from .logging_config import get_logger

logger = get_logger(__name__)


class MachineProvider(Protocol):
    """Lists the machines known to the local virtualization provider."""

    def list_machines(self) -> list[str]:
        """Return machine names."""
        ...


class StaticMachineProvider:
    """Provider backed by a fixed list of machine names."""

    def __init__(self, names: list[str] | None = None):
        self._names = list(names or [])

    @classmethod
    def from_env(cls, env_value: str | None = None) -> "StaticMachineProvider":
        """Build from a comma separated MACHINE_EVENTS_MACHINES value."""
        raw = os.getenv(MACHINES_ENV, "") if env_value is None else env_value
        return cls([name.strip() for name in raw.split(",") if name.strip()])

    def list_machines(self) -> list[str]:
        return list(self._names)


def complete_machine_names(provider: MachineProvider | None, incomplete: str) -> list[str]:
    """Machine names starting with the partial user input.

    Provider errors are logged and produce no suggestions.
    """
    if provider is None:
        return []

    try:
        machines = provider.list_machines()
    except Exception as e:
        logger.error("Failed to list machines for completion: %s", e)
        return []

    return [name for name in machines if name.startswith(incomplete)]
