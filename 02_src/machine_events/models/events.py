"""Machine lifecycle event models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Event categories."""

    MACHINE = "machine"


class MachineStatus(str, Enum):
    """Lifecycle states of a managed machine."""

    INIT = "init"
    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    REMOVED = "removed"
    RESET = "reset"


class MachineEvent(BaseModel):
    """A lifecycle event for one machine.

    Callers build a partial event with the contextual fields. The broadcaster
    fills in ``type``, ``status`` and ``time`` at publish time via
    :meth:`stamp`, so the timestamp always reflects the actual publish instant.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        use_enum_values=True,
    )

    type: EventType | None = Field(default=None, description="Event category")
    status: MachineStatus | None = Field(default=None, description="Lifecycle state")
    time: datetime | None = Field(default=None, description="Publish instant (UTC)")
    name: str | None = Field(default=None, description="Machine name")
    id: str | None = Field(default=None, description="Machine identifier")
    image: str | None = Field(default=None, description="Machine image")
    attributes: dict[str, str] | None = Field(default=None, description="Free-form labels")

    def stamp(self, status: MachineStatus, time: datetime) -> "MachineEvent":
        """Return a copy carrying the publish-time fields."""
        return self.model_validate(
            {
                **self.model_dump(),
                "type": EventType.MACHINE,
                "status": MachineStatus(status),
                "time": time,
            }
        )

    def to_wire(self) -> bytes:
        """Serialize as one newline-terminated JSON record."""
        payload = self.model_dump_json(exclude_none=True)
        return payload.encode("utf-8") + b"\n"
