"""Delivery outcome models."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of writing one event to one subscriber connection."""

    endpoint: Path
    success: bool
    error: str | None = None  # set when success is False
