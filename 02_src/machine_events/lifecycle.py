"""Command-boundary hooks for machine event publishing."""

import sys
from typing import Awaitable, Callable, TypeVar

from .hub import NotificationHub
from .logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def init_machine_events(hub: NotificationHub, command_name: str) -> None:
    """Pre-hook: resolve subscriber sockets before the command body runs.

    No sockets are dialed here; dialing is deferred to the first publish.
    ResolutionError propagates and aborts the command.
    """
    logger.debug("Called machine %s pre-hook (%s)", command_name, " ".join(sys.argv))
    hub.prepare()


async def close_machine_events(hub: NotificationHub, command_name: str) -> None:
    """Post-hook: close every live connection. Safe to call twice."""
    logger.debug("Called machine %s post-hook (%s)", command_name, " ".join(sys.argv))
    await hub.close()


async def run_with_machine_events(
    hub: NotificationHub,
    command_name: str,
    body: Callable[[NotificationHub], Awaitable[T]],
) -> T:
    """Run body between the pre-hook and the post-hook.

    The post-hook runs whether body succeeds or fails.
    """
    init_machine_events(hub, command_name)
    try:
        return await body(hub)
    finally:
        await close_machine_events(hub, command_name)
