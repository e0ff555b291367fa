"""Click command group for machine commands with event hooks."""

import asyncio
import logging
from dataclasses import dataclass

import click
from click.shell_completion import CompletionItem

from .errors import ResolutionError
from .hub import NotificationHub
from .lifecycle import close_machine_events, init_machine_events
from .logging_config import get_logger
from .machines import MachineProvider, complete_machine_names
from .models import MachineEvent, MachineStatus

logger = get_logger(__name__)


@dataclass
class MachineContext:
    """Per-invocation state stored on the click context."""

    hub: NotificationHub
    runner: asyncio.Runner


def _parse_attributes(
    ctx: click.Context, param: click.Parameter, value: tuple[str, ...]
) -> dict[str, str]:
    attributes = {}
    for item in value:
        key, sep, val = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}")
        attributes[key] = val
    return attributes


def create_machine_cli(
    provider: MachineProvider | None = None,
    hub_factory=NotificationHub,
) -> click.Group:
    """Create the ``machine`` command group.

    The group callback is the pre-hook: it resolves subscriber sockets before
    any subcommand runs. The post-hook closes connections on context close,
    after the subcommand, whether it succeeded or failed.
    """

    def _complete_machine(
        ctx: click.Context, param: click.Parameter, incomplete: str
    ) -> list[CompletionItem]:
        return [CompletionItem(name) for name in complete_machine_names(provider, incomplete)]

    @click.group(invoke_without_command=True)
    @click.option(
        "--log-level",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
        default=None,
        help="Override the log level.",
    )
    @click.pass_context
    def machine(ctx: click.Context, log_level: str | None) -> None:
        """Manage a virtual machine."""
        if log_level:
            logging.getLogger().setLevel(log_level.upper())

        if ctx.invoked_subcommand is None:
            click.echo(ctx.get_help())
            return

        command_name = ctx.invoked_subcommand
        hub = hub_factory()
        try:
            init_machine_events(hub, command_name)
        except ResolutionError as e:
            raise click.ClickException(str(e)) from e

        runner = asyncio.Runner()
        ctx.obj = MachineContext(hub=hub, runner=runner)

        def _post_hook() -> None:
            try:
                runner.run(close_machine_events(hub, command_name))
            finally:
                runner.close()

        ctx.call_on_close(_post_hook)

    @machine.command("emit")
    @click.argument("status", type=click.Choice([s.value for s in MachineStatus]))
    @click.argument("name", shell_complete=_complete_machine)
    @click.option("--id", "machine_id", default=None, help="Machine identifier.")
    @click.option("--image", default=None, help="Machine image.")
    @click.option(
        "--attr",
        "attributes",
        multiple=True,
        callback=_parse_attributes,
        help="Extra KEY=VALUE attribute (repeatable).",
    )
    @click.pass_obj
    def emit(
        obj: MachineContext,
        status: str,
        name: str,
        machine_id: str | None,
        image: str | None,
        attributes: dict[str, str],
    ) -> None:
        """Publish a lifecycle event for machine NAME."""
        event = MachineEvent(
            name=name,
            id=machine_id,
            image=image,
            attributes=attributes or None,
        )
        results = obj.runner.run(obj.hub.publish(MachineStatus(status), event))
        delivered = sum(1 for r in results if r.success)
        click.echo(f"delivered {delivered}/{len(results)}")

    @machine.command("sockets")
    @click.pass_obj
    def sockets(obj: MachineContext) -> None:
        """List the subscriber sockets machine events are published on."""
        for endpoint in obj.hub.endpoints:
            click.echo(str(endpoint))

    return machine
