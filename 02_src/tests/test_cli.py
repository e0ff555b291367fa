"""Tests for the machine command group."""

import json
from pathlib import Path

from click.testing import CliRunner

from machine_events.cli import create_machine_cli
from machine_events.errors import ResolutionError
from machine_events.hub import NotificationHub
from machine_events.machines import StaticMachineProvider, complete_machine_names

A = Path("/run/test/machine_events-a.sock")
B = Path("/run/test/machine_events-b.sock")


def make_cli(resolver, dialer, provider=None):
    hubs = []

    def factory():
        hub = NotificationHub(resolver=resolver, dialer=dialer)
        hubs.append(hub)
        return hub

    return create_machine_cli(provider=provider, hub_factory=factory), hubs


class TestEmitCommand:
    """Tests for `machine emit`."""

    def test_emit_publishes_and_closes(self, resolver_factory, dialer_factory):
        dialer = dialer_factory(refuse=[B])
        cli, _ = make_cli(resolver_factory([A, B]), dialer)

        result = CliRunner().invoke(
            cli, ["emit", "running", "vm1", "--image", "fedora", "--attr", "provider=qemu"]
        )

        assert result.exit_code == 0, result.output
        assert "delivered 1/1" in result.output
        record = json.loads(dialer.connections[A].payloads[0])
        assert record["status"] == "running"
        assert record["name"] == "vm1"
        assert record["image"] == "fedora"
        assert record["attributes"] == {"provider": "qemu"}
        # Post-hook closed the connection
        assert dialer.connections[A].close_calls == 1

    def test_emit_rejects_unknown_status(self, resolver_factory, dialer_factory):
        cli, _ = make_cli(resolver_factory([A]), dialer_factory())

        result = CliRunner().invoke(cli, ["emit", "exploded", "vm1"])

        assert result.exit_code != 0

    def test_emit_rejects_bad_attribute(self, resolver_factory, dialer_factory):
        cli, _ = make_cli(resolver_factory([A]), dialer_factory())

        result = CliRunner().invoke(cli, ["emit", "running", "vm1", "--attr", "novalue"])

        assert result.exit_code != 0
        assert "KEY=VALUE" in result.output

    def test_resolution_error_aborts(self, resolver_factory, dialer_factory):
        """Test that a discovery failure aborts before the command body."""
        err = ResolutionError(Path("/run/x"), PermissionError("denied"))
        dialer = dialer_factory()
        cli, _ = make_cli(resolver_factory(error=err), dialer)

        result = CliRunner().invoke(cli, ["emit", "running", "vm1"])

        assert result.exit_code == 1
        assert "Failed to scan" in result.output
        assert "delivered" not in result.output
        assert dialer.dialed == []


class TestSocketsCommand:
    """Tests for `machine sockets`."""

    def test_lists_endpoints_without_dialing(self, resolver_factory, dialer_factory):
        dialer = dialer_factory()
        cli, hubs = make_cli(resolver_factory([A, B]), dialer)

        result = CliRunner().invoke(cli, ["sockets"])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [str(A), str(B)]
        assert dialer.dialed == []
        assert len(hubs) == 1


class TestGroup:
    """Tests for the group itself."""

    def test_no_subcommand_prints_help(self, resolver_factory, dialer_factory):
        cli, hubs = make_cli(resolver_factory([A]), dialer_factory())

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0
        assert "Manage a virtual machine" in result.output
        assert hubs == []


class TestMachineCompletion:
    """Tests for machine name completion."""

    def test_prefix_filter(self):
        provider = StaticMachineProvider(["dev", "default", "prod"])

        assert complete_machine_names(provider, "de") == ["dev", "default"]
        assert complete_machine_names(provider, "") == ["dev", "default", "prod"]
        assert complete_machine_names(provider, "x") == []

    def test_no_provider(self):
        assert complete_machine_names(None, "de") == []

    def test_provider_error_yields_nothing(self, caplog):
        class BrokenProvider:
            def list_machines(self):
                raise OSError("provider unavailable")

        assert complete_machine_names(BrokenProvider(), "d") == []
        assert "provider unavailable" in caplog.text

    def test_provider_from_env(self):
        provider = StaticMachineProvider.from_env(" dev, prod ,,")

        assert provider.list_machines() == ["dev", "prod"]
