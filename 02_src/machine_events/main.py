"""Entry point for the machine events CLI."""

from pathlib import Path

from dotenv import load_dotenv

from .cli import create_machine_cli
from .logging_config import setup_logging
from .machines import StaticMachineProvider


def main():
    """Run the machine command group."""
    load_dotenv(Path.cwd() / ".env")
    setup_logging()

    cli = create_machine_cli(provider=StaticMachineProvider.from_env())
    cli(prog_name="machine-events")


if __name__ == "__main__":
    main()
