"""Run command implementation."""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hubdetect.config.models import HubDetectConfig

from hubdetect.cli.commands import Command
from hubdetect.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from hubdetect.core.logging import get_logger
from hubdetect.core.orchestrator import HubDetectRunner

LOGGER = get_logger(__name__)


class RunCommand(Command):
    """Fetches detect if needed and runs it on a project."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "run"

    def execute(self, args: Namespace, config: "HubDetectConfig | None" = None) -> int:
        """Execute the run command.

        Fatal conditions propagate as HubDetectError; the CLI runner turns
        them into exit codes.

        Args:
            args: Parsed command-line arguments.
            config: Loaded configuration (required).

        Returns:
            Exit code.
        """
        if config is None:
            LOGGER.error("The run command needs a configuration")
            return EXIT_INVALID_USAGE

        runner = HubDetectRunner(config, Path(args.path).resolve())
        outcome = runner.run()
        if not outcome.skipped:
            LOGGER.info(f"detect finished with exit status {outcome.exit_code}")
        return EXIT_SUCCESS
