"""CLI runner orchestration.

This module handles command dispatch and execution for the hubdetect CLI.
"""

from __future__ import annotations

import logging
import traceback
from argparse import Namespace
from pathlib import Path
from typing import Iterable, Optional

from importlib.metadata import version, PackageNotFoundError

from hubdetect.cli.arguments import build_parser
from hubdetect.cli.config_bridge import ConfigBridge
from hubdetect.cli.exit_codes import (
    EXIT_DETECT_FAILED,
    EXIT_FETCH_ERROR,
    EXIT_INTERRUPTED,
    EXIT_INVALID_USAGE,
    EXIT_SUCCESS,
)
from hubdetect.cli.commands.run import RunCommand
from hubdetect.cli.commands.status import StatusCommand
from hubdetect.cli.commands.validate import ValidateCommand
from hubdetect.config import HubDetectConfig, load_config
from hubdetect.core.errors import (
    ConfigError,
    ExitCodeMismatchError,
    HubDetectError,
    ProcessInterruptedError,
)
from hubdetect.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get hubdetect version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("hubdetect")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from hubdetect import __version__
        return __version__


def _describe(error: BaseException) -> str:
    """Message of an error followed by its underlying cause, if any."""
    cause = error.__cause__
    if cause is None or str(cause) in str(error):
        return str(error)
    return f"{error} ({type(cause).__name__}: {cause})"


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self) -> None:
        """Initialize CLIRunner with parser and commands."""
        self.parser = build_parser()
        self._version = get_version()
        self.run_cmd = RunCommand()
        self.status_cmd = StatusCommand(version=self._version)
        self.validate_cmd = ValidateCommand()

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        # Handle --help specially to return 0
        if argv is not None:
            argv_list = list(argv)
            if "--help" in argv_list or "-h" in argv_list:
                self.parser.print_help()
                return EXIT_SUCCESS
        else:
            argv_list = None

        args = self.parser.parse_args(argv_list)
        command = getattr(args, "command", None)

        # A run reports its progress at INFO unless asked otherwise
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
            default_level=logging.INFO if command == "run" else logging.WARNING,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        if command == "run":
            return self._handle_run(args)
        elif command == "status":
            return self._handle_status(args)
        elif command == "validate":
            return self.validate_cmd.execute(args)
        else:
            # No command specified - show help
            self.parser.print_help()
            return EXIT_SUCCESS

    def _load(self, args: Namespace) -> Optional[HubDetectConfig]:
        try:
            return load_config(
                project_root=Path(args.path).resolve(),
                cli_config_path=getattr(args, "config", None),
                cli_overrides=ConfigBridge.args_to_overrides(args),
            )
        except ConfigError as e:
            LOGGER.error(str(e))
            return None

    def _handle_run(self, args: Namespace) -> int:
        """Handle the run command.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Exit code.
        """
        config = self._load(args)
        if config is None:
            return EXIT_INVALID_USAGE

        try:
            return self.run_cmd.execute(args, config)
        except ConfigError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE
        except ExitCodeMismatchError as e:
            LOGGER.error(str(e))
            return EXIT_DETECT_FAILED
        except ProcessInterruptedError as e:
            LOGGER.error(str(e))
            return EXIT_INTERRUPTED
        except HubDetectError as e:
            if args.debug:
                traceback.print_exc()
            LOGGER.error(f"hubdetect failed: {_describe(e)}")
            return EXIT_FETCH_ERROR

    def _handle_status(self, args: Namespace) -> int:
        """Handle the status command.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Exit code.
        """
        config = self._load(args)
        if config is None:
            return EXIT_INVALID_USAGE
        return self.status_cmd.execute(args, config)
