"""Status command implementation."""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hubdetect.config.models import HubDetectConfig

from hubdetect.bootstrap.paths import HubDetectPaths
from hubdetect.bootstrap.validation import CacheStatus, check_cache
from hubdetect.cli.commands import Command
from hubdetect.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS


class StatusCommand(Command):
    """Shows configuration sources and cache status."""

    def __init__(self, version: str):
        """Initialize StatusCommand.

        Args:
            version: Current hubdetect version string.
        """
        self._version = version

    @property
    def name(self) -> str:
        """Command identifier."""
        return "status"

    def execute(self, args: Namespace, config: "HubDetectConfig | None" = None) -> int:
        """Execute the status command.

        Args:
            args: Parsed command-line arguments.
            config: Loaded configuration.

        Returns:
            Exit code (0 unless no configuration is available).
        """
        if config is None:
            print("No configuration available.")
            return EXIT_INVALID_USAGE

        paths = HubDetectPaths.for_project(
            Path(args.path).resolve(),
            build_directory=config.build_directory,
            tool_cache=config.detect.cache,
            scan_cli_cache=config.scan_cli.cache,
        )
        report = check_cache(paths)

        print(f"hubdetect version: {self._version}")
        sources = ", ".join(config._config_sources) or "defaults only"
        print(f"Configuration: {sources}")
        print(f"Black Duck: {config.blackduck.url or '(url not set)'} "
              f"project {config.blackduck.name or '(name not set)'}")
        print(f"detect: {config.detect.executable_gav}")
        print()

        print("Cache:")
        entries = [
            ("detect jar", paths.tool_cache, report.tool_jar),
            ("scan-cli archive", paths.scan_cli_cache, report.scan_cli_archive),
            ("scan-cli directory", paths.scan_cli_dir, report.scan_cli_dir),
        ]
        for label, path, status in entries:
            marker = "ok" if status == CacheStatus.PRESENT else status.value
            print(f"  {label}: {path} [{marker}]")

        print()
        if config.scan_cli.offline:
            print("Offline scanning is enabled, scan-cli is fetched on the next run if missing.")
        print("Cache entries are never refreshed: delete them to pick up a new version.")

        return EXIT_SUCCESS
