"""Validate command implementation.

Checks the configuration files a run would read: the project file (or
the one given with --config) and the global file holding the server
credentials.
"""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from hubdetect.config.models import HubDetectConfig

from hubdetect.cli.commands import Command
from hubdetect.cli.exit_codes import EXIT_DETECT_FAILED, EXIT_INVALID_USAGE, EXIT_SUCCESS
from hubdetect.config.loader import PROJECT_CONFIG_NAMES, find_global_config, find_project_config
from hubdetect.config.validation import (
    ConfigValidationIssue,
    validate_config_file,
    ValidationSeverity,
)


class ValidateCommand(Command):
    """Validates hubdetect configuration files."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "validate"

    def execute(self, args: Namespace, config: "HubDetectConfig | None" = None) -> int:
        """Execute the validate command.

        Returns:
            0 when every file is usable, 1 when one has errors, 3 when the
            project file cannot be found.
        """
        explicit = getattr(args, "config", None)
        project_file = Path(explicit) if explicit else find_project_config(Path.cwd())
        if project_file is None:
            print(f"No configuration file found. Expected one of: {', '.join(PROJECT_CONFIG_NAMES)}")
            return EXIT_INVALID_USAGE
        if not project_file.exists():
            print(f"Configuration file not found: {project_file}")
            return EXIT_INVALID_USAGE

        files: List[Path] = [project_file]
        global_file = find_global_config()
        if global_file is not None and global_file.resolve() != project_file.resolve():
            files.append(global_file)

        failed = False
        for path in files:
            is_valid, issues = validate_config_file(path)
            failed = failed or not is_valid
            self._report(path, issues)

        return EXIT_DETECT_FAILED if failed else EXIT_SUCCESS

    def _report(self, path: Path, issues: List[ConfigValidationIssue]) -> None:
        if not issues:
            print(f"{path}: ok")
            return
        errors = sum(1 for i in issues if i.severity == ValidationSeverity.ERROR)
        print(f"{path}: {errors} error(s), {len(issues) - errors} warning(s)")
        for issue in issues:
            line = f"  {issue.severity.value}: {issue.message}"
            if issue.suggestion:
                line += f" (did you mean '{issue.suggestion}'?)"
            print(line)
