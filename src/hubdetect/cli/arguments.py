"""Argument parser construction for the hubdetect CLI.

This module builds the argument parser with subcommands:
- hubdetect run      - Fetch and run detect for a project
- hubdetect status   - Show configuration and cache status
- hubdetect validate - Validate a configuration file
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show hubdetect version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )


def _add_project_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Configuration file to use instead of the project's hubdetect.yml.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root directory (default: current directory).",
    )


def _build_run_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'run' subcommand parser."""
    run_parser = subparsers.add_parser(
        "run",
        help="Fetch Black Duck detect if needed and run it on the project.",
        description=(
            "Resolve the detect jar (and scan-cli in offline mode) into the build "
            "cache, launch detect with the project configuration and validate its "
            "exit code."
        ),
    )
    _add_project_options(run_parser)

    detect_group = run_parser.add_argument_group("detect")
    detect_group.add_argument(
        "--executable-gav",
        metavar="GAV",
        help="detect coordinates, group:artifact:version (version may be 'latest').",
    )
    detect_group.add_argument(
        "--log-level",
        metavar="LEVEL",
        help="detect log level (default: INFO).",
    )
    detect_group.add_argument(
        "--scope",
        help="Dependency scope inspected by detect (default: runtime).",
    )
    detect_group.add_argument(
        "--validate-exit-code",
        metavar="VALUE",
        help=(
            "Expected detect exit code: an integer, 'true' for 0, "
            "anything else disables validation (default: 0)."
        ),
    )

    scan_cli_group = run_parser.add_argument_group("scan-cli")
    scan_cli_group.add_argument(
        "--offline",
        action="store_true",
        default=None,
        help="Run the signature scanner offline with a local scan-cli.",
    )
    scan_cli_group.add_argument(
        "--force-scan-cli-download",
        action="store_true",
        default=None,
        help="Download scan-cli directly instead of resolving it from the local repository.",
    )

    run_parser.add_argument(
        "--skip",
        action="store_true",
        default=None,
        help="Do nothing and exit successfully.",
    )


def _build_status_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'status' subcommand parser."""
    status_parser = subparsers.add_parser(
        "status",
        help="Show resolved configuration and cache status.",
        description="Show where hubdetect caches artifacts and which ones are present.",
    )
    _add_project_options(status_parser)


def _build_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'validate' subcommand parser."""
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a hubdetect.yml configuration file.",
        description="Check a configuration file for syntax errors, wrong types and unknown keys.",
    )
    validate_parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Configuration file to validate (default: hubdetect.yml in the current directory).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the complete argument parser."""
    parser = argparse.ArgumentParser(
        prog="hubdetect",
        description="hubdetect - fetch, configure and run Black Duck detect during a build.",
    )
    _add_global_options(parser)

    subparsers = parser.add_subparsers(dest="command", title="commands")
    _build_run_parser(subparsers)
    _build_status_parser(subparsers)
    _build_validate_parser(subparsers)

    return parser
