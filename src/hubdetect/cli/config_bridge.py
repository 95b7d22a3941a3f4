"""Bridge between CLI arguments and configuration overrides."""

from __future__ import annotations

import argparse
from typing import Any, Dict


class ConfigBridge:
    """Translates CLI arguments to configuration override dicts."""

    @staticmethod
    def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
        """Convert CLI arguments to a config override dict.

        Only options given on the command line produce overrides, so file
        values survive when a flag is absent.

        Args:
            args: Parsed CLI arguments.

        Returns:
            Dictionary of config overrides.
        """
        overrides: Dict[str, Any] = {}
        detect: Dict[str, Any] = {}
        scan_cli: Dict[str, Any] = {}

        for option, key in (
            ("executable_gav", "executable_gav"),
            ("log_level", "log_level"),
            ("scope", "scope"),
            ("validate_exit_code", "validate_exit_code"),
        ):
            value = getattr(args, option, None)
            if value is not None:
                detect[key] = value

        if getattr(args, "offline", None):
            scan_cli["offline"] = True
        if getattr(args, "force_scan_cli_download", None):
            scan_cli["force_download"] = True

        if detect:
            overrides["detect"] = detect
        if scan_cli:
            overrides["scan_cli"] = scan_cli
        if getattr(args, "skip", None):
            overrides["skip"] = True

        return overrides
