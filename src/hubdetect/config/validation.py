"""Configuration validation for hubdetect.

Validates known configuration keys and warns on unknown ones, with a
suggestion when the unknown key looks like a typo.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from hubdetect.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config will fail at runtime
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


@dataclass
class ConfigValidationWarning:
    """A validation warning for configuration."""

    message: str
    source: str
    key: Optional[str] = None
    suggestion: Optional[str] = None


VALID_TOP_LEVEL_KEYS: Set[str] = {
    "skip",
    "build_directory",
    "local_repository",
    "blackduck",
    "servers",
    "repositories",
    "detect",
    "scan_cli",
}

VALID_BLACKDUCK_KEYS: Set[str] = {
    "url",
    "name",
    "server_id",
}

VALID_SERVER_KEYS: Set[str] = {
    "username",
    "password",
}

VALID_DETECT_KEYS: Set[str] = {
    "executable_gav",
    "cache",
    "artifactory_base",
    "artifact_repository_name",
    "latest_version_url",
    "log_level",
    "validate_exit_code",
    "scope",
    "java_executable",
    "system_variables",
    "jvm_options",
    "environment",
    "args",
    "exclusions",
}

VALID_SCAN_CLI_KEYS: Set[str] = {
    "gav",
    "cache",
    "download_url",
    "offline",
    "force_download",
}

# Keys whose value must be a mapping / list (a lone string counts as one item) / boolean
DETECT_MAPPING_KEYS: Set[str] = {"system_variables", "environment"}
DETECT_LIST_KEYS: Set[str] = {"jvm_options", "args", "exclusions"}
SCAN_CLI_BOOLEAN_KEYS: Set[str] = {"offline", "force_download"}

# Coordinate keys, validated as group:artifact:version
COORDINATE_KEYS: Dict[str, str] = {
    "detect": "executable_gav",
    "scan_cli": "gav",
}


def validate_config(
    data: Dict[str, Any],
    source: str,
) -> List[ConfigValidationWarning]:
    """Validate configuration dictionary.

    Does not raise exceptions - returns warnings instead.

    Args:
        data: Config dictionary to validate.
        source: Source file path for warning messages.

    Returns:
        List of validation warnings.
    """
    warnings: List[ConfigValidationWarning] = []

    if not isinstance(data, dict):  # type: ignore[unreachable]
        warnings.append(ConfigValidationWarning(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
        ))
        return warnings  # type: ignore[unreachable]

    _check_keys(data, VALID_TOP_LEVEL_KEYS, "", source, warnings)

    skip = data.get("skip")
    if skip is not None and not isinstance(skip, bool):
        warnings.append(ConfigValidationWarning(
            message="'skip' must be a boolean",
            source=source,
            key="skip",
        ))

    for section, valid_keys in (
        ("blackduck", VALID_BLACKDUCK_KEYS),
        ("detect", VALID_DETECT_KEYS),
        ("scan_cli", VALID_SCAN_CLI_KEYS),
    ):
        value = data.get(section)
        if value is None:
            continue
        if not isinstance(value, dict):
            warnings.append(ConfigValidationWarning(
                message=f"'{section}' must be a mapping, got {type(value).__name__}",
                source=source,
                key=section,
            ))
            continue
        _check_keys(value, valid_keys, f"{section}.", source, warnings)

    detect = data.get("detect")
    if isinstance(detect, dict):
        for key in sorted(DETECT_MAPPING_KEYS):
            if detect.get(key) is not None and not isinstance(detect[key], dict):
                warnings.append(ConfigValidationWarning(
                    message=f"'detect.{key}' must be a mapping",
                    source=source,
                    key=f"detect.{key}",
                ))
        for key in sorted(DETECT_LIST_KEYS):
            if detect.get(key) is not None and not isinstance(detect[key], (list, str)):
                warnings.append(ConfigValidationWarning(
                    message=f"'detect.{key}' must be a list",
                    source=source,
                    key=f"detect.{key}",
                ))

    scan_cli = data.get("scan_cli")
    if isinstance(scan_cli, dict):
        for key in sorted(SCAN_CLI_BOOLEAN_KEYS):
            if scan_cli.get(key) is not None and not isinstance(scan_cli[key], bool):
                warnings.append(ConfigValidationWarning(
                    message=f"'scan_cli.{key}' must be a boolean",
                    source=source,
                    key=f"scan_cli.{key}",
                ))

    for section, key in COORDINATE_KEYS.items():
        value = data.get(section)
        if not isinstance(value, dict) or value.get(key) is None:
            continue
        parts = str(value[key]).split(":")
        if len(parts) != 3 or not all(p.strip() for p in parts):
            warnings.append(ConfigValidationWarning(
                message=f"'{section}.{key}' must be group:artifact:version",
                source=source,
                key=f"{section}.{key}",
            ))

    servers = data.get("servers")
    if servers is not None:
        if not isinstance(servers, dict):
            warnings.append(ConfigValidationWarning(
                message=f"'servers' must be a mapping, got {type(servers).__name__}",
                source=source,
                key="servers",
            ))
        else:
            for server_id, entry in servers.items():
                if not isinstance(entry, dict):
                    warnings.append(ConfigValidationWarning(
                        message=f"'servers.{server_id}' must be a mapping",
                        source=source,
                        key=f"servers.{server_id}",
                    ))
                    continue
                _check_keys(entry, VALID_SERVER_KEYS, f"servers.{server_id}.", source, warnings)

    repositories = data.get("repositories")
    if repositories is not None:
        if not isinstance(repositories, list):
            warnings.append(ConfigValidationWarning(
                message="'repositories' must be a list",
                source=source,
                key="repositories",
            ))
        else:
            for i, repository in enumerate(repositories):
                if isinstance(repository, str):
                    continue
                if not isinstance(repository, dict) or "url" not in repository:
                    warnings.append(ConfigValidationWarning(
                        message=f"'repositories[{i}]' must be a url or have a 'url' field",
                        source=source,
                        key=f"repositories[{i}]",
                    ))

    return warnings


def _check_keys(
    data: Dict[str, Any],
    valid_keys: Set[str],
    prefix: str,
    source: str,
    warnings: List[ConfigValidationWarning],
) -> None:
    for key in data.keys():
        if key not in valid_keys:
            suggestion = _suggest_key(str(key), valid_keys)
            label = "top-level key" if not prefix else "key"
            warning = ConfigValidationWarning(
                message=f"Unknown {label} '{prefix}{key}'",
                source=source,
                key=f"{prefix}{key}",
                suggestion=suggestion,
            )
            warnings.append(warning)
            _log_warning(warning)


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Args:
        invalid_key: The invalid key entered.
        valid_keys: Set of valid keys.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(warning: ConfigValidationWarning) -> None:
    """Log a validation warning."""
    msg = f"{warning.message} in {warning.source}"
    if warning.suggestion:
        msg += f" (did you mean '{warning.suggestion}'?)"
    LOGGER.warning(msg)


# Warnings that make the configuration unusable rather than suspicious
_ERROR_MARKERS = ("must be",)


def validate_config_file(config_path: Path) -> Tuple[bool, List[ConfigValidationIssue]]:
    """Validate a configuration file from disk.

    Checks file existence, YAML syntax, and configuration semantics.
    Type errors are reported as errors, unknown keys as warnings.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Tuple of (is_valid, issues) where is_valid is False if any errors exist.
    """
    issues: List[ConfigValidationIssue] = []
    source = str(config_path)

    if not config_path.exists():
        issues.append(ConfigValidationIssue(
            message=f"Configuration file not found: {config_path}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return False, issues

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        issues.append(ConfigValidationIssue(
            message=f"Invalid YAML: {e}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return False, issues

    if data is None:
        data = {}

    for warning in validate_config(data, source):
        severity = (
            ValidationSeverity.ERROR
            if any(marker in warning.message for marker in _ERROR_MARKERS)
            else ValidationSeverity.WARNING
        )
        issues.append(ConfigValidationIssue(
            message=warning.message,
            source=warning.source,
            severity=severity,
            key=warning.key,
            suggestion=warning.suggestion,
        ))

    is_valid = not any(i.severity == ValidationSeverity.ERROR for i in issues)
    return is_valid, issues
