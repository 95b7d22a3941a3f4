"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (hubdetect.yml)
- Global config (~/.hubdetect/config/config.yml), the usual home of
  server credentials
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from hubdetect.bootstrap.paths import get_hubdetect_home
from hubdetect.config.models import (
    BlackduckConfig,
    DetectConfig,
    HubDetectConfig,
    ScanCliConfig,
    ServerCredentials,
)
from hubdetect.config.validation import validate_config
from hubdetect.core.errors import ConfigError
from hubdetect.core.logging import get_logger
from hubdetect.core.models import Repository

LOGGER = get_logger(__name__)

# Config file names
PROJECT_CONFIG_NAMES = ["hubdetect.yml", ".hubdetect.yml", "hubdetect.yaml", ".hubdetect.yaml"]
GLOBAL_CONFIG_NAME = "config.yml"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def load_config(
    project_root: Path,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
) -> HubDetectConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config (hubdetect.yml)
    3. Global config (~/.hubdetect/config/config.yml)
    4. Built-in defaults

    Args:
        project_root: Project root directory for finding hubdetect.yml.
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.

    Returns:
        Merged HubDetectConfig instance.

    Raises:
        ConfigError: If a config file is missing, malformed or has invalid values.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    # Layer 1: Global config
    global_path = find_global_config()
    if global_path:
        merged = merge_configs(merged, _load_layer(global_path))
        sources.append(f"global:{global_path}")
        LOGGER.debug(f"Loaded global config from {global_path}")

    # Layer 2: Project or custom config
    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        merged = merge_configs(merged, _load_layer(cli_config_path))
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")
    else:
        project_path = find_project_config(project_root)
        if project_path:
            merged = merge_configs(merged, _load_layer(project_path))
            sources.append(f"project:{project_path}")
            LOGGER.debug(f"Loaded project config from {project_path}")

    # Layer 3: CLI overrides
    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def _load_layer(path: Path) -> Dict[str, Any]:
    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    validate_config(data, source=str(path))
    return data


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find config file in project root.

    Args:
        project_root: Directory to search in.

    Returns:
        Path to config file if found, None otherwise.
    """
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def find_global_config() -> Optional[Path]:
    """Find global config at ~/.hubdetect/config/config.yml.

    Returns:
        Path to global config if it exists, None otherwise.
    """
    config_path = get_hubdetect_home() / "config" / GLOBAL_CONFIG_NAME
    if config_path.exists():
        return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def _as_str(value: Any) -> str:
    # YAML turns `true` and `0` into bool/int; detect expects text
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ConfigError(f"'{key}' must be a boolean, got {value!r}")


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _str_map(data: Dict[str, Any], key: str, section: str) -> Dict[str, str]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{section}.{key}' must be a mapping")
    return {str(k): _as_str(v) for k, v in value.items()}


def _str_list(data: Dict[str, Any], key: str, section: str) -> List[str]:
    value = data.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(f"'{section}.{key}' must be a list")
    return [_as_str(item) for item in value]


def _parse_repositories(value: Any) -> List[Repository]:
    if not isinstance(value, list):
        raise ConfigError("'repositories' must be a list")
    repositories = []
    for index, item in enumerate(value):
        if isinstance(item, str):
            repositories.append(Repository(id=f"repository-{index}", url=item))
        elif isinstance(item, dict) and item.get("url"):
            repositories.append(Repository(id=str(item.get("id") or f"repository-{index}"), url=str(item["url"])))
        else:
            raise ConfigError(f"'repositories[{index}]' must be a url or a mapping with a 'url'")
    return repositories


def dict_to_config(data: Dict[str, Any]) -> HubDetectConfig:
    """Convert a merged configuration dict to a typed HubDetectConfig.

    Raises:
        ConfigError: If a value has the wrong type.
    """
    config = HubDetectConfig()

    if "skip" in data:
        config.skip = _as_bool(data["skip"], "skip")
    if data.get("build_directory"):
        config.build_directory = _as_str(data["build_directory"])
    if data.get("local_repository"):
        config.local_repository = _as_str(data["local_repository"])

    blackduck = _section(data, "blackduck")
    config.blackduck = BlackduckConfig(
        url=_as_str(blackduck.get("url")),
        name=_as_str(blackduck.get("name")),
        server_id=_as_str(blackduck.get("server_id")) or config.blackduck.server_id,
    )

    servers = _section(data, "servers")
    for server_id, entry in servers.items():
        if not isinstance(entry, dict):
            raise ConfigError(f"'servers.{server_id}' must be a mapping")
        config.servers[str(server_id)] = ServerCredentials(
            username=_as_str(entry.get("username")),
            password=_as_str(entry.get("password")),
        )

    if "repositories" in data and data["repositories"] is not None:
        config.repositories = _parse_repositories(data["repositories"])

    detect = _section(data, "detect")
    defaults = DetectConfig()
    config.detect = DetectConfig(
        executable_gav=_as_str(detect.get("executable_gav")) or defaults.executable_gav,
        cache=_as_str(detect.get("cache")) or None,
        artifactory_base=_as_str(detect.get("artifactory_base")) or defaults.artifactory_base,
        artifact_repository_name=(
            _as_str(detect.get("artifact_repository_name")) or defaults.artifact_repository_name
        ),
        latest_version_url=_as_str(detect.get("latest_version_url")) or defaults.latest_version_url,
        log_level=_as_str(detect.get("log_level")) or defaults.log_level,
        validate_exit_code=(
            _as_str(detect["validate_exit_code"]) if "validate_exit_code" in detect else defaults.validate_exit_code
        ),
        scope=_as_str(detect.get("scope")) or defaults.scope,
        java_executable=_as_str(detect.get("java_executable")) or None,
        system_variables=_str_map(detect, "system_variables", "detect"),
        jvm_options=_str_list(detect, "jvm_options", "detect"),
        environment=_str_map(detect, "environment", "detect"),
        args=_str_list(detect, "args", "detect"),
        exclusions=_exclusions(detect.get("exclusions")),
    )

    scan_cli = _section(data, "scan_cli")
    scan_defaults = ScanCliConfig()
    config.scan_cli = ScanCliConfig(
        gav=_as_str(scan_cli.get("gav")) or scan_defaults.gav,
        cache=_as_str(scan_cli.get("cache")) or None,
        download_url=_as_str(scan_cli.get("download_url")) or scan_defaults.download_url,
        offline=_as_bool(scan_cli.get("offline", False), "scan_cli.offline"),
        force_download=_as_bool(scan_cli.get("force_download", False), "scan_cli.force_download"),
    )

    return config


def _exclusions(value: Any) -> List[Optional[str]]:
    # null items are kept here and dropped when the exclusion list is built
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError("'detect.exclusions' must be a list")
    return [None if item is None else str(item) for item in value]
