"""Command line and environment construction for the detect process.

Detect is configured in one of two shapes, chosen once per run from the
resolved detect version:
- LEGACY_JSON (detect 4 and older): system variables become -D JVM
  properties and the whole configuration map travels as one JSON object
  in SPRING_APPLICATION_JSON.
- MODERN_FLAGS (detect 5 and newer): system variables join the
  configuration map and every entry becomes a --key=value argument.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from hubdetect.core.logging import get_logger
from hubdetect.core.models import HostEnvironment, ProcessSpec, redact_config

LOGGER = get_logger(__name__)

SPRING_APPLICATION_JSON = "SPRING_APPLICATION_JSON"
ROOT_PROJECT_PLACEHOLDER = "$rootProject"

# Always excluded from signature scanning: hubdetect's own output directory
ENFORCED_EXCLUSION = "/blackduck/"

OUTPUT_PATH_KEY = "detect.output.path"
OFFLINE_PATH_KEY = "detect.hub.signature.scanner.offline.local.path"
EXCLUSION_PATTERNS_KEY = "detect.hub.signature.scanner.exclusion.patterns"

# Property names renamed by detect 5
FLAG_PREFIX_REWRITES = (
    ("blackduck.hub.", "blackduck."),
    ("detect.hub.", "detect.blackduck."),
)


class ConfigEmission(ABC):
    """Serialization of the configuration map for one detect generation."""

    def jvm_properties(self, system_variables: Mapping[str, str]) -> List[str]:
        """JVM options emitted before -jar."""
        return []

    def absorb(self, config: Dict[str, str], system_variables: Mapping[str, str]) -> None:
        """Fold system variables into the configuration map."""

    def environment(self, config: Mapping[str, str]) -> Dict[str, str]:
        """Environment variables carrying the configuration."""
        return {}

    def flags(self, config: Mapping[str, str]) -> List[str]:
        """Arguments emitted after the user arguments."""
        return []

    @property
    @abstractmethod
    def name(self) -> str:
        """Label used in logs."""


class LegacyJsonEmission(ConfigEmission):
    @property
    def name(self) -> str:
        return "SPRING_APPLICATION_JSON"

    def jvm_properties(self, system_variables: Mapping[str, str]) -> List[str]:
        return [f"-D{key}={value}" for key, value in system_variables.items()]

    def environment(self, config: Mapping[str, str]) -> Dict[str, str]:
        return {SPRING_APPLICATION_JSON: json.dumps(dict(config))}


class ModernFlagsEmission(ConfigEmission):
    @property
    def name(self) -> str:
        return "command line flags"

    def absorb(self, config: Dict[str, str], system_variables: Mapping[str, str]) -> None:
        config.update(system_variables)

    def flags(self, config: Mapping[str, str]) -> List[str]:
        return [f"--{rewrite_flag_key(key)}={value}" for key, value in config.items()]


def rewrite_flag_key(key: str) -> str:
    """Rename a legacy property key to its detect 5+ flag name."""
    for old, new in FLAG_PREFIX_REWRITES:
        key = key.replace(old, new)
    return key


class ConfigEmissionMode(str, Enum):
    """How the configuration map reaches detect."""

    LEGACY_JSON = "legacy_json"
    MODERN_FLAGS = "modern_flags"

    @classmethod
    def for_version(cls, version: str) -> "ConfigEmissionMode":
        """Pick the mode from a detect version.

        The leading numeric segment (before the first '.') decides:
        greater than 4 means flags. Unparseable versions also use flags.
        """
        try:
            major = int(version.split(".")[0])
        except ValueError:
            return cls.MODERN_FLAGS
        return cls.MODERN_FLAGS if major > 4 else cls.LEGACY_JSON

    @property
    def emission(self) -> ConfigEmission:
        return _EMISSIONS[self]


_EMISSIONS: Dict[ConfigEmissionMode, ConfigEmission] = {
    ConfigEmissionMode.LEGACY_JSON: LegacyJsonEmission(),
    ConfigEmissionMode.MODERN_FLAGS: ModernFlagsEmission(),
}


@dataclass(frozen=True)
class DetectInvocation:
    """Inputs of a single detect launch.

    Attributes:
        tool_path: Cached detect jar.
        tool_version: Resolved detect version (drives the emission mode).
        root_path: Root project directory, substituted for $rootProject.
        output_dir: Default detect output directory.
        scan_cli_dir: Extracted scan-cli directory in offline mode.
    """

    tool_path: Path
    tool_version: str
    root_path: Path
    output_dir: Path
    blackduck_url: str
    project_name: str
    username: str = ""
    password: str = ""
    log_level: str = "INFO"
    scope: str = "runtime"
    scan_cli_dir: Optional[Path] = None
    system_variables: Mapping[str, str] = field(default_factory=dict)
    jvm_options: Sequence[str] = ()
    environment: Mapping[str, str] = field(default_factory=dict)
    args: Sequence[str] = ()
    exclusions: Sequence[Optional[str]] = ()


def build_exclusions(exclusions: Sequence[Optional[str]]) -> str:
    """Comma-join the enforced exclusion and the trimmed, non-null user ones."""
    patterns = [ENFORCED_EXCLUSION]
    patterns.extend(item.strip() for item in exclusions if item is not None)
    return ",".join(patterns)


def substitute_placeholders(value: str, root_path: Path) -> str:
    """Replace $rootProject with the root project path.

    Applied to system variables in both emission modes, so a value such
    as "$rootProject/reports" means the same thing to detect 4 (as a -D
    property) and to detect 5+ (as a --flag).
    """
    return value.replace(ROOT_PROJECT_PLACEHOLDER, str(root_path))


def build_config_map(invocation: DetectInvocation) -> Dict[str, str]:
    """Build the detect configuration map (without user system variables).

    Key names follow the detect 4 property names; MODERN_FLAGS rewrites
    them when emitting flags.
    """
    config: Dict[str, str] = {
        "blackduck.hub.url": invocation.blackduck_url,
        "blackduck.hub.username": invocation.username,
        "blackduck.hub.password": invocation.password,
        "logging.level.com.blackducksoftware.integration": invocation.log_level,
        "detect.project.name": invocation.project_name,
        "detect.source.path": str(invocation.root_path.absolute()),
        "detect.maven.scope": invocation.scope,
    }
    if invocation.scan_cli_dir is not None:
        config[OFFLINE_PATH_KEY] = str(invocation.scan_cli_dir.absolute())
    if OUTPUT_PATH_KEY not in invocation.system_variables:
        config[OUTPUT_PATH_KEY] = str(invocation.output_dir.absolute())
    config[EXCLUSION_PATTERNS_KEY] = build_exclusions(invocation.exclusions)
    return config


class CommandBuilder:
    """Assembles the ProcessSpec launching detect."""

    def __init__(self, host: HostEnvironment) -> None:
        self.host = host

    def build(self, invocation: DetectInvocation) -> ProcessSpec:
        """Build the command line and environment for detect.

        Argument order: JVM options, -D properties (legacy), -jar <detect>,
        user arguments, configuration flags (modern).
        """
        mode = ConfigEmissionMode.for_version(invocation.tool_version)
        emission = mode.emission
        LOGGER.debug(f"detect {invocation.tool_version} is configured through {emission.name}")

        system_variables = {
            key: substitute_placeholders(value, invocation.root_path)
            for key, value in invocation.system_variables.items()
        }

        config = build_config_map(invocation)
        emission.absorb(config, system_variables)
        LOGGER.debug(f"detect configuration: {redact_config(config)}")

        arguments: List[str] = list(invocation.jvm_options)
        arguments.extend(emission.jvm_properties(system_variables))
        arguments.extend(["-jar", str(invocation.tool_path.absolute())])
        arguments.extend(invocation.args)
        arguments.extend(emission.flags(config))

        environment = dict(self.host.environ)
        environment.update(invocation.environment)
        environment.update(emission.environment(config))

        return ProcessSpec(
            executable=self.host.java_executable,
            arguments=tuple(arguments),
            environment=environment,
        )
