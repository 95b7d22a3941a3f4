from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

LATEST_VERSION = "latest"

# Configuration keys whose values must never reach the logs.
SECRET_KEYS = frozenset({
    "blackduck.hub.password",
    "blackduck.password",
    "blackduck.hub.api.token",
    "blackduck.api.token",
})

REDACTED = "******"


@dataclass(frozen=True)
class Coordinate:
    """A group:artifact:version triple identifying a downloadable package.

    The version may be the literal token "latest" until it is resolved.
    """

    group: str
    artifact: str
    version: str

    @classmethod
    def parse(cls, gav: str) -> "Coordinate":
        """Parse a "group:artifact:version" string.

        Raises:
            ValueError: If the string does not have exactly three non-empty parts.
        """
        parts = [part.strip() for part in gav.split(":")]
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Invalid coordinate '{gav}', expected group:artifact:version")
        return cls(group=parts[0], artifact=parts[1], version=parts[2])

    @property
    def is_latest(self) -> bool:
        return self.version.lower() == LATEST_VERSION

    def with_version(self, version: str) -> "Coordinate":
        return Coordinate(group=self.group, artifact=self.artifact, version=version)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"


@dataclass(frozen=True)
class Repository:
    """A remote artifact repository using the Maven directory layout."""

    id: str
    url: str


@dataclass(frozen=True)
class HostEnvironment:
    """Snapshot of the orchestrator's own process state.

    Captured once per run and handed to the command builder so the child
    process setup never reads ambient globals.
    """

    java_executable: str
    environ: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def capture(cls, java_executable: Optional[str] = None) -> "HostEnvironment":
        """Capture the current environment and locate the java launcher.

        Resolution order for the launcher:
        1. explicit java_executable
        2. $JAVA_HOME/bin/java
        3. java found on PATH
        """
        environ = dict(os.environ)
        return cls(
            java_executable=java_executable or _find_java(environ),
            environ=environ,
        )


def _find_java(environ: Mapping[str, str]) -> str:
    binary_name = "java.exe" if sys.platform == "win32" else "java"
    java_home = environ.get("JAVA_HOME")
    if java_home:
        candidate = Path(java_home) / "bin" / binary_name
        if candidate.exists():
            return str(candidate.absolute())
    return shutil.which(binary_name) or binary_name


@dataclass(frozen=True)
class ProcessSpec:
    """Everything needed to launch the detect process.

    Built once per invocation and never mutated afterwards. A cwd of None
    means the child inherits the orchestrator's working directory.
    """

    executable: str
    arguments: Tuple[str, ...]
    environment: Mapping[str, str]
    cwd: Optional[Path] = None

    @property
    def command(self) -> List[str]:
        return [self.executable, *self.arguments]

    def redacted_command(self) -> List[str]:
        """Return the command line with secret values masked."""
        return [_redact_argument(arg) for arg in self.command]


def _redact_argument(arg: str) -> str:
    for prefix in ("--", "-D"):
        if not arg.startswith(prefix) or "=" not in arg:
            continue
        key, _ = arg[len(prefix):].split("=", 1)
        if key in SECRET_KEYS:
            return f"{prefix}{key}={REDACTED}"
    return arg


@dataclass(frozen=True)
class FetchResult:
    """Outcome of making an artifact available in its cache path.

    Attributes:
        path: Local cache path holding the artifact.
        version: Concrete version the coordinate resolved to.
        downloaded: True when the artifact was fetched during this run.
    """

    path: Path
    version: str
    downloaded: bool = False


def redact_config(config: Mapping[str, str]) -> Dict[str, str]:
    """Copy of a config map with secret values masked."""
    return {
        key: (REDACTED if key in SECRET_KEYS and value else value)
        for key, value in config.items()
    }
