"""Path management for the hubdetect caches.

Handles the ~/.hubdetect directory (global configuration) and the
per-build cache layout under the build output directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".hubdetect"

# Environment variable to override home directory
HUBDETECT_HOME_ENV = "HUBDETECT_HOME"

# Default build output directory, relative to the project root
DEFAULT_BUILD_DIRECTORY = "target"

# Default local artifact repository (shared with Maven)
DEFAULT_LOCAL_REPOSITORY = Path("~") / ".m2" / "repository"


def get_hubdetect_home() -> Path:
    """Get the hubdetect home directory path.

    Resolution order:
    1. HUBDETECT_HOME environment variable (if set)
    2. ~/.hubdetect (default)

    Returns:
        Path to the hubdetect home directory.
    """
    env_home = os.environ.get(HUBDETECT_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME


@dataclass
class HubDetectPaths:
    """Manages cache paths under the build output directory.

    Directory structure:
        <build>/blackduck/
            synopsys-detect.jar      - cached detect jar
            scan-cli.zip             - cached scan-cli archive
            hubdetect_scancli/       - extracted scan-cli
            hubdetect/scan.cli.zip   - transient direct download

    None of these entries are namespaced by version: switching versions
    requires deleting them.
    """

    project_root: Path
    build_dir: Path
    tool_cache_override: Optional[Path] = None
    scan_cli_cache_override: Optional[Path] = None

    # Names inside the output directory
    _OUTPUT_DIR: ClassVar[str] = "blackduck"
    _TOOL_JAR: ClassVar[str] = "synopsys-detect.jar"
    _SCAN_CLI_ZIP: ClassVar[str] = "scan-cli.zip"
    _SCAN_CLI_DIR: ClassVar[str] = "hubdetect_scancli"
    _DOWNLOAD_DIR: ClassVar[str] = "hubdetect"
    _DOWNLOAD_NAME: ClassVar[str] = "scan.cli.zip"

    @classmethod
    def for_project(
        cls,
        project_root: Path,
        build_directory: str = DEFAULT_BUILD_DIRECTORY,
        tool_cache: Optional[str] = None,
        scan_cli_cache: Optional[str] = None,
    ) -> "HubDetectPaths":
        """Create paths for a project, resolving relative entries against its root."""
        root = project_root.absolute()
        return cls(
            project_root=root,
            build_dir=_under(root, build_directory),
            tool_cache_override=_under(root, tool_cache) if tool_cache else None,
            scan_cli_cache_override=_under(root, scan_cli_cache) if scan_cli_cache else None,
        )

    @property
    def output_dir(self) -> Path:
        """Directory holding every hubdetect artifact and the detect output."""
        return self.build_dir / self._OUTPUT_DIR

    @property
    def tool_cache(self) -> Path:
        return self.tool_cache_override or self.output_dir / self._TOOL_JAR

    @property
    def scan_cli_cache(self) -> Path:
        return self.scan_cli_cache_override or self.output_dir / self._SCAN_CLI_ZIP

    @property
    def scan_cli_dir(self) -> Path:
        return self.output_dir / self._SCAN_CLI_DIR

    @property
    def scan_cli_download(self) -> Path:
        return self.output_dir / self._DOWNLOAD_DIR / self._DOWNLOAD_NAME

    def ensure_directories(self) -> None:
        """Create the parent directories of every cache entry."""
        directories = [
            self.output_dir,
            self.tool_cache.parent,
            self.scan_cli_cache.parent,
            self.scan_cli_download.parent,
        ]
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)


def _under(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path
