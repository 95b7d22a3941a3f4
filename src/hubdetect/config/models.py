"""Typed configuration models for hubdetect."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from hubdetect.bootstrap.paths import DEFAULT_BUILD_DIRECTORY
from hubdetect.bootstrap.repository import MAVEN_CENTRAL
from hubdetect.bootstrap.versions import (
    DEFAULT_ARTIFACTORY_BASE,
    DEFAULT_LATEST_VERSION_URL,
    DEFAULT_REPOSITORY_NAME,
)
from hubdetect.core.errors import ConfigError
from hubdetect.core.models import Repository

DEFAULT_EXECUTABLE_GAV = "com.synopsys.integration:synopsys-detect:latest"
DEFAULT_SCAN_CLI_GAV = "com.blackducksoftware.integration:scan-cli:latest"
DEFAULT_SCAN_CLI_DOWNLOAD_URL = "https://blackduck.talend.com/download/scan.cli.zip"
DEFAULT_SERVER_ID = "blackduck"


@dataclass
class BlackduckConfig:
    """Target Black Duck service."""

    url: str = ""
    name: str = ""
    server_id: str = DEFAULT_SERVER_ID


@dataclass
class ServerCredentials:
    """A named credential entry."""

    username: str = ""
    password: str = ""


@dataclass
class DetectConfig:
    """How the detect jar is obtained and launched."""

    executable_gav: str = DEFAULT_EXECUTABLE_GAV
    cache: Optional[str] = None
    artifactory_base: str = DEFAULT_ARTIFACTORY_BASE
    artifact_repository_name: str = DEFAULT_REPOSITORY_NAME
    latest_version_url: str = DEFAULT_LATEST_VERSION_URL
    log_level: str = "INFO"
    validate_exit_code: str = "0"
    scope: str = "runtime"
    java_executable: Optional[str] = None
    system_variables: Dict[str, str] = field(default_factory=dict)
    jvm_options: List[str] = field(default_factory=list)
    environment: Dict[str, str] = field(default_factory=dict)
    args: List[str] = field(default_factory=list)
    exclusions: List[Optional[str]] = field(default_factory=list)

    @property
    def primary_repository(self) -> Repository:
        """The Black Duck integrations repository, always searched first."""
        return Repository(
            id="blackduck",
            url=f"{self.artifactory_base.rstrip('/')}/{self.artifact_repository_name}",
        )


@dataclass
class ScanCliConfig:
    """Offline signature scanner settings."""

    gav: str = DEFAULT_SCAN_CLI_GAV
    cache: Optional[str] = None
    download_url: str = DEFAULT_SCAN_CLI_DOWNLOAD_URL
    offline: bool = False
    force_download: bool = False


@dataclass
class HubDetectConfig:
    """Complete hubdetect configuration."""

    skip: bool = False
    build_directory: str = DEFAULT_BUILD_DIRECTORY
    local_repository: Optional[str] = None
    blackduck: BlackduckConfig = field(default_factory=BlackduckConfig)
    servers: Dict[str, ServerCredentials] = field(default_factory=dict)
    repositories: List[Repository] = field(default_factory=lambda: [MAVEN_CENTRAL])
    detect: DetectConfig = field(default_factory=DetectConfig)
    scan_cli: ScanCliConfig = field(default_factory=ScanCliConfig)

    # Where the configuration came from (for status output)
    _config_sources: List[str] = field(default_factory=list)

    def repository_list(self) -> List[Repository]:
        """Primary repository followed by every declared repository."""
        return [self.detect.primary_repository, *self.repositories]

    def credentials(self) -> ServerCredentials:
        """Return the credentials of the configured server entry.

        Raises:
            ConfigError: If no entry matches blackduck.server_id.
        """
        server_id = self.blackduck.server_id
        if server_id not in self.servers:
            raise ConfigError(
                f"No credentials for server '{server_id}', add it under 'servers' "
                "in hubdetect.yml or ~/.hubdetect/config/config.yml"
            )
        return self.servers[server_id]

    def check_required(self) -> None:
        """Fail when a value needed to run detect is missing.

        Raises:
            ConfigError: If blackduck.url or blackduck.name is not set.
        """
        if not self.blackduck.url:
            raise ConfigError("No Black Duck url specified, please set blackduck.url")
        if not self.blackduck.name:
            raise ConfigError("No name specified, please set blackduck.name")
