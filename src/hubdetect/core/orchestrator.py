"""End-to-end detect run.

Sequence: resolve and cache the detect jar, in offline mode resolve,
cache and extract scan-cli, build the process, run it, validate its exit
code. Any fatal condition raises a HubDetectError and stops the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from hubdetect.bootstrap.archive import extract_zip
from hubdetect.bootstrap.fetcher import ArtifactFetcher
from hubdetect.bootstrap.paths import HubDetectPaths
from hubdetect.bootstrap.validation import CacheStatus, check_entry
from hubdetect.bootstrap.repository import ArtifactResolver, LocalRepository
from hubdetect.bootstrap.versions import VersionResolver
from hubdetect.config.models import HubDetectConfig
from hubdetect.core.command import CommandBuilder, DetectInvocation
from hubdetect.core.errors import ConfigError
from hubdetect.core.exit_codes import ExitCodeExpectation, validate_exit_code
from hubdetect.core.logging import get_logger
from hubdetect.core.models import Coordinate, FetchResult, HostEnvironment, ProcessSpec
from hubdetect.core.subprocess_runner import run_inherited

LOGGER = get_logger(__name__)


@dataclass
class RunOutcome:
    """What a run did."""

    exit_code: int = 0
    tool: Optional[FetchResult] = None
    scan_cli_dir: Optional[Path] = None
    skipped: bool = False


def parse_coordinate(gav: str, key: str) -> Coordinate:
    try:
        return Coordinate.parse(gav)
    except ValueError as e:
        raise ConfigError(f"'{key}': {e}") from e


def build_fetcher(config: HubDetectConfig) -> ArtifactFetcher:
    """Create the fetcher described by the configuration."""
    if config.local_repository:
        local = LocalRepository(Path(config.local_repository).expanduser())
    else:
        local = LocalRepository.default()
    versions = VersionResolver(
        artifactory_base=config.detect.artifactory_base,
        repository_name=config.detect.artifact_repository_name,
        latest_version_url=config.detect.latest_version_url,
    )
    return ArtifactFetcher(ArtifactResolver(local), versions)


class HubDetectRunner:
    """Runs detect for one project."""

    def __init__(
        self,
        config: HubDetectConfig,
        project_root: Path,
        host: Optional[HostEnvironment] = None,
        fetcher: Optional[ArtifactFetcher] = None,
        process_runner: Callable[[ProcessSpec], int] = run_inherited,
    ) -> None:
        self.config = config
        self.project_root = project_root.absolute()
        self.paths = HubDetectPaths.for_project(
            self.project_root,
            build_directory=config.build_directory,
            tool_cache=config.detect.cache,
            scan_cli_cache=config.scan_cli.cache,
        )
        self._host = host
        self._fetcher = fetcher
        self.process_runner = process_runner

    @property
    def fetcher(self) -> ArtifactFetcher:
        if self._fetcher is None:
            self._fetcher = build_fetcher(self.config)
        return self._fetcher

    @property
    def host(self) -> HostEnvironment:
        if self._host is None:
            self._host = HostEnvironment.capture(self.config.detect.java_executable)
        return self._host

    def run(self) -> RunOutcome:
        """Execute the whole sequence.

        Raises:
            HubDetectError: On the first unrecoverable step.
        """
        if self.config.skip:
            LOGGER.info("hubdetect execution skipped")
            return RunOutcome(skipped=True)

        self.config.check_required()
        credentials = self.config.credentials()
        # Parsed before any network access so typos fail fast
        tool_coordinate = parse_coordinate(self.config.detect.executable_gav, "detect.executable_gav")
        scan_cli_coordinate = (
            parse_coordinate(self.config.scan_cli.gav, "scan_cli.gav")
            if self.config.scan_cli.offline
            else None
        )

        self.paths.ensure_directories()
        tool = self.fetcher.fetch_tool(
            tool_coordinate,
            self.config.repository_list(),
            self.paths.tool_cache,
        )
        LOGGER.info(f"Using detect {tool.version} from {tool.path}")

        scan_cli_dir = self.prepare_scan_cli(scan_cli_coordinate) if scan_cli_coordinate else None

        detect = self.config.detect
        invocation = DetectInvocation(
            tool_path=tool.path,
            tool_version=tool.version,
            root_path=self.project_root,
            output_dir=self.paths.output_dir,
            blackduck_url=self.config.blackduck.url,
            project_name=self.config.blackduck.name,
            username=credentials.username,
            password=credentials.password,
            log_level=detect.log_level,
            scope=detect.scope,
            scan_cli_dir=scan_cli_dir,
            system_variables=detect.system_variables,
            jvm_options=detect.jvm_options,
            environment=detect.environment,
            args=detect.args,
            exclusions=detect.exclusions,
        )
        spec = CommandBuilder(self.host).build(invocation)

        exit_code = self.process_runner(spec)
        validate_exit_code(exit_code, ExitCodeExpectation.parse(detect.validate_exit_code))
        return RunOutcome(exit_code=exit_code, tool=tool, scan_cli_dir=scan_cli_dir)

    def prepare_scan_cli(self, coordinate: Coordinate) -> Path:
        """Cache and extract scan-cli, returning the extracted directory."""
        scan_cli = self.config.scan_cli
        self.fetcher.fetch_scan_cli(
            coordinate,
            cache_path=self.paths.scan_cli_cache,
            download_url=scan_cli.download_url,
            download_path=self.paths.scan_cli_download,
            force_download=scan_cli.force_download,
        )
        target = self.paths.scan_cli_dir
        if check_entry(target) != CacheStatus.PRESENT:
            extract_zip(self.paths.scan_cli_cache, target, strip_top_level=True)
        return target
