"""Artifact fetching into the hubdetect cache.

Two artifacts are fetched:
- the detect jar, resolved from the configured repositories with a single
  fallback to the legacy hub-detect coordinate;
- the scan-cli archive (offline mode only), resolved from the local
  repository or downloaded directly, then published back into the local
  repository.

Cache entries are trusted as soon as they exist.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from hubdetect.bootstrap.download import download_with_progress
from hubdetect.bootstrap.repository import ArtifactResolver
from hubdetect.bootstrap.versions import VersionResolver, legacy_coordinate
from hubdetect.core.errors import (
    ArtifactNotFoundError,
    ArtifactResolutionError,
    FetchError,
)
from hubdetect.core.logging import get_logger
from hubdetect.core.models import Coordinate, FetchResult, Repository

LOGGER = get_logger(__name__)

JAR_EXTENSION = "jar"
ZIP_EXTENSION = "zip"


@dataclass(frozen=True)
class ArchiveSource:
    """One way of obtaining the scan-cli archive.

    Attributes:
        name: Label used in logs.
        obtain: Returns the archive path, or None when this source has nothing.
        downloaded: True when the archive comes from a direct download and
            must be published to the local repository.
    """

    name: str
    obtain: Callable[[], Optional[Path]]
    downloaded: bool = False


class ArtifactFetcher:
    """Makes artifacts available in their cache paths."""

    def __init__(self, resolver: ArtifactResolver, versions: VersionResolver) -> None:
        self.resolver = resolver
        self.versions = versions

    def tool_attempts(self, coordinate: Coordinate, version: str) -> List[Coordinate]:
        """Fallback table for the detect jar: requested coordinate, then legacy."""
        attempts = [coordinate.with_version(version)]
        legacy = legacy_coordinate()
        if legacy not in attempts:
            attempts.append(legacy)
        return attempts

    def fetch_tool(
        self,
        coordinate: Coordinate,
        repositories: Sequence[Repository],
        cache_path: Path,
    ) -> FetchResult:
        """Ensure the detect jar is cached.

        Args:
            coordinate: Requested coordinate, version may be "latest".
            repositories: Remote repositories in priority order.
            cache_path: Where the jar is kept.

        Returns:
            FetchResult with the cache path and the concrete version.

        Raises:
            ArtifactNotFoundError: If neither the coordinate nor the legacy
                coordinate can be resolved.
            FetchError: If the resolved jar cannot be copied to the cache.
        """
        version = self.versions.resolve(coordinate)
        if cache_path.exists():
            LOGGER.debug(f"Using cached detect jar {cache_path} (version {version})")
            return FetchResult(cache_path, version)

        last_error: Optional[Exception] = None
        for index, attempt in enumerate(self.tool_attempts(coordinate, version)):
            if index > 0:
                LOGGER.info(f"Using old blackduck hub-detect coordinate {attempt} because {coordinate} was not found")
            try:
                result = self.resolver.resolve(attempt, JAR_EXTENSION, repositories)
            except ArtifactResolutionError as e:
                LOGGER.warning(f"Resolution of {attempt} failed: {e}")
                last_error = e
                continue
            if result.path is None:
                LOGGER.warning(f"{attempt} is missing from every repository")
                continue

            _copy(result.path, cache_path)
            return FetchResult(cache_path, attempt.version, downloaded=True)

        raise ArtifactNotFoundError(f"Didn't find '{coordinate}'") from last_error

    def fetch_scan_cli(
        self,
        coordinate: Coordinate,
        cache_path: Path,
        download_url: str,
        download_path: Path,
        force_download: bool = False,
    ) -> FetchResult:
        """Ensure the scan-cli archive is cached.

        Sources are tried in order: the local repository (unless
        force_download), then a direct download of download_url. A
        downloaded archive is published to the local repository under the
        resolved coordinate.

        Raises:
            DownloadError: If the direct download fails.
            PublishError: If publishing the downloaded archive fails.
            FetchError: If the archive cannot be copied to the cache.
        """
        if cache_path.exists():
            LOGGER.debug(f"Using cached scan-cli archive {cache_path}")
            return FetchResult(cache_path, coordinate.version)

        resolved = self.versions.resolve_coordinate(coordinate)
        archive: Optional[Path] = None
        downloaded = False
        for source in self.scan_cli_sources(resolved, download_url, download_path, force_download):
            archive = source.obtain()
            if archive is not None:
                downloaded = source.downloaded
                LOGGER.debug(f"scan-cli archive obtained from {source.name}")
                break
            LOGGER.info(f"scan-cli {resolved} not available from {source.name}")

        if archive is None:
            raise ArtifactNotFoundError(f"Didn't find '{coordinate}'")

        if downloaded:
            self.resolver.local.publish(resolved, ZIP_EXTENSION, archive)

        _copy(archive, cache_path)
        return FetchResult(cache_path, resolved.version, downloaded=downloaded)

    def scan_cli_sources(
        self,
        coordinate: Coordinate,
        download_url: str,
        download_path: Path,
        force_download: bool,
    ) -> List[ArchiveSource]:
        sources: List[ArchiveSource] = []
        if force_download:
            LOGGER.info("scan-cli download forced, skipping repository resolution")
        else:
            sources.append(ArchiveSource(
                name="local repository",
                obtain=lambda: self._resolve_without_remotes(coordinate),
            ))
        sources.append(ArchiveSource(
            name=download_url,
            obtain=lambda: download_with_progress(download_url, download_path, label="scan.cli.zip"),
            downloaded=True,
        ))
        return sources

    def _resolve_without_remotes(self, coordinate: Coordinate) -> Optional[Path]:
        try:
            result = self.resolver.resolve(coordinate, ZIP_EXTENSION, [])
        except ArtifactResolutionError as e:
            LOGGER.warning(f"Resolution of {coordinate} failed: {e}")
            return None
        return result.path


def _copy(source: Path, target: Path) -> None:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
    except OSError as e:
        raise FetchError(f"Unable to copy {source} to {target}: {e}") from e
