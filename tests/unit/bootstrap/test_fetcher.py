"""Tests for fetching the detect jar and the scan-cli archive."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError

import pytest

from hubdetect.bootstrap.fetcher import ArtifactFetcher
from hubdetect.bootstrap.repository import ArtifactResolver, ArtifactResult, LocalRepository
from hubdetect.bootstrap.versions import VersionResolver, legacy_coordinate
from hubdetect.core.errors import ArtifactNotFoundError, ArtifactResolutionError, DownloadError
from hubdetect.core.models import Coordinate, Repository

DETECT_LATEST = Coordinate.parse("com.synopsys.integration:synopsys-detect:latest")
SCAN_CLI = Coordinate.parse("com.blackducksoftware.integration:scan-cli:2019.4.0")
REPOSITORIES = [Repository(id="central", url="https://repo.example.com/maven2")]


def make_versions(version: str = "6.1.0") -> MagicMock:
    versions = MagicMock(spec=VersionResolver)
    versions.resolve.side_effect = lambda c: version if c.is_latest else c.version
    versions.resolve_coordinate.side_effect = lambda c: c.with_version(versions.resolve(c))
    return versions


@pytest.fixture
def local(tmp_path: Path) -> LocalRepository:
    return LocalRepository(tmp_path / "m2")


def put(local: LocalRepository, coordinate: Coordinate, extension: str, body: bytes) -> Path:
    path = local.path_for(coordinate, extension)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(body)
    return path


class TestToolAttempts:
    def test_requested_then_legacy(self, local: LocalRepository) -> None:
        fetcher = ArtifactFetcher(ArtifactResolver(local), make_versions())

        attempts = fetcher.tool_attempts(DETECT_LATEST, "6.1.0")

        assert attempts == [DETECT_LATEST.with_version("6.1.0"), legacy_coordinate()]

    def test_legacy_not_repeated(self, local: LocalRepository) -> None:
        fetcher = ArtifactFetcher(ArtifactResolver(local), make_versions())
        legacy = legacy_coordinate()

        assert fetcher.tool_attempts(legacy, legacy.version) == [legacy]


class TestFetchTool:
    """Tests for ArtifactFetcher.fetch_tool."""

    def test_cached_jar_is_reused(self, tmp_path: Path, local: LocalRepository) -> None:
        cache = tmp_path / "target" / "blackduck" / "synopsys-detect.jar"
        cache.parent.mkdir(parents=True)
        cache.write_bytes(b"old")
        resolver = MagicMock(spec=ArtifactResolver)

        result = ArtifactFetcher(resolver, make_versions("6.1.0")).fetch_tool(DETECT_LATEST, REPOSITORIES, cache)

        assert result.path == cache
        assert result.version == "6.1.0"
        assert not result.downloaded
        assert cache.read_bytes() == b"old"
        resolver.resolve.assert_not_called()

    def test_resolves_and_copies_to_cache(self, tmp_path: Path, local: LocalRepository) -> None:
        put(local, DETECT_LATEST.with_version("6.1.0"), "jar", b"detect 6")
        cache = tmp_path / "out" / "synopsys-detect.jar"

        result = ArtifactFetcher(ArtifactResolver(local), make_versions()).fetch_tool(
            DETECT_LATEST, REPOSITORIES, cache
        )

        assert result.version == "6.1.0"
        assert result.downloaded
        assert cache.read_bytes() == b"detect 6"

    def test_falls_back_to_legacy_coordinate(self, tmp_path: Path, local: LocalRepository) -> None:
        put(local, legacy_coordinate(), "jar", b"hub-detect")
        cache = tmp_path / "synopsys-detect.jar"
        resolver = ArtifactResolver(local)

        with patch("hubdetect.bootstrap.repository.secure_urlopen") as mock_open:
            mock_open.side_effect = HTTPError("u", 404, "Not Found", {}, None)  # type: ignore[arg-type]
            result = ArtifactFetcher(resolver, make_versions("5.2.0")).fetch_tool(
                DETECT_LATEST, REPOSITORIES, cache
            )

        assert result.version == "5.2.0"
        assert cache.read_bytes() == b"hub-detect"

    def test_resolution_error_falls_back_too(self, tmp_path: Path) -> None:
        resolver = MagicMock(spec=ArtifactResolver)
        legacy_jar = tmp_path / "legacy.jar"
        legacy_jar.write_bytes(b"legacy")
        resolver.resolve.side_effect = [
            ArtifactResolutionError("central: HTTP 500"),
            ArtifactResult(legacy_coordinate(), "jar", legacy_jar, "central"),
        ]
        cache = tmp_path / "cache.jar"

        result = ArtifactFetcher(resolver, make_versions()).fetch_tool(DETECT_LATEST, REPOSITORIES, cache)

        assert result.version == legacy_coordinate().version
        assert cache.read_bytes() == b"legacy"

    def test_missing_requested_jar_falls_through_to_legacy(self, tmp_path: Path) -> None:
        resolver = MagicMock(spec=ArtifactResolver)
        legacy_jar = tmp_path / "legacy.jar"
        legacy_jar.write_bytes(b"legacy")
        resolver.resolve.side_effect = [
            ArtifactResult(DETECT_LATEST.with_version("6.1.0"), "jar"),
            ArtifactResult(legacy_coordinate(), "jar", legacy_jar, "central"),
        ]
        cache = tmp_path / "cache.jar"

        result = ArtifactFetcher(resolver, make_versions()).fetch_tool(DETECT_LATEST, REPOSITORIES, cache)

        assert result.path == cache
        assert result.version == legacy_coordinate().version
        assert cache.read_bytes() == b"legacy"

    def test_nothing_found_raises(self, tmp_path: Path) -> None:
        resolver = MagicMock(spec=ArtifactResolver)
        resolver.resolve.side_effect = lambda c, ext, repos: ArtifactResult(c, ext)
        cache = tmp_path / "cache.jar"

        with pytest.raises(ArtifactNotFoundError, match="Didn't find 'com.synopsys.integration:synopsys-detect:latest'"):
            ArtifactFetcher(resolver, make_versions()).fetch_tool(DETECT_LATEST, REPOSITORIES, cache)

        assert resolver.resolve.call_count == 2
        assert not cache.exists()


class TestFetchScanCli:
    """Tests for ArtifactFetcher.fetch_scan_cli."""

    def test_cached_archive_needs_no_network(self, tmp_path: Path, local: LocalRepository) -> None:
        cache = tmp_path / "scan-cli.zip"
        cache.write_bytes(b"zip")
        versions = make_versions()

        with patch("hubdetect.bootstrap.fetcher.download_with_progress") as mock_download:
            result = ArtifactFetcher(ArtifactResolver(local), versions).fetch_scan_cli(
                SCAN_CLI, cache, "https://example.com/scan.cli.zip", tmp_path / "dl" / "scan.cli.zip"
            )

        assert result.path == cache
        assert not result.downloaded
        mock_download.assert_not_called()
        versions.resolve.assert_not_called()

    def test_local_repository_is_used_first(self, tmp_path: Path, local: LocalRepository) -> None:
        put(local, SCAN_CLI, "zip", b"local zip")
        cache = tmp_path / "scan-cli.zip"

        with patch("hubdetect.bootstrap.fetcher.download_with_progress") as mock_download:
            result = ArtifactFetcher(ArtifactResolver(local), make_versions()).fetch_scan_cli(
                SCAN_CLI, cache, "https://example.com/scan.cli.zip", tmp_path / "dl" / "scan.cli.zip"
            )

        assert cache.read_bytes() == b"local zip"
        assert not result.downloaded
        mock_download.assert_not_called()

    def test_download_is_published(self, tmp_path: Path, local: LocalRepository) -> None:
        cache = tmp_path / "scan-cli.zip"
        download_path = tmp_path / "dl" / "scan.cli.zip"

        def download(url, dest, label=None):
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(b"downloaded zip")
            return dest

        with patch("hubdetect.bootstrap.fetcher.download_with_progress", side_effect=download) as mock_download:
            result = ArtifactFetcher(ArtifactResolver(local), make_versions()).fetch_scan_cli(
                SCAN_CLI, cache, "https://example.com/scan.cli.zip", download_path
            )

        assert mock_download.call_args.args[0] == "https://example.com/scan.cli.zip"
        assert result.downloaded
        assert cache.read_bytes() == b"downloaded zip"
        assert local.find(SCAN_CLI, "zip") is not None

    def test_latest_scan_cli_is_published_under_resolved_version(self, tmp_path: Path, local: LocalRepository) -> None:
        def download(url, dest, label=None):
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(b"zip")
            return dest

        with patch("hubdetect.bootstrap.fetcher.download_with_progress", side_effect=download):
            result = ArtifactFetcher(ArtifactResolver(local), make_versions("2020.1.0")).fetch_scan_cli(
                SCAN_CLI.with_version("latest"),
                tmp_path / "scan-cli.zip",
                "https://example.com/scan.cli.zip",
                tmp_path / "dl" / "scan.cli.zip",
            )

        assert result.version == "2020.1.0"
        assert local.find(SCAN_CLI.with_version("2020.1.0"), "zip") is not None

    def test_force_download_skips_local_repository(self, tmp_path: Path, local: LocalRepository) -> None:
        put(local, SCAN_CLI, "zip", b"local zip")
        cache = tmp_path / "scan-cli.zip"

        def download(url, dest, label=None):
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(b"fresh zip")
            return dest

        with patch("hubdetect.bootstrap.fetcher.download_with_progress", side_effect=download):
            result = ArtifactFetcher(ArtifactResolver(local), make_versions()).fetch_scan_cli(
                SCAN_CLI, cache, "https://example.com/scan.cli.zip", tmp_path / "dl" / "scan.cli.zip",
                force_download=True,
            )

        assert result.downloaded
        assert cache.read_bytes() == b"fresh zip"

    def test_download_failure_is_fatal(self, tmp_path: Path, local: LocalRepository) -> None:
        cache = tmp_path / "scan-cli.zip"

        with patch(
            "hubdetect.bootstrap.fetcher.download_with_progress",
            side_effect=DownloadError("Failed to download"),
        ):
            with pytest.raises(DownloadError):
                ArtifactFetcher(ArtifactResolver(local), make_versions()).fetch_scan_cli(
                    SCAN_CLI, cache, "https://example.com/scan.cli.zip", tmp_path / "dl" / "scan.cli.zip"
                )

        assert not cache.exists()

    def test_sources_order(self, tmp_path: Path, local: LocalRepository) -> None:
        fetcher = ArtifactFetcher(ArtifactResolver(local), make_versions())

        normal = fetcher.scan_cli_sources(SCAN_CLI, "https://example.com/x.zip", tmp_path / "x.zip", False)
        forced = fetcher.scan_cli_sources(SCAN_CLI, "https://example.com/x.zip", tmp_path / "x.zip", True)

        assert [s.downloaded for s in normal] == [False, True]
        assert [s.downloaded for s in forced] == [True]
