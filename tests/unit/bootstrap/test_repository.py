"""Tests for Maven-layout artifact resolution."""

from __future__ import annotations

import io
from http.client import BadStatusLine
from pathlib import Path
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError

import pytest

from hubdetect.bootstrap.repository import (
    ArtifactResolver,
    LocalRepository,
    artifact_relative_path,
)
from hubdetect.core.errors import ArtifactResolutionError, PublishError
from hubdetect.core.models import Coordinate, Repository

DETECT = Coordinate.parse("com.synopsys.integration:synopsys-detect:6.1.0")
CENTRAL = Repository(id="central", url="https://repo.example.com/maven2/")
MIRROR = Repository(id="mirror", url="https://mirror.example.com/maven2")


def fake_response(body: bytes) -> MagicMock:
    response = MagicMock()
    response.read.side_effect = io.BytesIO(body).read
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


def http_error(code: int) -> HTTPError:
    return HTTPError("https://repo.example.com", code, "error", {}, None)  # type: ignore[arg-type]


class TestArtifactRelativePath:
    def test_maven_layout(self) -> None:
        assert artifact_relative_path(DETECT, "jar") == (
            "com/synopsys/integration/synopsys-detect/6.1.0/synopsys-detect-6.1.0.jar"
        )


class TestLocalRepository:
    """Tests for LocalRepository."""

    def test_find_missing(self, tmp_path: Path) -> None:
        assert LocalRepository(tmp_path).find(DETECT, "jar") is None

    def test_publish_then_find(self, tmp_path: Path) -> None:
        source = tmp_path / "download.jar"
        source.write_bytes(b"jar")
        repository = LocalRepository(tmp_path / "repo")

        published = repository.publish(DETECT, "jar", source)

        assert published == repository.path_for(DETECT, "jar")
        assert repository.find(DETECT, "jar") == published
        assert published.read_bytes() == b"jar"

    def test_publish_missing_source_raises(self, tmp_path: Path) -> None:
        with pytest.raises(PublishError):
            LocalRepository(tmp_path / "repo").publish(DETECT, "jar", tmp_path / "nope.jar")


class TestArtifactResolver:
    """Tests for ArtifactResolver.resolve."""

    def test_local_hit_skips_network(self, tmp_path: Path) -> None:
        local = LocalRepository(tmp_path)
        path = local.path_for(DETECT, "jar")
        path.parent.mkdir(parents=True)
        path.write_bytes(b"cached")

        with patch("hubdetect.bootstrap.repository.secure_urlopen") as mock_open:
            result = ArtifactResolver(local).resolve(DETECT, "jar", [CENTRAL])

        assert result.path == path
        assert result.repository == "local"
        mock_open.assert_not_called()

    def test_downloads_into_local_repository(self, tmp_path: Path) -> None:
        local = LocalRepository(tmp_path)

        with patch(
            "hubdetect.bootstrap.repository.secure_urlopen",
            return_value=fake_response(b"remote jar"),
        ) as mock_open:
            result = ArtifactResolver(local).resolve(DETECT, "jar", [CENTRAL])

        assert mock_open.call_args.args[0] == (
            "https://repo.example.com/maven2/com/synopsys/integration/"
            "synopsys-detect/6.1.0/synopsys-detect-6.1.0.jar"
        )
        assert result.repository == "central"
        assert result.path == local.path_for(DETECT, "jar")
        assert result.path.read_bytes() == b"remote jar"
        assert list(result.path.parent.glob("*.part")) == []

    def test_not_found_tries_next_repository(self, tmp_path: Path) -> None:
        with patch(
            "hubdetect.bootstrap.repository.secure_urlopen",
            side_effect=[http_error(404), fake_response(b"jar")],
        ):
            result = ArtifactResolver(LocalRepository(tmp_path)).resolve(DETECT, "jar", [CENTRAL, MIRROR])

        assert result.repository == "mirror"

    def test_not_found_everywhere_is_missing(self, tmp_path: Path) -> None:
        with patch("hubdetect.bootstrap.repository.secure_urlopen", side_effect=http_error(404)):
            result = ArtifactResolver(LocalRepository(tmp_path)).resolve(DETECT, "jar", [CENTRAL, MIRROR])

        assert result.path is None

    def test_empty_repository_list_is_local_only(self, tmp_path: Path) -> None:
        with patch("hubdetect.bootstrap.repository.secure_urlopen") as mock_open:
            result = ArtifactResolver(LocalRepository(tmp_path)).resolve(DETECT, "zip", [])

        assert result.path is None
        mock_open.assert_not_called()

    def test_server_error_raises_when_nothing_found(self, tmp_path: Path) -> None:
        with patch(
            "hubdetect.bootstrap.repository.secure_urlopen",
            side_effect=[http_error(500), OSError("timed out")],
        ):
            with pytest.raises(ArtifactResolutionError, match="central: HTTP 500"):
                ArtifactResolver(LocalRepository(tmp_path)).resolve(DETECT, "jar", [CENTRAL, MIRROR])

    def test_server_error_ignored_when_later_repository_has_it(self, tmp_path: Path) -> None:
        with patch(
            "hubdetect.bootstrap.repository.secure_urlopen",
            side_effect=[http_error(503), fake_response(b"jar")],
        ):
            result = ArtifactResolver(LocalRepository(tmp_path)).resolve(DETECT, "jar", [CENTRAL, MIRROR])

        assert result.repository == "mirror"

    def test_malformed_reply_counts_as_failure(self, tmp_path: Path) -> None:
        with patch(
            "hubdetect.bootstrap.repository.secure_urlopen",
            side_effect=[BadStatusLine("garbage"), fake_response(b"jar")],
        ):
            result = ArtifactResolver(LocalRepository(tmp_path)).resolve(DETECT, "jar", [CENTRAL, MIRROR])

        assert result.repository == "mirror"

    def test_malformed_reply_everywhere_raises(self, tmp_path: Path) -> None:
        with patch("hubdetect.bootstrap.repository.secure_urlopen", side_effect=BadStatusLine("garbage")):
            with pytest.raises(ArtifactResolutionError, match="garbage"):
                ArtifactResolver(LocalRepository(tmp_path)).resolve(DETECT, "jar", [CENTRAL])

    def test_failed_download_leaves_no_partial_file(self, tmp_path: Path) -> None:
        local = LocalRepository(tmp_path)

        with patch("hubdetect.bootstrap.repository.secure_urlopen", side_effect=http_error(404)):
            ArtifactResolver(local).resolve(DETECT, "jar", [CENTRAL])

        directory = local.path_for(DETECT, "jar").parent
        assert list(directory.iterdir()) == []
