"""Maven-layout artifact repositories.

Resolution checks the local repository first, then every remote
repository in order; remote hits are stored in the local repository so
later runs resolve without network access.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass
from http.client import HTTPException
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.error import HTTPError

from hubdetect.bootstrap.download import secure_urlopen
from hubdetect.bootstrap.paths import DEFAULT_LOCAL_REPOSITORY
from hubdetect.core.errors import ArtifactResolutionError, PublishError
from hubdetect.core.logging import get_logger
from hubdetect.core.models import Coordinate, Repository

LOGGER = get_logger(__name__)

MAVEN_CENTRAL = Repository(id="central", url="https://repo.maven.apache.org/maven2")


def artifact_relative_path(coordinate: Coordinate, extension: str) -> str:
    """Return the repository-relative path of an artifact.

    Example: com/synopsys/integration/synopsys-detect/6.1.0/synopsys-detect-6.1.0.jar
    """
    file_name = f"{coordinate.artifact}-{coordinate.version}.{extension}"
    return "/".join([*coordinate.group.split("."), coordinate.artifact, coordinate.version, file_name])


@dataclass(frozen=True)
class ArtifactResult:
    """Result of an artifact resolution; path is None when the artifact is missing."""

    coordinate: Coordinate
    extension: str
    path: Optional[Path] = None
    repository: Optional[str] = None


@dataclass
class LocalRepository:
    """The build's local artifact repository."""

    root: Path

    @classmethod
    def default(cls) -> "LocalRepository":
        return cls(DEFAULT_LOCAL_REPOSITORY.expanduser())

    def path_for(self, coordinate: Coordinate, extension: str) -> Path:
        return self.root.joinpath(*artifact_relative_path(coordinate, extension).split("/"))

    def find(self, coordinate: Coordinate, extension: str) -> Optional[Path]:
        path = self.path_for(coordinate, extension)
        return path if path.is_file() else None

    def publish(self, coordinate: Coordinate, extension: str, source: Path) -> Path:
        """Install a file into the local repository under a coordinate.

        Raises:
            PublishError: If the file cannot be copied.
        """
        target = self.path_for(coordinate, extension)
        LOGGER.info(f"Publishing {source} as {coordinate}:{extension} in {self.root}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as e:
            raise PublishError(str(e)) from e
        return target


class ArtifactResolver:
    """Resolves coordinates to local files."""

    def __init__(self, local: LocalRepository, timeout: float = 60.0) -> None:
        self.local = local
        self.timeout = timeout

    def resolve(
        self,
        coordinate: Coordinate,
        extension: str,
        repositories: Sequence[Repository],
    ) -> ArtifactResult:
        """Resolve an artifact from the local repository or the given remotes.

        Args:
            coordinate: Coordinate with a concrete version.
            extension: Artifact file extension (jar, zip).
            repositories: Remote repositories in priority order. An empty
                sequence restricts resolution to the local repository.

        Returns:
            ArtifactResult, missing when no source has the artifact.

        Raises:
            ArtifactResolutionError: If nothing was found and at least one
                repository failed with something other than "not found".
        """
        local_path = self.local.find(coordinate, extension)
        if local_path is not None:
            LOGGER.debug(f"Resolved {coordinate}:{extension} from local repository {self.local.root}")
            return ArtifactResult(coordinate, extension, local_path, repository="local")

        relative = artifact_relative_path(coordinate, extension)
        failures: List[str] = []
        for repository in repositories:
            url = f"{repository.url.rstrip('/')}/{relative}"
            try:
                path = self._download(url, self.local.path_for(coordinate, extension))
            except HTTPError as e:
                if e.code == 404:
                    LOGGER.debug(f"{coordinate}:{extension} not found in {repository.id}")
                    continue
                failures.append(f"{repository.id}: HTTP {e.code}")
            except (OSError, ValueError, HTTPException) as e:
                failures.append(f"{repository.id}: {e}")
            else:
                LOGGER.info(f"Resolved {coordinate}:{extension} from {repository.id}")
                return ArtifactResult(coordinate, extension, path, repository=repository.id)

        if failures:
            raise ArtifactResolutionError(
                f"Could not resolve {coordinate}:{extension}: {'; '.join(failures)}"
            )
        return ArtifactResult(coordinate, extension)

    def _download(self, url: str, target: Path) -> Path:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=target.parent, suffix=".part")
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as out, secure_urlopen(url, timeout=self.timeout) as response:
                shutil.copyfileobj(response, out)
            os.replace(temp_path, target)
        finally:
            temp_path.unlink(missing_ok=True)
        return target
