"""Coordinate version resolution.

Turns a coordinate whose version may be "latest" into a concrete version,
asking the artifact repository's "latest version" search endpoint when
needed. Resolution never fails: when the endpoint cannot be reached the
version of the legacy hub-detect coordinate is used instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from http.client import HTTPException

from hubdetect.bootstrap.download import read_text
from hubdetect.core.logging import get_logger
from hubdetect.core.models import Coordinate

LOGGER = get_logger(__name__)

# Last coordinate published under the old hub-detect name
LEGACY_HUB_DETECT = "com.blackducksoftware.integration:hub-detect:5.2.0"

DEFAULT_ARTIFACTORY_BASE = "https://repo.blackducksoftware.com/artifactory"
DEFAULT_REPOSITORY_NAME = "bds-integrations-release"

# Substitution order: repository base, group, artifact, repository name
DEFAULT_LATEST_VERSION_URL = "%s/api/search/latestVersion?g=%s&a=%s&repos=%s"


def legacy_coordinate() -> Coordinate:
    """Return the fixed fallback coordinate."""
    return Coordinate.parse(LEGACY_HUB_DETECT)


def build_latest_version_url(
    template: str,
    artifactory_base: str,
    coordinate: Coordinate,
    repository_name: str,
) -> str:
    """Fill the latest-version URL template.

    Args:
        template: printf-style template with four %s placeholders.
        artifactory_base: Repository base URL.
        coordinate: Coordinate whose group and artifact are looked up.
        repository_name: Repository to search.

    Returns:
        The lookup URL.
    """
    return template % (artifactory_base, coordinate.group, coordinate.artifact, repository_name)


@dataclass
class VersionResolver:
    """Resolves "latest" coordinate versions against an Artifactory instance."""

    artifactory_base: str = DEFAULT_ARTIFACTORY_BASE
    repository_name: str = DEFAULT_REPOSITORY_NAME
    latest_version_url: str = DEFAULT_LATEST_VERSION_URL
    timeout: float = 30.0

    def resolve(self, coordinate: Coordinate) -> str:
        """Return the concrete version for a coordinate.

        A concrete version is returned unchanged without any network call.
        For "latest", the body of the lookup response is the version.
        Lookup failures (network error, non-2xx status, empty body) fall
        back to the legacy coordinate's version.
        """
        if not coordinate.is_latest:
            return coordinate.version

        fallback = legacy_coordinate().version
        try:
            url = build_latest_version_url(
                self.latest_version_url,
                self.artifactory_base,
                coordinate,
                self.repository_name,
            )
        except (TypeError, ValueError) as e:
            LOGGER.warning(f"Invalid latest version URL template '{self.latest_version_url}': {e}")
            return fallback

        LOGGER.debug(f"Looking up latest version of {coordinate} at {url}")
        try:
            version = read_text(url, timeout=self.timeout)
        except (OSError, ValueError, HTTPException) as e:
            LOGGER.warning(
                f"Unable to look up the latest version of {coordinate.group}:{coordinate.artifact} "
                f"({e}), using {fallback}"
            )
            return fallback

        if not version.strip():
            LOGGER.warning(f"Empty latest version answer for {coordinate}, using {fallback}")
            return fallback

        LOGGER.info(f"Resolved {coordinate.group}:{coordinate.artifact}:latest to {version}")
        return version

    def resolve_coordinate(self, coordinate: Coordinate) -> Coordinate:
        """Return a copy of the coordinate carrying its concrete version."""
        return coordinate.with_version(self.resolve(coordinate))
