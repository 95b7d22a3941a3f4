"""Exception hierarchy for hubdetect.

Every fatal condition of a run derives from HubDetectError so the CLI can
report it and map it to an exit code in one place.
"""

from __future__ import annotations


class HubDetectError(Exception):
    """Base class for all hubdetect failures."""

    pass


class ConfigError(HubDetectError):
    """Configuration loading, parsing or required-value error."""

    pass


class ArtifactResolutionError(HubDetectError):
    """A repository could not be queried for an artifact."""

    pass


class ArtifactNotFoundError(HubDetectError):
    """No repository (nor the fallback coordinate) provided the artifact."""

    pass


class DownloadError(HubDetectError):
    """Direct HTTP download failed."""

    pass


class PublishError(HubDetectError):
    """Publishing a downloaded artifact into the local repository failed."""

    pass


class FetchError(HubDetectError):
    """A fetched artifact could not be persisted into its cache path."""

    pass


class ExtractionError(HubDetectError):
    """A zip archive could not be extracted."""

    pass


class ProcessLaunchError(HubDetectError):
    """The detect process could not be started."""

    pass


class ProcessInterruptedError(HubDetectError):
    """The wait on the detect process was interrupted."""

    pass


class ExitCodeMismatchError(HubDetectError):
    """The detect process exited with an unexpected status."""

    def __init__(self, exit_code: int, expected: int) -> None:
        super().__init__(f"Invalid exit status: {exit_code}")
        self.exit_code = exit_code
        self.expected = expected
