"""Cache inspection for hubdetect.

Reports which cache entries are present. Presence is the only check: a
present entry is trusted and never refreshed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List

from hubdetect.bootstrap.paths import HubDetectPaths
from hubdetect.core.logging import get_logger

LOGGER = get_logger(__name__)


class CacheStatus(str, Enum):
    """Status of a cache entry."""

    PRESENT = "present"
    MISSING = "missing"
    EMPTY = "empty"


@dataclass
class CacheReport:
    """Status of every hubdetect cache entry.

    Attributes:
        tool_jar: Status of the cached detect jar.
        scan_cli_archive: Status of the cached scan-cli zip.
        scan_cli_dir: Status of the extracted scan-cli directory.
    """

    tool_jar: CacheStatus
    scan_cli_archive: CacheStatus
    scan_cli_dir: CacheStatus

    def missing_entries(self) -> List[str]:
        """Return the names of entries that would be fetched on the next run."""
        return [name for name, status in self.to_dict().items() if status != CacheStatus.PRESENT.value]

    def to_dict(self) -> Dict[str, str]:
        return {
            "tool_jar": self.tool_jar.value,
            "scan_cli_archive": self.scan_cli_archive.value,
            "scan_cli_dir": self.scan_cli_dir.value,
        }


def check_entry(path: Path) -> CacheStatus:
    """Check a single cache entry (file or directory)."""
    if not path.exists():
        return CacheStatus.MISSING
    if path.is_dir():
        return CacheStatus.PRESENT if any(path.iterdir()) else CacheStatus.EMPTY
    return CacheStatus.PRESENT if path.stat().st_size > 0 else CacheStatus.EMPTY


def check_cache(paths: HubDetectPaths) -> CacheReport:
    """Inspect every cache entry of a project."""
    report = CacheReport(
        tool_jar=check_entry(paths.tool_cache),
        scan_cli_archive=check_entry(paths.scan_cli_cache),
        scan_cli_dir=check_entry(paths.scan_cli_dir),
    )
    LOGGER.debug(f"Cache status for {paths.output_dir}: {report.to_dict()}")
    return report
