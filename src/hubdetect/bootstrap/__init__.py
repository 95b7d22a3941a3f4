"""
Bootstrap module for hubdetect artifact management.

This module handles:
- Cache layout under the build output directory
- Version resolution of artifact coordinates
- Resolution and download of the detect jar and scan-cli archive
- scan-cli archive extraction
"""

from hubdetect.bootstrap.archive import extract_zip
from hubdetect.bootstrap.fetcher import ArtifactFetcher
from hubdetect.bootstrap.paths import HubDetectPaths, get_hubdetect_home
from hubdetect.bootstrap.repository import ArtifactResolver, LocalRepository
from hubdetect.bootstrap.validation import CacheReport, check_cache
from hubdetect.bootstrap.versions import VersionResolver

__all__ = [
    "extract_zip",
    "ArtifactFetcher",
    "HubDetectPaths",
    "get_hubdetect_home",
    "ArtifactResolver",
    "LocalRepository",
    "CacheReport",
    "check_cache",
    "VersionResolver",
]
