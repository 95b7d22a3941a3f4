"""Zip extraction for the scan-cli archive."""

from __future__ import annotations

import shutil
import zipfile
from pathlib import Path

from hubdetect.core.errors import ExtractionError
from hubdetect.core.logging import get_logger

LOGGER = get_logger(__name__)


def strip_first_segment(name: str) -> str:
    """Drop everything up to and including the first '/' of an entry name.

    Names without '/' are returned unchanged.
    """
    _, sep, tail = name.partition("/")
    return tail if sep else name


def extract_zip(zip_path: Path, destination: Path, strip_top_level: bool = False) -> None:
    """Extract every entry of a zip archive, overwriting existing files.

    Args:
        zip_path: Archive to extract.
        destination: Target directory, created if needed.
        strip_top_level: Remove the first path segment of each entry
            ("no-parent" mode).

    Raises:
        ExtractionError: On any failure; already extracted files are kept.
    """
    LOGGER.info(f"Extracting '{zip_path.absolute()}' to '{destination.absolute()}'")
    try:
        with zipfile.ZipFile(zip_path, "r") as zf:
            # nothing is created for an archive that cannot be opened
            destination.mkdir(parents=True, exist_ok=True)
            base = destination.resolve()
            for member in zf.infolist():
                name = member.filename.replace("\\", "/")
                if strip_top_level:
                    name = strip_first_segment(name)
                if not name or name == "/":
                    continue

                target = destination / name
                if not target.resolve().is_relative_to(base):
                    raise ValueError(f"Path traversal detected: {member.filename}")

                if member.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(member, "r") as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)

                # keep executable bits (bundled jre)
                if (member.external_attr >> 16) & 0o111:
                    target.chmod(target.stat().st_mode | 0o111)
    except Exception as e:
        raise ExtractionError(f"Unable to unzip {zip_path.absolute()}") from e
