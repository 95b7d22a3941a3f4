"""HTTP download utilities with SSL certificate handling.

Uses certifi's CA bundle for HTTPS so downloads work the same way on
every platform, including standalone interpreters without access to the
system certificate store.
"""

from __future__ import annotations

import ssl
import sys
import time
from http.client import HTTPException
from pathlib import Path
from typing import IO, Optional
from urllib.parse import urlparse
from urllib.request import Request, urlopen

import certifi

from hubdetect import __version__
from hubdetect.core.errors import DownloadError
from hubdetect.core.logging import get_logger

LOGGER = get_logger(__name__)

# Chunk size used when streaming a download to disk (800 KiB)
DOWNLOAD_CHUNK_SIZE = 819200

ALLOWED_SCHEMES = frozenset({"http", "https"})


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(url: str, timeout: Optional[float] = 30.0):
    """Open an HTTP(S) URL.

    Args:
        url: The URL to open.
        timeout: Connection timeout in seconds.

    Returns:
        A file-like response object, usable as a context manager.

    Raises:
        URLError: If the URL cannot be opened (HTTPError for non-2xx).
        ValueError: If the URL scheme is not http or https.
    """
    scheme = urlparse(url).scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Only HTTP(S) URLs are supported: {url}")

    request = Request(url, headers={"User-Agent": f"hubdetect/{__version__}"})
    context = get_ssl_context() if scheme == "https" else None
    return urlopen(request, timeout=timeout, context=context)  # nosec B310


def read_text(url: str, timeout: Optional[float] = 30.0) -> str:
    """GET a URL and return its body decoded as UTF-8, verbatim."""
    with secure_urlopen(url, timeout=timeout) as response:
        return response.read().decode("utf-8")


def download_with_progress(
    url: str,
    dest_path: Path,
    label: Optional[str] = None,
    chunk_size: int = DOWNLOAD_CHUNK_SIZE,
    timeout: Optional[float] = 300.0,
    progress_stream: Optional[IO[str]] = None,
) -> Path:
    """Stream a URL to disk, reporting whole-percentage progress.

    Progress is only reported when the server advertises a Content-Length.
    The response is closed on every exit path.

    Args:
        url: The URL to download from.
        dest_path: File to write; parent directories are created.
        label: Name shown in progress output (defaults to the file name).
        chunk_size: Bytes read per iteration.
        timeout: Connection timeout in seconds.
        progress_stream: Where progress is written (defaults to stdout).

    Returns:
        dest_path.

    Raises:
        DownloadError: On any I/O failure.
    """
    label = label or dest_path.name
    stream = progress_stream or sys.stdout
    LOGGER.info(f"Downloading {label} from {url}, can take some time...")

    start = time.monotonic()
    try:
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        with secure_urlopen(url, timeout=timeout) as response:
            length = _content_length(response)
            received = 0
            percentage = -1
            with open(dest_path, "wb") as out:
                while True:
                    chunk = response.read(chunk_size)
                    if not chunk:
                        break
                    out.write(chunk)
                    received += len(chunk)
                    if length:
                        current = int(received * 100 / length)
                        if current != percentage:
                            stream.write(f"Downloading {label} - {current}%\r")
                            stream.flush()
                            percentage = current
    except (OSError, ValueError, HTTPException) as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    if length:
        stream.write("\n")
        stream.flush()
    LOGGER.info(f"Downloaded {label} in {int(time.monotonic() - start)} seconds")
    return dest_path


def _content_length(response) -> Optional[int]:
    value = response.headers.get("Content-Length")
    if not value:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length > 0 else None
