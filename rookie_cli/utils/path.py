"""
Utilities for handling file paths and deriving file names from URLs.
"""

from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

from pathvalidate import sanitize_filename

DEFAULT_ARTIFACT_NAME = "download.apk"


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def artifact_file_name(url: str) -> str:
    """
    Derives a local file name from the last segment of a URL's path.

    Query strings and fragments are ignored, percent-escapes are decoded and
    the result is sanitized for the local filesystem. Falls back to
    'download.apk' when nothing usable is left.
    """
    path = unquote(urlparse(url).path)
    name = PurePosixPath(path).name if path and not path.endswith("/") else ""
    name = sanitize_filename(name, platform="auto").strip()
    if name in ("", ".", ".."):
        return DEFAULT_ARTIFACT_NAME
    return name
