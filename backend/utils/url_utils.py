"""
URL Utilities - Extension-Ermittlung aus URLs und Dateipfaden

Wird vom Resource Type Resolver verwendet. Alle Extensions werden
lowercase und mit führendem Punkt zurückgegeben ("" wenn keine).
"""

import logging
import os
import posixpath
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)


def get_url_extension(url: str) -> str:
    """
    Extension of the last segment of the URL *path*.

    Query string and fragment are ignored, a bare host has no extension.

    Beispiel:
        >>> get_url_extension("https://example.com/files/Report.PDF?download=1")
        '.pdf'

        >>> get_url_extension("https://example.com")
        ''
    """
    try:
        path = unquote(urlparse(url).path)
    except ValueError as e:
        logger.warning(f"URL extension extraction failed for {url}: {e}")
        return ""

    return posixpath.splitext(path)[1].lower()


def get_path_extension(file_path: str) -> str:
    """
    Extension of a local destination path.

    Beispiel:
        >>> get_path_extension("out/file.TXT")
        '.txt'
    """
    return os.path.splitext(file_path)[1].lower()


def ends_with_separator(file_path: str) -> bool:
    """True if the path names a directory (trailing "/" or os.sep)."""
    return file_path.endswith(("/", os.sep))
