"""
Resource Type Resolver - Binary-vs-Text Entscheidung für Downloads

Given the response headers, the request URL and the caller's destination
path, decides whether a download is written as raw bytes or run through
content extraction, and which file extension the output should carry.

Signal priority (highest first):
    URL extension > Content-Disposition filename > Content-Type > path extension

Server-side script extensions (.php, .jsp, ...) in the URL are ignored:
such endpoints usually return HTML or whatever they generate, so their
extension says nothing about the payload.

Everything here is a pure function over immutable tables.
"""

import logging
import os
import re
from types import MappingProxyType
from typing import Optional, Tuple

from utils.url_utils import ends_with_separator, get_path_extension, get_url_extension

from .types import ClassificationResult, ResponseMetadata

logger = logging.getLogger(__name__)

CONTENT_TYPE_TO_EXTENSION = MappingProxyType({
    "application/pdf": ".pdf",
    "application/zip": ".zip",
    "application/x-zip-compressed": ".zip",
    "application/x-tar": ".tar",
    "application/gzip": ".gz",
    "application/x-gzip": ".gz",
    "application/x-7z-compressed": ".7z",
    "application/vnd.rar": ".rar",
    "application/x-rar-compressed": ".rar",
    "application/json": ".json",
    "application/xml": ".xml",
    "text/xml": ".xml",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "application/vnd.ms-excel": ".xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
    "application/vnd.ms-powerpoint": ".ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": ".pptx",
    "application/epub+zip": ".epub",
    # Bekannter Typ, aber ohne sinnvolle Extension
    "application/octet-stream": "",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "audio/mpeg": ".mp3",
    "audio/wav": ".wav",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "text/plain": ".txt",
    "text/html": ".html",
    "text/css": ".css",
    "text/javascript": ".js",
    "application/javascript": ".js",
    "text/csv": ".csv",
})

EXTENSION_TO_CONTENT_TYPE = MappingProxyType({
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".7z": "application/x-7z-compressed",
    ".rar": "application/vnd.rar",
    ".json": "application/json",
    ".xml": "application/xml",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".epub": "application/epub+zip",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".txt": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".csv": "text/csv",
})

SERVER_SIDE_SCRIPT_EXTENSIONS = frozenset({
    ".php", ".cfm", ".cfml", ".jsp", ".asp", ".aspx", ".java",
    ".py", ".rb", ".pl", ".cgi", ".do", ".action",
})

TEXT_CONTENT_TYPES = frozenset({"text/html", "text/plain"})

# Types that are too generic to trust; an extension may refine them
UPGRADEABLE_CONTENT_TYPES = frozenset({"application/octet-stream", "text/plain"})

# attachment; filename="document.pdf" | filename=document.pdf | filename*=UTF-8''doc.pdf
_FILENAME_RE = re.compile(r"filename[^;=\n]*=(([\"']).*?\2|[^;\n]*)", re.IGNORECASE)


def parse_content_type(content_type_header: Optional[str]) -> str:
    """'Application/PDF; charset=binary' -> 'application/pdf'"""
    if not content_type_header:
        return ""
    return content_type_header.split(";")[0].strip().lower()


def get_disposition_extension(content_disposition: Optional[str]) -> Optional[str]:
    """Extension of the filename announced in Content-Disposition, if any."""
    if not content_disposition:
        return None

    match = _FILENAME_RE.search(content_disposition)
    if not match:
        return None

    filename = match.group(1).strip()
    filename = re.sub(r"^[\"']|[\"']$", "", filename)
    # RFC 5987: charset'lang'value
    if "''" in filename:
        filename = filename.split("''", 1)[1]

    extension = os.path.splitext(filename)[1].lower()
    return extension or None


def _known_type_is_binary(extension: str) -> Optional[bool]:
    """None for unknown extensions, else whether the mapped type is non-text."""
    content_type = EXTENSION_TO_CONTENT_TYPE.get(extension)
    if content_type is None:
        return None
    return content_type not in TEXT_CONTENT_TYPES


def classify_resource(content_type: Optional[str], content_disposition: Optional[str],
                      url: str, file_path: str) -> ClassificationResult:
    """
    Decides binary vs. text and the expected file extension for a download.

    Args:
        content_type: Raw Content-Type header (may be empty)
        content_disposition: Raw Content-Disposition header (may be empty)
        url: Request URL
        file_path: Destination path supplied by the caller

    Returns:
        ClassificationResult; no signal at all means text (content extraction)
    """
    url_extension_raw = get_url_extension(url)
    url_extension = (
        url_extension_raw
        if url_extension_raw and url_extension_raw not in SERVER_SIDE_SCRIPT_EXTENSIONS
        else None
    )
    disposition_extension = get_disposition_extension(content_disposition)
    path_extension = get_path_extension(file_path) or None
    declared_type = parse_content_type(content_type)

    effective_type: Optional[str] = declared_type or None
    if not effective_type or effective_type in UPGRADEABLE_CONTENT_TYPES:
        inferred_type = (
            (url_extension and EXTENSION_TO_CONTENT_TYPE.get(url_extension))
            or (path_extension and EXTENSION_TO_CONTENT_TYPE.get(path_extension))
            or None
        )
        if inferred_type:
            source = "URL extension" if url_extension and url_extension in EXTENSION_TO_CONTENT_TYPE \
                else "file path extension"
            logger.info(f"[DownloadURL] Inferred content type {inferred_type} from {source}")
            effective_type = inferred_type

    is_binary_file = False
    url_verdict = _known_type_is_binary(url_extension) if url_extension else None
    if url_verdict is not None:
        is_binary_file = url_verdict
    elif disposition_extension is not None:
        # Server nennt einen Dateinamen -> fast sicher ein Download
        is_binary_file = True
    elif effective_type and effective_type in CONTENT_TYPE_TO_EXTENSION:
        is_binary_file = effective_type not in TEXT_CONTENT_TYPES
    elif path_extension:
        is_binary_file = bool(_known_type_is_binary(path_extension))

    # "" (octet-stream) is a valid mapping and must not fall through
    content_type_extension = (
        CONTENT_TYPE_TO_EXTENSION[effective_type]
        if effective_type and effective_type in CONTENT_TYPE_TO_EXTENSION
        else None
    )

    expected_extension: Optional[str] = None
    extension_source: Optional[str] = None
    if url_extension is not None:
        expected_extension, extension_source = url_extension, "URL extension"
    elif disposition_extension is not None:
        expected_extension, extension_source = disposition_extension, "Content-Disposition header"
    elif content_type_extension is not None:
        expected_extension = content_type_extension
        extension_source = f"Content-Type header ({effective_type})"
    elif path_extension is not None:
        expected_extension, extension_source = path_extension, "file path extension"

    return ClassificationResult(
        is_binary_file=is_binary_file,
        effective_content_type=effective_type,
        expected_extension=expected_extension,
        extension_source=extension_source,
    )


def resolve_destination_path(file_path: str, classification: ClassificationResult) -> str:
    """
    Rewrites the destination so a binary file carries its expected extension.

    Beispiel (expected ".zip"):
        "out/"         -> "out/download.zip"
        "out/file"     -> "out/file.zip"
        "out/file.txt" -> "out/file.zip"
    """
    expected = classification.expected_extension
    if not classification.is_binary_file or not expected:
        return file_path

    if ends_with_separator(file_path):
        return os.path.join(file_path, f"download{expected}")

    current_extension = os.path.splitext(file_path)[1]
    if current_extension.lower() == expected.lower():
        return file_path

    if not current_extension:
        return file_path + expected
    return file_path[: -len(current_extension)] + expected


def resolve_download_target(metadata: ResponseMetadata, url: str,
                            file_path: str) -> Tuple[ClassificationResult, str]:
    """Classifies a navigated response and returns the final destination path."""
    classification = classify_resource(
        metadata.content_type, metadata.content_disposition, url, file_path
    )
    final_path = resolve_destination_path(file_path, classification)

    if final_path != file_path:
        logger.info(
            f"[DownloadURL] Detected extension {classification.expected_extension} "
            f"from {classification.extension_source}, updating file path to: {final_path}"
        )

    return classification, final_path
