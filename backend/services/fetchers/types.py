"""
Shared Types für Fetcher Module
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import config

WAIT_UNTIL_VALUES = ("load", "domcontentloaded", "networkidle", "commit")


def _number_or_default(value: Any, default: int) -> int:
    """Mirrors ``Number(x) || default``: unparsable or zero means default."""
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return number or default


@dataclass(frozen=True)
class FetchOptions:
    """Per-call options, immutable once built"""
    timeout: int = config.DEFAULT_TIMEOUT_MS
    wait_until: str = config.DEFAULT_WAIT_UNTIL
    extract_content: bool = True
    max_length: int = 0  # 0 = unbegrenzt
    return_html: bool = False
    wait_for_navigation: bool = False
    navigation_timeout: int = config.DEFAULT_NAVIGATION_TIMEOUT_MS
    disable_media: bool = True
    debug: Optional[bool] = None

    @classmethod
    def from_args(cls, args: Optional[Mapping[str, Any]]) -> "FetchOptions":
        """Builds options from raw (camelCase) tool arguments."""
        args = args or {}
        wait_until = str(args.get("waitUntil") or config.DEFAULT_WAIT_UNTIL)
        if wait_until not in WAIT_UNTIL_VALUES:
            wait_until = config.DEFAULT_WAIT_UNTIL
        debug = args.get("debug")

        return cls(
            timeout=_number_or_default(args.get("timeout"), config.DEFAULT_TIMEOUT_MS),
            wait_until=wait_until,
            extract_content=args.get("extractContent") is not False,
            max_length=max(_number_or_default(args.get("maxLength"), 0), 0),
            return_html=args.get("returnHtml") is True,
            wait_for_navigation=args.get("waitForNavigation") is True,
            navigation_timeout=_number_or_default(
                args.get("navigationTimeout"), config.DEFAULT_NAVIGATION_TIMEOUT_MS
            ),
            disable_media=args.get("disableMedia") is not False,
            debug=debug if isinstance(debug, bool) else None,
        )


@dataclass(frozen=True)
class ResponseMetadata:
    """Header und Status einer Navigation"""
    content_type: str
    content_disposition: str
    status: int
    final_url: str

    @classmethod
    def from_response(cls, response) -> "ResponseMetadata":
        headers: Dict[str, str] = dict(response.headers)
        return cls(
            content_type=headers.get("content-type", ""),
            content_disposition=headers.get("content-disposition", ""),
            status=response.status,
            final_url=response.url,
        )


@dataclass(frozen=True)
class ClassificationResult:
    """Binary-vs-text decision for one download"""
    is_binary_file: bool
    effective_content_type: Optional[str]
    expected_extension: Optional[str]
    extension_source: Optional[str] = None


@dataclass
class ProcessResult:
    """Ergebnis des Content-Processors für eine Seite"""
    success: bool
    content: str
    url: str
    title: Optional[str] = None
    error: Optional[str] = None
