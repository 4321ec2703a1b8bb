"""
Input Validation Module

SECURITY: Only http and https URLs may reach the browser. Everything else
(file:, javascript:, data:, chrome: ...) is rejected before any navigation.
"""

import logging
from typing import Dict, List
from urllib.parse import urlparse

from services.exceptions import URLSecurityError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")


def validate_url_protocol(url: str) -> str:
    """
    Validates a single URL for fetch/download requests.

    Args:
        url: User-provided URL

    Returns:
        Trimmed URL (otherwise unchanged)

    Raises:
        URLSecurityError: If the URL is empty, not absolute or uses a
            disallowed scheme

    Examples:
        >>> validate_url_protocol("  https://example.com ")
        'https://example.com'

        >>> validate_url_protocol("file:///etc/passwd")
        URLSecurityError('URL protocol "file:" is not allowed. ...')
    """
    if not url or not isinstance(url, str):
        raise URLSecurityError("URL must be a non-empty string")

    trimmed_url = url.strip()
    if not trimmed_url:
        raise URLSecurityError("URL cannot be empty or whitespace only")

    try:
        parsed = urlparse(trimmed_url)
    except ValueError:
        raise URLSecurityError(f"Invalid URL format: {trimmed_url}")

    # Relative URLs oder "example.com" ohne Schema
    if not parsed.scheme:
        raise URLSecurityError(f"Invalid URL format: {trimmed_url}")

    if parsed.scheme not in ALLOWED_SCHEMES:
        logger.warning(
            f"Blocked URL with disallowed protocol: {parsed.scheme}: (URL: {trimmed_url})"
        )
        raise URLSecurityError(
            f'URL protocol "{parsed.scheme}:" is not allowed. '
            "Only HTTP and HTTPS protocols are permitted."
        )

    if not parsed.netloc:
        raise URLSecurityError(f"Invalid URL format: {trimmed_url}")

    logger.debug(f"URL protocol validation passed: {trimmed_url}")
    return trimmed_url


def validate_urls_protocol(urls: List[str]) -> List[str]:
    """
    Validates every URL of a batch and reports all failures at once.

    Raises:
        URLSecurityError: With one numbered line per failing URL; the
            individual failures are available as ``error.failures``
    """
    if not isinstance(urls, (list, tuple)):
        raise URLSecurityError("URLs must be an array")

    if len(urls) == 0:
        raise URLSecurityError("URLs array cannot be empty")

    validated_urls: List[str] = []
    failures: List[Dict[str, str]] = []

    for url in urls:
        try:
            validated_urls.append(validate_url_protocol(url))
        except URLSecurityError as e:
            failures.append({"url": str(url), "error": str(e)})

    if failures:
        details = "\n".join(
            f"  {idx}. {failure['url']}: {failure['error']}"
            for idx, failure in enumerate(failures, start=1)
        )
        raise URLSecurityError(
            f"{len(failures)} URL(s) failed validation:\n{details}",
            failures=failures,
        )

    return validated_urls
