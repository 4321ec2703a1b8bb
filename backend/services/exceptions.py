"""
Exceptions raised by the fetch, download and install services.
"""

from typing import Dict, List, Optional


class FetcherError(Exception):
    """Base class for all errors reported back to the tool caller."""

    code = "FETCHER_ERROR"


class URLSecurityError(FetcherError):
    """URL is empty, malformed or uses a scheme other than http/https."""

    code = "URL_SECURITY_ERROR"

    def __init__(self, message: str, failures: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        # Nur beim Batch-Validator gesetzt: [{"url": ..., "error": ...}]
        self.failures = failures or []


class ToolInputError(FetcherError):
    """Required tool argument missing or invalid."""

    code = "INVALID_INPUT"


class NavigationError(FetcherError):
    """Navigation produced no response."""

    code = "NAVIGATION_ERROR"


class InstallationError(FetcherError):
    """Browser installer exited with a non-zero code."""

    code = "INSTALLATION_ERROR"

    def __init__(self, message: str, exit_code: Optional[int] = None,
                 stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class VerificationError(FetcherError):
    """Installer reported success but the browser is still not usable."""

    code = "VERIFICATION_ERROR"


class UnknownToolError(FetcherError, ValueError):
    """No handler registered under the requested tool name."""

    code = "UNKNOWN_TOOL"
