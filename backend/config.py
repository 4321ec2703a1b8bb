"""
Configuration - Environment-Variablen und Logging-Setup

Alle Werte werden einmal beim Import gelesen. Das Debug-Flag kann
zusätzlich über die CLI (--debug) gesetzt werden.
"""

import logging
import os
import pathlib
import sys

from dotenv import load_dotenv

# .env.local nur laden wenn vorhanden, sonst System-Environment
env_path = pathlib.Path(__file__).parent.parent / ".env.local"
if env_path.exists():
    load_dotenv(dotenv_path=str(env_path))
else:
    load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


HOST = os.getenv("FETCHER_HOST", "127.0.0.1")
PORT = _env_int("FETCHER_PORT", 8000)
TRANSPORT = os.getenv("FETCHER_TRANSPORT", "stdio").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENSURE_BROWSER_ON_STARTUP = _env_flag("FETCHER_ENSURE_BROWSER", True)
BROWSER_CHANNEL = os.getenv("FETCHER_BROWSER_CHANNEL") or None

# Defaults für FetchOptions (Millisekunden)
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_NAVIGATION_TIMEOUT_MS = 10000
DEFAULT_WAIT_UNTIL = "load"

_debug_mode = _env_flag("FETCHER_DEBUG", False)


def is_debug_mode() -> bool:
    """Process-wide debug default (``--debug`` flag or FETCHER_DEBUG)."""
    return _debug_mode


def set_debug_mode(enabled: bool) -> None:
    global _debug_mode
    _debug_mode = enabled


def configure_logging(level: str = LOG_LEVEL) -> None:
    """
    Configures root logging once per process.

    Logs always go to stderr: stdout belongs to the MCP stdio transport.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
