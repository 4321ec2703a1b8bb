"""
Playwright Fetcher - Browser-basierter URL Fetcher mit Lifecycle-Management
"""

import logging
from typing import Optional

from services.browser_manager import BrowserService, BrowserSession

from .content_processor import WebContentProcessor
from .types import FetchOptions, ProcessResult

logger = logging.getLogger(__name__)


class PlaywrightFetcher:
    """
    Fetcht URLs mit Playwright und verwaltet Browser-Lifecycle.

    Browser Lifecycle:
    - Ein Browser + ein Context pro Tool-Aufruf
    - Pro URL wird eine neue Page im selben Context erstellt
    - Browser wird erst am Ende des Aufrufs geschlossen (außer im Debug-Modus)

    Wichtig: Playwright wird nur über BrowserService gestartet.
    """

    def __init__(self, options: FetchOptions, log_prefix: str = "[FetchURL]"):
        self.options = options
        self.log_prefix = log_prefix
        self.browser_service = BrowserService(options)
        self.processor = WebContentProcessor(options, log_prefix)
        self._session: Optional[BrowserSession] = None

    def is_browser_open(self) -> bool:
        """Prüft, ob der Browser geöffnet ist"""
        return self._session is not None

    async def open_browser(self) -> None:
        """Öffnet Browser + Context einmal pro Aufruf"""
        if self._session is not None:
            return  # Bereits geöffnet

        if self.browser_service.is_in_debug_mode():
            logger.debug(f"{self.log_prefix} Debug mode enabled")

        self._session = await self.browser_service.open_session(with_page=False)

    async def close_browser(self) -> None:
        """Schließt Browser und räumt auf"""
        await self.browser_service.cleanup(self._session)
        self._session = None

    async def __aenter__(self):
        await self.open_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close_browser()

    async def fetch(self, url: str) -> ProcessResult:
        """
        Fetcht eine URL mit Playwright in einer neuen Page.

        Verarbeitungsfehler (Timeout, Netzwerk) landen als Error-Block im
        ProcessResult statt als Exception.

        Raises:
            RuntimeError: Wenn Browser nicht geöffnet ist
        """
        if self._session is None:
            raise RuntimeError("Browser not opened. Call open_browser() first.")

        try:
            page = await self.browser_service.new_page(self._session)
        except Exception as e:
            logger.error(f"{self.log_prefix} Could not open page for {url}: {e}")
            return self.processor.error_result(url, e)

        return await self.processor.process_page_content(page, url)
