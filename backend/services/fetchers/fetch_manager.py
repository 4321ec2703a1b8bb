"""
Fetch Manager - Orchestriert Single- und Multi-URL-Fetches
"""

import asyncio
import logging
from typing import List

from validators import validate_url_protocol, validate_urls_protocol

from .playwright_fetcher import PlaywrightFetcher
from .types import FetchOptions, ProcessResult

logger = logging.getLogger(__name__)


class FetchManager:
    """
    Orchestriert die Fetches eines Tool-Aufrufs.

    Browser Lifecycle:
    - Playwright Browser wird genau 1× pro Aufruf gestartet
    - Jede URL bekommt ihre eigene Page im selben Context
    - Wird am Ende des Aufrufs geschlossen (außer im Debug-Modus)

    Concurrency:
    - Multi-URL: alle Pages parallel via asyncio.gather, kein Limit
    """

    def __init__(self, options: FetchOptions, log_prefix: str = "[FetchURL]"):
        self.options = options
        self.fetcher = PlaywrightFetcher(options, log_prefix)

    async def __aenter__(self):
        await self.fetcher.open_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.fetcher.is_browser_open():
            await self.fetcher.close_browser()

    async def fetch_url(self, url: str) -> ProcessResult:
        return await self.fetcher.fetch(url)

    async def fetch_urls(self, urls: List[str]) -> List[ProcessResult]:
        """
        Fetcht alle URLs parallel. Ergebnisse kommen in Eingabe-Reihenfolge
        zurück; ein Fehler bei einer URL bricht den Batch nicht ab.
        """

        async def fetch_single(url: str) -> ProcessResult:
            try:
                return await self.fetcher.fetch(url)
            except Exception as e:
                logger.error(f"Error fetching {url}: {e}")
                return self.fetcher.processor.error_result(url, e)

        logger.info(f"Fetching {len(urls)} URLs")
        results = await asyncio.gather(*[fetch_single(url) for url in urls])

        success_count = sum(1 for result in results if result.success)
        logger.info(f"Fetch completed: {success_count} succeeded, {len(results) - success_count} failed")
        return list(results)


def combine_results(results: List[ProcessResult]) -> str:
    """Frames every page as ``[webpage N begin] ... [webpage N end]``"""
    return "\n\n".join(
        f"[webpage {index} begin]\n{result.content}\n[webpage {index} end]"
        for index, result in enumerate(results, start=1)
    )


async def fetch_single_url(url: str, options: FetchOptions) -> ProcessResult:
    """Validates and fetches one URL in its own browser session"""
    url = validate_url_protocol(url)
    async with FetchManager(options, "[FetchURL]") as manager:
        return await manager.fetch_url(url)


async def fetch_multiple_urls(urls: List[str], options: FetchOptions) -> List[ProcessResult]:
    """Validates the whole batch first, then fetches all URLs in one browser session"""
    urls = validate_urls_protocol(urls)
    async with FetchManager(options, "[FetchURLs]") as manager:
        return await manager.fetch_urls(urls)
