"""
Downloader - lädt eine URL in eine Datei

Ablauf pro Aufruf:
    validate -> session -> navigate -> classify -> (binary | text) -> persist -> cleanup
"""

import logging
import os
from pathlib import Path

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response

from services.browser_manager import BrowserService
from services.exceptions import FetcherError, NavigationError, ToolInputError
from utils.url_utils import ends_with_separator
from validators import validate_url_protocol

from .content_processor import WebContentProcessor
from .resource_types import resolve_download_target
from .types import ClassificationResult, FetchOptions, ResponseMetadata

logger = logging.getLogger(__name__)

LOG_PREFIX = "[DownloadURL]"


def ensure_parent_directory(file_path: str) -> None:
    """Creates the parent directory; an existing directory is fine"""
    directory = Path(file_path).parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"{LOG_PREFIX} Failed to create directory: {e}")
        raise FetcherError(f"Failed to create directory: {e}") from e
    logger.info(f"{LOG_PREFIX} Ensured directory: {directory}")


def _write_file(file_path: str, data) -> None:
    """Bytes werden unverändert, Text als UTF-8 geschrieben"""
    try:
        if isinstance(data, bytes):
            Path(file_path).write_bytes(data)
        else:
            Path(file_path).write_text(data, encoding="utf-8")
    except OSError as e:
        logger.error(f"{LOG_PREFIX} Failed to write file: {e}")
        raise FetcherError(f"Failed to write file: {e}") from e


class Downloader:
    """Downloads one URL to one file"""

    def __init__(self, options: FetchOptions):
        self.options = options
        self.browser_service = BrowserService(options)
        self.processor = WebContentProcessor(options, LOG_PREFIX)

    async def download(self, url: str, file_path: str) -> str:
        """
        Lädt ``url`` nach ``file_path`` und gibt eine Zusammenfassung zurück.

        Binärdateien werden unverändert geschrieben, HTML/Text läuft durch
        den Content-Processor. Der Zielpfad kann eine passende Extension
        bekommen (siehe resource_types).

        Raises:
            ToolInputError: url oder file_path leer
            URLSecurityError: Schema nicht http/https
            NavigationError: Navigation fehlgeschlagen oder ohne Response
            FetcherError: Verzeichnis, Schreiben oder Content-Verarbeitung fehlgeschlagen
        """
        if not url:
            logger.error(f"{LOG_PREFIX} URL parameter missing")
            raise ToolInputError("URL parameter is required")
        if not file_path:
            logger.error(f"{LOG_PREFIX} filePath parameter missing")
            raise ToolInputError("filePath parameter is required")

        url = validate_url_protocol(url)

        if self.browser_service.is_in_debug_mode():
            logger.debug(f"{LOG_PREFIX} Debug mode enabled for URL: {url}")

        async with self.browser_service.session() as session:
            page = session.page

            logger.info(f"{LOG_PREFIX} Navigating to URL: {url}")
            try:
                response = await page.goto(url, timeout=self.options.timeout, wait_until=self.options.wait_until)
            except PlaywrightError as e:
                logger.error(f"{LOG_PREFIX} Navigation failed: {e}")
                raise NavigationError(f"Failed to navigate to {url}: {e}") from e
            if response is None:
                raise NavigationError("Failed to get response from URL")

            metadata = ResponseMetadata.from_response(response)
            classification, final_path = resolve_download_target(metadata, url, file_path)
            if ends_with_separator(final_path):
                final_path = os.path.join(final_path, self._default_file_name(classification))
                logger.info(f"{LOG_PREFIX} Destination is a directory, saving as: {final_path}")

            ensure_parent_directory(final_path)

            if classification.is_binary_file:
                return await self._save_binary(page, response, url, final_path, classification, metadata)
            return await self._save_text(page, url, final_path)

    def _default_file_name(self, classification: ClassificationResult) -> str:
        """File name used when the destination is a directory"""
        if classification.is_binary_file:
            return f"download{classification.expected_extension or ''}"
        return "download.html" if self.options.return_html else "download.md"

    async def _wait_for_ok_response(self, page: Page, response: Response) -> Response:
        """Best effort: wait for a 200 on the current URL, else keep the original"""
        current_url = page.url
        try:
            async with page.expect_response(
                lambda r: r.url == current_url and r.status == 200,
                timeout=self.options.timeout,
            ) as response_info:
                pass
            return await response_info.value
        except PlaywrightError as e:
            logger.info(f"{LOG_PREFIX} No 200 response for {current_url}, using original response: {e}")
            return response

    async def _save_binary(self, page: Page, response: Response, url: str, final_path: str,
                           classification: ClassificationResult, metadata: ResponseMetadata) -> str:
        content_type = classification.effective_content_type or metadata.content_type
        logger.info(f"{LOG_PREFIX} Detected binary file ({content_type}), downloading as binary")

        # Manche Download-Links leiten über eine Zwischenseite weiter
        if self.options.wait_for_navigation:
            await self.processor.wait_for_secondary_navigation(page)

        final_response = response
        if response.status != 200:
            final_response = await self._wait_for_ok_response(page, response)

        body = await final_response.body()
        _write_file(final_path, body)

        size_kb = round(len(body) / 1024)
        logger.info(f"{LOG_PREFIX} Successfully downloaded file to: {final_path} ({size_kb} KB)")

        return (
            f"Successfully downloaded {content_type or 'file'} from {url} to {final_path}\n\n"
            f"File size: {size_kb} KB ({len(body)} bytes)"
        )

    async def _save_text(self, page: Page, url: str, final_path: str) -> str:
        logger.info(f"{LOG_PREFIX} Processing as HTML content")

        # Seite ist bereits geladen, keine zweite Navigation
        result = await self.processor.process_loaded_page_content(page, url)
        if not result.success:
            raise FetcherError(result.error or "Failed to process page content")

        _write_file(final_path, result.content)
        logger.info(f"{LOG_PREFIX} Successfully wrote content to file: {final_path}")

        return (
            f"Successfully downloaded content from {url} to {final_path}\n\n"
            f"File size: {len(result.content)} characters"
        )


async def download_url(url: str, file_path: str, options: FetchOptions) -> str:
    return await Downloader(options).download(url, file_path)
