"""
Content Processor - wandelt eine geladene Seite in lesbaren Text um

Takes a Playwright page, pulls title and HTML, optionally narrows the HTML
down to the main content (trafilatura) and converts it to Markdown. The
output is always framed as::

    Title: <title>
    URL: <final url>
    Content:

    <markdown or html>
"""

import logging
import re
from typing import Optional

import markdownify
from bs4 import BeautifulSoup, Comment
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from trafilatura import extract
from trafilatura.settings import use_config

from .types import FetchOptions, ProcessResult

logger = logging.getLogger(__name__)

trafilatura_config = use_config()
# Bildprüfung nicht abwarten
trafilatura_config.set("DEFAULT", "timeout", "10")
trafilatura_config.set("DEFAULT", "favor_precision", "False")
# Auch kurze Seiten liefern etwas
trafilatura_config.set("DEFAULT", "min_extracted_size", "5")
trafilatura_config.set("DEFAULT", "min_output_size", "5")
trafilatura_config.set("DEFAULT", "link_density_max", "0.6")

# Elemente ohne Lesewert
NOISE_TAGS = [
    "script", "style", "noscript", "iframe", "svg", "canvas",
    "nav", "footer", "header", "aside", "form", "button",
]

NOISE_CLASS_PATTERN = re.compile(
    r"ad-|ads-|advert|sponsor|doubleclick|taboola|cookie|banner|popup|sidebar|share|social",
    re.IGNORECASE,
)


def _clean_html(html: str) -> BeautifulSoup:
    """Removes scripts, hidden blocks, ads and cookie banners before extraction."""
    soup = BeautifulSoup(html, "lxml")

    for tag in soup(NOISE_TAGS):
        tag.decompose()

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all(attrs={"aria-hidden": "true"}):
        tag.decompose()

    for tag in soup.find_all(class_=NOISE_CLASS_PATTERN):
        if not tag.decomposed:
            tag.decompose()

    return soup


def extract_main_content(html: str, url: Optional[str] = None) -> Optional[str]:
    """
    Main content extraction via trafilatura (HTML output).

    Falls back to the cleaned <body> when trafilatura finds nothing. Returns
    None when the page has no text at all, so the caller can use the full page.
    """
    if not html or not html.strip():
        return None

    soup = _clean_html(html)
    cleaned = str(soup)

    try:
        extracted = extract(
            cleaned,
            url=url,
            output_format="html",
            include_links=True,
            include_tables=True,
            include_formatting=True,
            include_images=False,
            include_comments=False,
            config=trafilatura_config,
        )
    except Exception as e:
        logger.warning(f"trafilatura extraction failed: {e}")
        extracted = None

    if extracted:
        return extracted

    body = soup.body
    if body is not None and body.get_text(strip=True):
        return str(body)
    return None


def html_to_markdown(html: str) -> str:
    markdown = markdownify.markdownify(html, heading_style="ATX", strip=["img"])
    # Mehrfache Leerzeilen zusammenfassen
    markdown = re.sub(r"[ \t]+\n", "\n", markdown)
    return re.sub(r"\n{3,}", "\n\n", markdown).strip()


class WebContentProcessor:
    """Turns a loaded page into the framed text payload returned by the tools"""

    def __init__(self, options: FetchOptions, log_prefix: str = "[WebContentProcessor]"):
        self.options = options
        self.log_prefix = log_prefix

    async def wait_for_secondary_navigation(self, page: Page) -> bool:
        """
        Waits for a navigation that happens after the initial load (redirect
        pages, anti-bot interstitials). Timeouts are expected and not fatal.
        """
        try:
            async with page.expect_navigation(
                timeout=self.options.navigation_timeout,
                wait_until=self.options.wait_until,
            ):
                pass
            logger.info(f"{self.log_prefix} Additional navigation completed")
            return True
        except PlaywrightError as e:
            logger.info(f"{self.log_prefix} No additional navigation detected: {e}")
            return False

    async def process_page_content(self, page: Page, url: str) -> ProcessResult:
        """Navigates to ``url`` and processes the result"""
        try:
            logger.info(f"{self.log_prefix} Navigating to URL: {url}")
            await page.goto(url, timeout=self.options.timeout, wait_until=self.options.wait_until)

            if self.options.wait_for_navigation:
                await self.wait_for_secondary_navigation(page)

            return await self.process_loaded_page_content(page, url)
        except Exception as e:
            logger.error(f"{self.log_prefix} Error processing {url}: {e}")
            return self.error_result(url, e)

    async def process_loaded_page_content(self, page: Page, url: str) -> ProcessResult:
        """Processes a page that is already loaded; never navigates again"""
        try:
            title = await page.title()
            html = await page.content()
            final_url = page.url or url

            content_html: Optional[str] = html
            if self.options.extract_content:
                logger.debug(f"{self.log_prefix} Extracting main content")
                content_html = extract_main_content(html, final_url)
                if content_html is None:
                    logger.warning(f"{self.log_prefix} Could not extract main content, using full page")
                    content_html = html

            content = content_html if self.options.return_html else html_to_markdown(content_html)

            if self.options.max_length > 0 and len(content) > self.options.max_length:
                content = content[: self.options.max_length]
                logger.info(f"{self.log_prefix} Content truncated to {self.options.max_length} characters")

            formatted = f"Title: {title}\nURL: {final_url}\nContent:\n\n{content}"
            logger.info(f"{self.log_prefix} Processed {final_url} ({len(content)} characters)")

            return ProcessResult(success=True, content=formatted, url=final_url, title=title)
        except Exception as e:
            logger.error(f"{self.log_prefix} Error processing loaded page {url}: {e}")
            return self.error_result(url, e)

    @staticmethod
    def error_result(url: str, error: Exception) -> ProcessResult:
        message = f"Failed to retrieve web page content: {error}"
        return ProcessResult(
            success=False,
            content=f"Title: Error\nURL: {url}\nContent:\n\n<error>{message}</error>",
            url=url,
            title="Error",
            error=message,
        )
