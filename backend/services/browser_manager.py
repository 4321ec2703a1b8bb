"""
Browser Session Manager - Stealth-Browser pro Tool-Aufruf

Every tool invocation gets its own Playwright driver, browser, context and
page. Nothing is pooled or shared between calls. The context is given a
randomized but plausible fingerprint (viewport, user agent, locale, timezone)
and an init script that hides the usual automation markers.
"""

import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

import config

from .fetchers.types import FetchOptions

logger = logging.getLogger(__name__)

VIEWPORTS: List[Dict[str, int]] = [
    {"width": 1920, "height": 1080},
    {"width": 1680, "height": 1050},
    {"width": 1536, "height": 864},
    {"width": 1440, "height": 900},
    {"width": 1366, "height": 768},
    {"width": 1280, "height": 800},
]

USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
]

LOCALES: List[Tuple[str, str]] = [
    ("en-US", "America/New_York"),
    ("en-US", "America/Los_Angeles"),
    ("en-GB", "Europe/London"),
    ("de-DE", "Europe/Berlin"),
]

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-infobars",
    "--window-position=0,0",
]

BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "media"})

# Läuft vor jedem Dokument im Context
STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', {
  get: () => [
    { name: 'Chrome PDF Plugin', filename: 'internal-pdf-viewer' },
    { name: 'Chrome PDF Viewer', filename: 'mhjfbmdgcfjbbpaeojofohoefgiehjai' },
    { name: 'Native Client', filename: 'internal-nacl-plugin' },
  ],
});
Object.defineProperty(navigator, 'languages', { get: () => %(languages)s });
Object.defineProperty(navigator, 'hardwareConcurrency', { get: () => %(cores)d });
window.chrome = window.chrome || { runtime: {} };
const originalQuery = window.navigator.permissions && window.navigator.permissions.query;
if (originalQuery) {
  window.navigator.permissions.query = (parameters) =>
    parameters.name === 'notifications'
      ? Promise.resolve({ state: Notification.permission })
      : originalQuery(parameters);
}
"""


@dataclass
class BrowserSession:
    """Browser + Context + Page(s), owned by exactly one tool call"""
    browser: Browser
    context: BrowserContext
    viewport: Dict[str, int]
    page: Optional[Page] = None
    extra_pages: List[Page] = field(default_factory=list)


class BrowserService:
    """
    Creates and tears down stealth browser sessions.

    Usage:
        service = BrowserService(options)
        async with service.session() as session:
            response = await session.page.goto(url)
    """

    def __init__(self, options: FetchOptions):
        self.options = options
        self._playwright: Optional[Playwright] = None

    def is_in_debug_mode(self) -> bool:
        """Call-level ``debug`` wins over the process-wide flag"""
        if self.options.debug is not None:
            return self.options.debug
        return config.is_debug_mode()

    async def create_browser(self) -> Browser:
        """Startet Playwright und einen Chromium-Browser (headless außer im Debug-Modus)"""
        if self._playwright is None:
            self._playwright = await async_playwright().start()

        headless = not self.is_in_debug_mode()
        logger.debug(f"Launching Chromium (headless={headless})")

        launch_kwargs = {
            "headless": headless,
            "args": LAUNCH_ARGS,
            "ignore_default_args": ["--enable-automation"],
        }
        if config.BROWSER_CHANNEL:
            launch_kwargs["channel"] = config.BROWSER_CHANNEL

        try:
            browser = await self._playwright.chromium.launch(**launch_kwargs)
        except Exception:
            # Treiber läuft sonst als verwaister Subprozess weiter
            await self._stop_playwright()
            raise
        logger.info("✅ Browser started")
        return browser

    async def create_context(self, browser: Browser) -> Tuple[BrowserContext, Dict[str, int]]:
        """Isolated context with a randomized fingerprint"""
        viewport = dict(random.choice(VIEWPORTS))
        user_agent = random.choice(USER_AGENTS)
        locale, timezone_id = random.choice(LOCALES)
        language = locale.split("-")[0]

        context = await browser.new_context(
            viewport=viewport,
            screen=viewport,
            user_agent=user_agent,
            locale=locale,
            timezone_id=timezone_id,
            device_scale_factor=random.choice([1, 1, 2]),
            has_touch=False,
            is_mobile=False,
            java_script_enabled=True,
            extra_http_headers={
                "Accept-Language": f"{locale},{language};q=0.9",
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
        )
        await context.add_init_script(
            script=STEALTH_INIT_SCRIPT % {
                "languages": f'["{locale}", "{language}"]',
                "cores": random.choice([4, 8, 12, 16]),
            }
        )

        logger.debug(f"Context created: viewport={viewport['width']}x{viewport['height']}, locale={locale}")
        return context, viewport

    async def create_page(self, context: BrowserContext, viewport: Dict[str, int]) -> Page:
        """New page with media blocking and an initial human-like mouse position"""
        page = await context.new_page()
        page.set_default_timeout(self.options.timeout)

        if self.options.disable_media:
            await page.route("**/*", self._block_media)

        await page.mouse.move(
            random.randint(0, viewport["width"] // 2),
            random.randint(0, viewport["height"] // 2),
            steps=random.randint(3, 8),
        )
        return page

    @staticmethod
    async def _block_media(route) -> None:
        if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    async def open_session(self, with_page: bool = True) -> BrowserSession:
        """Browser + context, plus the first page unless ``with_page`` is False"""
        browser = await self.create_browser()
        try:
            context, viewport = await self.create_context(browser)
            page = await self.create_page(context, viewport) if with_page else None
        except Exception:
            await browser.close()
            await self._stop_playwright()
            raise
        return BrowserSession(browser=browser, context=context, viewport=viewport, page=page)

    async def new_page(self, session: BrowserSession) -> Page:
        """Weitere Page im selben Context (Multi-URL-Fetch)"""
        page = await self.create_page(session.context, session.viewport)
        session.extra_pages.append(page)
        return page

    async def cleanup(self, session: Optional[BrowserSession]) -> None:
        """
        Closes pages, context, browser and the Playwright driver.

        Im Debug-Modus bleibt alles offen, damit man den Zustand inspizieren kann.
        Fehler beim Schließen werden nur geloggt.
        """
        if self.is_in_debug_mode():
            logger.debug("Debug mode: browser and page kept open for inspection")
            return

        if session is not None:
            for page in [session.page, *session.extra_pages]:
                if page is None:
                    continue
                try:
                    await page.close()
                except Exception as e:
                    logger.warning(f"Error closing page: {e}")

            try:
                await session.context.close()
            except Exception as e:
                logger.warning(f"Error closing context: {e}")

            try:
                await session.browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")

        await self._stop_playwright()
        logger.debug("Browser closed")

    async def _stop_playwright(self) -> None:
        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self._playwright = None

    @asynccontextmanager
    async def session(self, with_page: bool = True):
        """Opens a session and always hands it to cleanup()"""
        browser_session = await self.open_session(with_page=with_page)
        try:
            yield browser_session
        finally:
            await self.cleanup(browser_session)
