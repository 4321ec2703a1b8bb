"""Pytest fixtures: a fake site served through fake Playwright pages."""

import importlib
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError

import config

ARTICLE_TEXT = (
    "Playwright renders the page in a real browser so that client-side "
    "scripts run before the content is read. The extracted article is then "
    "converted to Markdown and returned to the caller together with the "
    "page title and the final URL after redirects. "
)

ARTICLE_HTML = f"""
<html>
  <head><title>Example Article</title></head>
  <body>
    <nav class="menu"><a href="/">Home</a><a href="/about">About us</a></nav>
    <article>
      <h1>Example Article</h1>
      <p>{ARTICLE_TEXT}</p>
      <p>{ARTICLE_TEXT}</p>
    </article>
    <footer>Copyright footer text</footer>
  </body>
</html>
"""


class FakeResponse:
    def __init__(self, url: str, body: bytes = b"", headers: Optional[Dict[str, str]] = None,
                 status: int = 200):
        self.url = url
        self.status = status
        self.headers = headers or {}
        self._body = body

    async def body(self) -> bytes:
        return self._body


class FakeExpectation:
    """Stands in for the context managers returned by page.expect_*()"""

    def __init__(self, value=None, error: Optional[Exception] = None):
        self._value = value
        self._error = error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._error is not None:
            raise self._error
        return False

    @property
    def value(self):
        async def _resolve():
            return self._value

        return _resolve()


class FakeRoute:
    def __init__(self, url: str, html: str = "", title: str = "", headers=None, status: int = 200,
                 body: Optional[bytes] = None, final_url: Optional[str] = None,
                 no_response: bool = False, ok_response: Optional[FakeResponse] = None,
                 navigates: bool = False):
        self.final_url = final_url or url
        self.html = html
        self.title = title
        self.response = None if no_response else FakeResponse(
            self.final_url,
            body=body if body is not None else html.encode("utf-8"),
            headers=headers,
            status=status,
        )
        self.ok_response = ok_response
        self.navigates = navigates


class FakePage:
    def __init__(self, site: "FakeSite"):
        self.site = site
        self.url = ""
        self.goto_calls: List[str] = []
        self.navigation_waits = 0
        self._route: Optional[FakeRoute] = None

    async def goto(self, url: str, timeout=None, wait_until=None):
        self.goto_calls.append(url)
        route = self.site.routes.get(url)
        if route is None:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self._route = route
        self.url = route.final_url
        return route.response

    async def title(self) -> str:
        return self._route.title if self._route else ""

    async def content(self) -> str:
        return self._route.html if self._route else "<html></html>"

    def expect_response(self, predicate, timeout=None):
        ok_response = self._route.ok_response if self._route else None
        if ok_response is not None and predicate(ok_response):
            return FakeExpectation(value=ok_response)
        return FakeExpectation(error=PlaywrightError("Timeout 30000ms exceeded."))

    def expect_navigation(self, timeout=None, wait_until=None):
        self.navigation_waits += 1
        if self._route and self._route.navigates:
            return FakeExpectation()
        return FakeExpectation(error=PlaywrightError(f"Timeout {timeout}ms exceeded."))


class FakeBrowserService:
    """Same surface as BrowserService, backed by FakePage"""

    def __init__(self, options, site: "FakeSite"):
        self.options = options
        self.site = site
        self.pages: List[FakePage] = []
        self.sessions_opened = 0
        self.cleanups = 0

    def is_in_debug_mode(self) -> bool:
        return bool(self.options.debug)

    def _page(self) -> FakePage:
        page = FakePage(self.site)
        self.pages.append(page)
        return page

    async def open_session(self, with_page: bool = True):
        self.sessions_opened += 1
        return SimpleNamespace(page=self._page() if with_page else None, extra_pages=[])

    async def new_page(self, session):
        page = self._page()
        session.extra_pages.append(page)
        return page

    async def cleanup(self, session):
        self.cleanups += 1

    @asynccontextmanager
    async def session(self, with_page: bool = True):
        browser_session = await self.open_session(with_page=with_page)
        try:
            yield browser_session
        finally:
            await self.cleanup(browser_session)


class FakeSite:
    def __init__(self):
        self.routes: Dict[str, FakeRoute] = {}
        self.services: List[FakeBrowserService] = []

    def add(self, url: str, **kwargs) -> FakeRoute:
        route = FakeRoute(url, **kwargs)
        self.routes[url] = route
        return route

    def browser_service(self, options) -> FakeBrowserService:
        service = FakeBrowserService(options, self)
        self.services.append(service)
        return service


@pytest.fixture(autouse=True)
def reset_debug_mode(monkeypatch):
    monkeypatch.setattr(config, "_debug_mode", False)


@pytest.fixture
def site(monkeypatch):
    """Replaces the browser of the downloader and the fetcher with a fake site."""
    fake_site = FakeSite()
    for module_name in ("services.fetchers.downloader", "services.fetchers.playwright_fetcher"):
        module = importlib.import_module(module_name)
        monkeypatch.setattr(module, "BrowserService", fake_site.browser_service)
    return fake_site
