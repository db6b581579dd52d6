# ABOUTME: Playwright-backed browser session exposing one reusable page
# ABOUTME: Launches Chromium with a randomly chosen desktop user agent for the whole crawl

import random
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from heritage_scraper.scraping.base import ScraperError
from heritage_scraper.utils.logging import get_logger

# Desktop user agents, one picked per session
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/129.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/129.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/128.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_6) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.6 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:130.0) Gecko/20100101 Firefox/130.0",
]


class PlaywrightPage:
    """Adapts a Playwright ``Page`` to the ``BrowserPage`` protocol."""

    def __init__(self, page: Page):
        self._page = page

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        response = await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)  # type: ignore[arg-type]
        # 5xx is retried; a 4xx may be a verification wall, which the extractor handles
        if response is not None and response.status >= 500:
            raise ScraperError(f"HTTP {response.status} from {url}")

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self._page.evaluate(script, arg)

    async def content(self) -> str:
        return await self._page.content()

    async def close(self) -> None:
        if not self._page.is_closed():
            await self._page.close()


class PlaywrightBrowser:
    """Async context manager owning the browser for one crawl.

    Yields a single ``PlaywrightPage`` that is reused for the index page and every
    detail page, mirroring one person browsing in one tab.
    """

    def __init__(self, headless: bool = False, user_agent: str | None = None):
        self.headless = headless
        self.user_agent = user_agent or random.choice(USER_AGENTS)
        self.logger = get_logger(__name__)

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def __aenter__(self) -> PlaywrightPage:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless, args=["--no-sandbox"])
        self._context = await self._browser.new_context(user_agent=self.user_agent)
        page = await self._context.new_page()

        self.logger.info("Browser session started", headless=self.headless, user_agent=self.user_agent)
        return PlaywrightPage(page)

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()

        self._context = self._browser = self._playwright = None
        self.logger.info("Browser session closed")
