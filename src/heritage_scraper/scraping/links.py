# ABOUTME: Discovers site detail-page links from the index page
# ABOUTME: Resolves relative hrefs, drops fragment anchors and deduplicates in discovery order

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from urllib.parse import urljoin, urlparse

from heritage_scraper.config import ScraperConfig
from heritage_scraper.models import PageSelectors
from heritage_scraper.scraping.base import BrowserPage, LinkDiscoveryError
from heritage_scraper.utils.logging import get_logger
from heritage_scraper.utils.retry import navigate_with_retry

# Raw attribute values; resolved against the index URL in Python
LINKS_SCRIPT = """
(selector) => Array.from(document.querySelectorAll(selector)).map((a) => a.getAttribute("href") || "")
"""


def normalize_links(hrefs: Iterable[str | None], base_url: str) -> list[str]:
    """Turn raw hrefs into unique absolute http(s) URLs, keeping first-seen order."""
    unique: dict[str, None] = {}
    for href in hrefs:
        href = (href or "").strip()
        if not href or href.startswith("#"):
            continue

        absolute = urljoin(base_url, href)
        parsed = urlparse(absolute)
        if parsed.scheme not in ("http", "https") or parsed.fragment or "#" in absolute:
            continue

        unique.setdefault(absolute, None)

    return list(unique)


class LinkDiscoverer:
    """Loads the index page and collects every site detail link on it."""

    def __init__(
        self,
        page: BrowserPage,
        config: ScraperConfig,
        selectors: PageSelectors | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.page = page
        self.config = config
        self.selectors = selectors or PageSelectors()
        self.sleep = sleep
        self.logger = get_logger(__name__)

    async def discover(self) -> list[str]:
        """Return the detail-page URLs listed on the index page.

        Raises:
            NavigationError: If the index page cannot be loaded
            LinkDiscoveryError: If the page loads but lists no site links
        """
        index_url = self.config.index_url
        self.logger.info("Loading index page", url=index_url)

        await navigate_with_retry(
            self.page,
            index_url,
            wait_until=self.config.wait_until,
            timeout_ms=self.config.navigation_timeout_ms,
            max_attempts=self.config.max_navigation_attempts,
            backoff_seconds=self.config.navigation_backoff_seconds,
            sleep=self.sleep,
        )

        hrefs = await self.page.evaluate(LINKS_SCRIPT, self.selectors.site_links)
        links = normalize_links(hrefs or [], index_url)

        self.logger.info("Found site links", count=len(links), raw_count=len(hrefs or []))

        if not links:
            raise LinkDiscoveryError(f"No site links found on {index_url} (selector {self.selectors.site_links!r})")

        return links
