# ABOUTME: Protocol interfaces and error taxonomy for the scraping stages
# ABOUTME: Keeps browser, operator and summarization capabilities swappable behind small contracts

from typing import Any, Protocol


class ScraperError(Exception):
    """Base exception for scraper failures."""

    pass


class NavigationError(ScraperError):
    """Raised when a page could not be loaded after every retry attempt."""

    def __init__(self, url: str, attempts: int, cause: BaseException | None = None):
        self.url = url
        self.attempts = attempts
        detail = f": {cause}" if cause else ""
        super().__init__(f"Navigation to {url} failed after {attempts} attempt(s){detail}")


class LinkDiscoveryError(ScraperError):
    """Raised when the index page yields no site links."""

    pass


class ExtractionError(ScraperError):
    """Raised when site data extraction fails."""

    pass


class MissingFieldError(ExtractionError):
    """Raised when a detail page has no title or no description."""

    def __init__(self, url: str, missing: list[str], html: str = ""):
        self.url = url
        self.missing = missing
        self.html = html
        super().__init__(f"Missing {', '.join(missing)} on {url}")


class SummarizationError(ScraperError):
    """Raised when the summarization API fails and the fallback is disabled."""

    pass


class PersistenceError(ScraperError):
    """Raised when a record could not be appended to the output store."""

    pass


class ScrapeAbortedError(ScraperError):
    """Raised when the whole run has to stop."""

    pass


class BrowserPage(Protocol):
    """Protocol for the single browser tab the crawl drives."""

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        """Load ``url`` and wait for ``wait_until`` or ``timeout_ms``."""
        ...

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run ``script`` in the page and return its JSON-serializable result."""
        ...

    async def content(self) -> str:
        """Return the current page HTML."""
        ...

    async def close(self) -> None: ...


class OperatorSignal(Protocol):
    """Protocol for the human who resolves interactive verification walls."""

    async def alert(self, message: str) -> None:
        """Get the operator's attention."""
        ...

    async def wait_for_resume(self) -> None:
        """Block until the operator says the page is usable again. Never times out."""
        ...


class Summarizer(Protocol):
    """Protocol for description summarization."""

    async def summarize(self, text: str) -> str:
        """Return a short summary of ``text``."""
        ...
