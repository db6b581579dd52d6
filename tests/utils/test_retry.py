# ABOUTME: Tests for navigation retry logic using tenacity
# ABOUTME: Validates attempt counts, fixed backoff, per-attempt warnings and the wrapped final error

import pytest
from structlog.testing import capture_logs

from heritage_scraper.scraping.base import NavigationError
from heritage_scraper.utils.retry import navigate_with_retry


class FlakyPage:
    """Page whose navigation fails a set number of times before succeeding."""

    def __init__(self, failures: int, error: Exception | None = None):
        self.failures = failures
        self.error = error or TimeoutError("Timeout 90000ms exceeded")
        self.calls: list[tuple[str, str, int]] = []

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        self.calls.append((url, wait_until, timeout_ms))
        if self.failures > 0:
            self.failures -= 1
            raise self.error


URL = "https://whc.unesco.org/en/list/208"


class TestNavigateWithRetry:
    """Test the navigation retry wrapper."""

    @pytest.mark.asyncio
    async def test_first_attempt_success_does_not_sleep(self, sleep):
        page = FlakyPage(failures=0)

        await navigate_with_retry(page, URL, wait_until="load", timeout_ms=5000, sleep=sleep)

        assert page.calls == [(URL, "load", 5000)]
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, sleep):
        page = FlakyPage(failures=2)

        await navigate_with_retry(page, URL, max_attempts=3, backoff_seconds=2.0, sleep=sleep)

        assert len(page.calls) == 3
        assert sleep.delays == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, sleep):
        error = ConnectionError("net::ERR_CONNECTION_RESET")
        page = FlakyPage(failures=10, error=error)

        with pytest.raises(NavigationError) as exc_info:
            await navigate_with_retry(page, URL, max_attempts=4, backoff_seconds=0.5, sleep=sleep)

        assert len(page.calls) == 4
        assert sleep.delays == [0.5, 0.5, 0.5]
        assert exc_info.value.url == URL
        assert exc_info.value.attempts == 4
        assert exc_info.value.__cause__ is error
        assert "ERR_CONNECTION_RESET" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_logs_each_failed_attempt(self, sleep):
        page = FlakyPage(failures=2)

        with capture_logs() as logs:
            await navigate_with_retry(page, URL, max_attempts=3, sleep=sleep)

        warnings = [log for log in logs if log["event"] == "Navigation failed"]
        assert [log["attempt"] for log in warnings] == [1, 2]
        assert all(log["log_level"] == "warning" and log["url"] == URL for log in warnings)
