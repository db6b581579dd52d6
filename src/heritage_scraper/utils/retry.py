# ABOUTME: Navigation retry logic using the tenacity library
# ABOUTME: Sequential attempts with a fixed (non-exponential) backoff and a warning per failed attempt

import asyncio
from collections.abc import Awaitable, Callable

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_fixed

from heritage_scraper.scraping.base import BrowserPage, NavigationError
from heritage_scraper.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 2.0


def _log_failed_attempt(url: str, max_attempts: int) -> Callable[[RetryCallState], None]:
    def after(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Navigation failed",
            url=url,
            attempt=retry_state.attempt_number,
            max_attempts=max_attempts,
            error=str(error),
        )

    return after


async def navigate_with_retry(
    page: BrowserPage,
    url: str,
    *,
    wait_until: str = "networkidle",
    timeout_ms: int = 90_000,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """Navigate ``page`` to ``url``, retrying on any error.

    Attempts run one after another with ``backoff_seconds`` between them. After
    ``max_attempts`` failures the last error is wrapped in ``NavigationError``.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(backoff_seconds),
        after=_log_failed_attempt(url, max_attempts),
        reraise=True,
        sleep=sleep,
    )

    try:
        async for attempt in retrying:
            with attempt:
                await page.navigate(url, wait_until=wait_until, timeout_ms=timeout_ms)
    except Exception as e:
        raise NavigationError(url, max_attempts, e) from e
