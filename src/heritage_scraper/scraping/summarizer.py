# ABOUTME: Summarizes site descriptions with the Gemini generateContent API over httpx
# ABOUTME: Falls back to the first two sentences locally when the API is unavailable

import httpx

from heritage_scraper.config import ScraperConfig
from heritage_scraper.scraping.base import SummarizationError
from heritage_scraper.utils.logging import get_logger, log_api_call

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"
SUMMARY_INSTRUCTION = "Summarize this site description in exactly 2 simple sentences:"
MIN_SUMMARY_LENGTH = 20
EMPTY_DESCRIPTION = "No description available."


def fallback_summary(text: str) -> str:
    """First two sentences of ``text`` (split on ". "), joined and ending with a period."""
    sentences = [part.strip().rstrip(".").strip() for part in text.strip().split(". ")]
    sentences = [sentence for sentence in sentences if sentence][:2]
    if not sentences:
        return EMPTY_DESCRIPTION
    return ". ".join(sentences) + "."


class GeminiSummarizer:
    """Two-sentence description summaries from Gemini.

    With ``failure_policy="fallback"`` ``summarize`` always returns a usable string.
    With ``failure_policy="abort"`` an API failure raises ``SummarizationError``.
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = "gemini-2.5-flash-lite",
        api_version: str = "v1beta",
        failure_policy: str = "fallback",
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.api_version = api_version
        self.failure_policy = failure_policy
        self.timeout_seconds = timeout_seconds
        self._owns_client = client is None
        self.http_client = client or httpx.AsyncClient(base_url=GEMINI_BASE_URL)  # Allow for dependency injection
        self.logger = get_logger(__name__)

        if not api_key:
            self.logger.warning("No Gemini API key configured, summaries will use the local fallback")

    @classmethod
    def from_config(cls, config: ScraperConfig, client: httpx.AsyncClient | None = None) -> "GeminiSummarizer":
        return cls(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            api_version=config.gemini_api_version,
            failure_policy=config.summary_failure_policy,
            timeout_seconds=config.summary_timeout_seconds,
            client=client,
        )

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_BASE_URL}/{self.api_version}/models/{self.model}:generateContent"

    async def summarize(self, text: str) -> str:
        """Summarize ``text`` in two sentences.

        Text shorter than 20 characters after trimming is returned trimmed, without an API call.
        """
        stripped = (text or "").strip()
        if len(stripped) < MIN_SUMMARY_LENGTH:
            self.logger.warning("Description too short or empty, skipping summarization", length=len(stripped))
            return stripped or EMPTY_DESCRIPTION

        try:
            return await self._generate(text)
        except (httpx.HTTPError, SummarizationError, ValueError) as e:
            if self.failure_policy == "abort":
                raise SummarizationError(f"Gemini summarization failed: {e}") from e

            self.logger.warning("Summarization failed, using first two sentences", error=str(e))
            return fallback_summary(text)

    @log_api_call("gemini")
    async def _generate(self, text: str) -> str:
        if not self.api_key:
            raise SummarizationError("No Gemini API key configured")

        payload = {"contents": [{"parts": [{"text": f"{SUMMARY_INSTRUCTION}\n\n{text}"}]}]}
        response = await self.http_client.post(
            self.endpoint,
            json=payload,
            headers={"x-goog-api-key": self.api_key},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()

        data = response.json()
        try:
            output = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise SummarizationError("Gemini response contained no summary text") from e

        if not isinstance(output, str) or not output.strip():
            raise SummarizationError("Gemini returned an empty summary")

        return output.strip()

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()
