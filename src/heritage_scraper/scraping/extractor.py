# ABOUTME: Extracts raw fields from one site detail page in the shared browser tab
# ABOUTME: Navigates with retry, pauses for an operator on verification walls, then reads the site fields

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from urllib.parse import urljoin

from heritage_scraper.config import ScraperConfig
from heritage_scraper.models import PageSelectors, RawSiteFields
from heritage_scraper.scraping.base import BrowserPage, MissingFieldError, OperatorSignal
from heritage_scraper.utils.logging import get_logger
from heritage_scraper.utils.retry import navigate_with_retry

EXTRACT_SCRIPT = """
({ titles, descriptions, coordinates, heroImage, galleryImages, imagePolicy, maxImages }) => {
  const firstText = (selectors) => {
    for (const selector of selectors) {
      const element = document.querySelector(selector);
      const text = element ? (element.innerText || "").trim() : "";
      if (text) return text;
    }
    return "";
  };

  const coordinateNodes = document.querySelectorAll(coordinates);
  const lastCoordinate = coordinateNodes[coordinateNodes.length - 1];

  let images = [];
  if (imagePolicy === "gallery") {
    images = Array.from(document.querySelectorAll(galleryImages))
      .map((img) => img.src)
      .filter(Boolean)
      .slice(0, maxImages);
  } else {
    const hero = document.querySelector(heroImage);
    if (hero && hero.src) images = [hero.src];
  }

  return {
    title: firstText(titles),
    description: firstText(descriptions),
    coordinates_text: lastCoordinate ? (lastCoordinate.innerText || "").trim() : "",
    images,
  };
}
"""


class ExtractionState(str, Enum):
    """Where the extractor is in handling the current page."""

    IDLE = "idle"
    NAVIGATING = "navigating"
    EXTRACTING = "extracting"
    AWAITING_OPERATOR = "awaiting_operator"
    EXTRACTED = "extracted"


class SiteExtractor:
    """Reads one site detail page at a time.

    States run ``NAVIGATING -> EXTRACTING -> [AWAITING_OPERATOR -> EXTRACTING] -> EXTRACTED``.
    The operator wait has no timeout; only a human can clear a verification wall.
    """

    def __init__(
        self,
        page: BrowserPage,
        config: ScraperConfig,
        operator: OperatorSignal,
        selectors: PageSelectors | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.page = page
        self.config = config
        self.operator = operator
        self.selectors = selectors or PageSelectors()
        self.sleep = sleep
        self.state = ExtractionState.IDLE
        self.logger = get_logger(__name__)

    async def extract(self, url: str) -> RawSiteFields:
        """Navigate to ``url`` and read its raw fields.

        Raises:
            NavigationError: If every navigation attempt failed
            MissingFieldError: If the page has no title or no description
        """
        self._enter(ExtractionState.NAVIGATING, url=url)
        await navigate_with_retry(
            self.page,
            url,
            wait_until=self.config.wait_until,
            timeout_ms=self.config.navigation_timeout_ms,
            max_attempts=self.config.max_navigation_attempts,
            backoff_seconds=self.config.navigation_backoff_seconds,
            sleep=self.sleep,
        )

        self._enter(ExtractionState.EXTRACTING, url=url)
        await self._wait_out_verification(url)

        result = await self.page.evaluate(EXTRACT_SCRIPT, self._script_arg())
        fields = RawSiteFields.model_validate(result or {})
        fields = fields.model_copy(update={"images": self._absolute_images(url, fields.images)})

        if fields.missing_fields:
            raise MissingFieldError(url, fields.missing_fields, html=await self.page.content())

        self._enter(ExtractionState.EXTRACTED, url=url)
        self.logger.debug(
            "Extracted site fields",
            url=url,
            title=fields.title,
            description_length=len(fields.description),
            coordinates_text=fields.coordinates_text,
            image_count=len(fields.images),
        )
        return fields

    async def _wait_out_verification(self, url: str) -> None:
        marker = self.config.captcha_marker
        if not marker:
            return

        while marker in await self.page.content():
            self._enter(ExtractionState.AWAITING_OPERATOR, url=url)
            self.logger.warning("!" * 24)
            self.logger.warning("CAPTCHA detected, waiting for the operator", url=url)
            await self.operator.alert(
                f"CAPTCHA detected on {url}.\nSolve it in the browser window, then press ENTER here."
            )
            await self.operator.wait_for_resume()

            # Give the site a moment to register the solve before looking again
            await self.sleep(self.config.captcha_settle_seconds)
            self._enter(ExtractionState.EXTRACTING, url=url)
            self.logger.info("Continuing after manual CAPTCHA solve", url=url)

    def _script_arg(self) -> dict:
        return {
            "titles": list(self.selectors.title_candidates),
            "descriptions": list(self.selectors.description_candidates),
            "coordinates": self.selectors.coordinates,
            "heroImage": self.selectors.hero_image,
            "galleryImages": self.selectors.gallery_images,
            "imagePolicy": self.config.image_policy,
            "maxImages": self.config.max_gallery_images,
        }

    def _absolute_images(self, url: str, images: list[str]) -> list[str]:
        limit = 1 if self.config.image_policy == "hero" else self.config.max_gallery_images
        resolved = dict.fromkeys(urljoin(url, image.strip()) for image in images if image and image.strip())
        return list(resolved)[:limit]

    def _enter(self, state: ExtractionState, **context) -> None:
        self.logger.debug("Extractor state change", previous=self.state.value, state=state.value, **context)
        self.state = state
