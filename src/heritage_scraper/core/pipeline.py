# ABOUTME: Orchestrates one resumable crawl: discovery, resume filtering and the per-site loop
# ABOUTME: Isolates per-site failures, aborts on structural ones, and persists each record as it completes

import asyncio
import random
import re
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from pathlib import Path

from heritage_scraper.config import ScraperConfig
from heritage_scraper.models import EntityRecord, PageSelectors, RunSummary
from heritage_scraper.scraping.base import (
    BrowserPage,
    MissingFieldError,
    OperatorSignal,
    PersistenceError,
    ScrapeAbortedError,
    SummarizationError,
    Summarizer,
)
from heritage_scraper.scraping.coordinates import parse_coordinates
from heritage_scraper.scraping.extractor import SiteExtractor
from heritage_scraper.scraping.links import LinkDiscoverer
from heritage_scraper.scraping.resume import filter_pending, load_scraped_links
from heritage_scraper.scraping.writer import CsvRecordWriter
from heritage_scraper.utils.logging import get_logger, with_pipeline_context, with_site_context

BrowserFactory = Callable[[], AbstractAsyncContextManager[BrowserPage]]


def _default_browser_factory(config: ScraperConfig) -> BrowserFactory:
    from heritage_scraper.scraping.browser import PlaywrightBrowser

    return lambda: PlaywrightBrowser(headless=config.headless)


def _default_operator() -> OperatorSignal:
    from heritage_scraper.scraping.operator import ConsoleOperatorSignal

    return ConsoleOperatorSignal()


class ScrapePipeline:
    """Sequential crawl over the index page and every site not yet in the output store.

    One browser page is reused for every request and sites are visited one at a time.
    """

    def __init__(
        self,
        config: ScraperConfig,
        summarizer: Summarizer,
        operator: OperatorSignal | None = None,
        browser_factory: BrowserFactory | None = None,
        selectors: PageSelectors | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.config = config
        self.summarizer = summarizer
        self.operator = operator or _default_operator()
        self.browser_factory = browser_factory or _default_browser_factory(config)
        self.selectors = selectors or PageSelectors()
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.logger = get_logger(__name__)

    async def run(self) -> RunSummary:
        """Run the crawl to completion.

        Raises:
            ScrapeAbortedError: If the output store or the index page is unusable, or a strict policy trips
        """
        output_path = self.config.output_path
        summary = RunSummary(output_path=output_path)

        with with_pipeline_context("heritage_scrape", index_url=self.config.index_url) as logger:
            logger.info("Starting scraper", output_path=str(output_path))
            scraped = self._load_resume_keys(output_path)

            async with self.browser_factory() as page:
                links = await self._discover(page)
                pending = filter_pending(links, scraped)
                summary.discovered = len(links)
                summary.skipped = len(links) - len(pending)
                logger.info("Resume filter applied", discovered=summary.discovered, skipped=summary.skipped)

                extractor = SiteExtractor(page, self.config, self.operator, self.selectors, sleep=self.sleep)
                writer = self._open_store(output_path)
                try:
                    for position, url in enumerate(pending, start=1):
                        await self._pause()
                        if await self._process_site(extractor, writer, url, position, len(pending)):
                            summary.saved += 1
                        else:
                            summary.failed += 1
                finally:
                    writer.close()

            logger.info(
                "Scrape finished",
                records_collected=summary.saved,
                failed=summary.failed,
                skipped=summary.skipped,
                output_path=str(output_path),
            )

        return summary

    def _load_resume_keys(self, path: Path) -> set[str]:
        try:
            return load_scraped_links(path)
        except PersistenceError as e:
            self.logger.error("Failed to read the output store", path=str(path), error=str(e))
            raise ScrapeAbortedError(f"Output store unreadable: {e}") from e

    def _open_store(self, path: Path) -> CsvRecordWriter:
        writer = CsvRecordWriter(path)
        try:
            writer.open()
        except PersistenceError as e:
            self.logger.error("Failed to open the output store", path=str(path), error=str(e))
            raise ScrapeAbortedError(f"Output store unusable: {e}") from e
        return writer

    async def _discover(self, page: BrowserPage) -> list[str]:
        discoverer = LinkDiscoverer(page, self.config, self.selectors, sleep=self.sleep)
        try:
            return await discoverer.discover()
        except Exception as e:
            self.logger.error("Failed to load the index page", url=self.config.index_url, error=str(e))
            raise ScrapeAbortedError(f"Index page failed: {e}") from e

    async def _pause(self) -> None:
        delay = self.rng.uniform(self.config.jitter_min_ms, self.config.jitter_max_ms) / 1000
        self.logger.debug("Pausing before next site", delay_seconds=round(delay, 3))
        await self.sleep(delay)

    async def _process_site(
        self, extractor: SiteExtractor, writer: CsvRecordWriter, url: str, position: int, total: int
    ) -> bool:
        """Scrape and persist one site. Returns False when the site was skipped."""
        with with_site_context(url, position=position, total=total) as logger:
            logger.info("Scraping site")
            try:
                record = await self._build_record(extractor, url)
                writer.append(record)
            except MissingFieldError as e:
                if self.config.missing_field_policy == "abort":
                    dump = self._write_diagnostics(url, e.html)
                    logger.error("Missing required fields, aborting", missing=e.missing, diagnostics=str(dump))
                    raise ScrapeAbortedError(str(e)) from e
                logger.warning("Failed to scrape site", error=str(e), missing=e.missing)
                return False
            except SummarizationError as e:
                # Only raised when the summary failure policy is "abort"
                logger.error("Summarization failed, aborting", error=str(e))
                raise ScrapeAbortedError(str(e)) from e
            except PersistenceError as e:
                logger.error("Failed to persist record", error=str(e))
                return False
            except Exception as e:
                logger.warning("Failed to scrape site", error=str(e), error_type=type(e).__name__)
                return False

            logger.info("Saved", title=record.title)
            return True

    async def _build_record(self, extractor: SiteExtractor, url: str) -> EntityRecord:
        fields = await extractor.extract(url)
        coordinates = parse_coordinates(fields.coordinates_text)
        description = await self.summarizer.summarize(fields.description)

        return EntityRecord(
            title=fields.title,
            description=description,
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
            images=tuple(fields.images),
            source_link=url,
        )

    def _write_diagnostics(self, url: str, html: str) -> Path | None:
        slug = re.sub(r"[^A-Za-z0-9]+", "_", url).strip("_")[-120:] or "page"
        path = self.config.diagnostics_dir / f"{slug}.html"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(html, encoding="utf-8")
        except OSError as e:
            self.logger.error("Could not write diagnostic page dump", path=str(path), error=str(e))
            return None
        return path
