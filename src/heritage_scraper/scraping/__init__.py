# ABOUTME: Scraping stages - link discovery, resume filtering, extraction, normalization and persistence
# ABOUTME: Pipeline Stage 1: index page -> detail pages -> normalized records -> CSV

"""
Scraping Layer: Turn listing and detail pages into persisted records

This layer handles:
- Browser session management and retrying navigation
- Link discovery on the index page and skipping already-saved sites
- Per-site field extraction, including operator-gated CAPTCHA pauses
- Coordinate normalization and description summarization
- Incremental CSV persistence

Data Flow: index page -> detail pages -> core/ pipeline -> CSV output store

The extractor and link discoverer navigate through utils.retry and are imported
from their own modules.
"""

from .base import (
    BrowserPage,
    ExtractionError,
    LinkDiscoveryError,
    MissingFieldError,
    NavigationError,
    OperatorSignal,
    PersistenceError,
    ScrapeAbortedError,
    ScraperError,
    SummarizationError,
    Summarizer,
)
from .coordinates import dms_to_decimal, parse_coordinates
from .resume import filter_pending, load_scraped_links
from .summarizer import GeminiSummarizer, fallback_summary
from .writer import CsvRecordWriter

__all__ = [
    "BrowserPage",
    "CsvRecordWriter",
    "ExtractionError",
    "GeminiSummarizer",
    "LinkDiscoveryError",
    "MissingFieldError",
    "NavigationError",
    "OperatorSignal",
    "PersistenceError",
    "ScrapeAbortedError",
    "ScraperError",
    "SummarizationError",
    "Summarizer",
    "dms_to_decimal",
    "fallback_summary",
    "filter_pending",
    "load_scraped_links",
    "parse_coordinates",
]
