# ABOUTME: Reads already-persisted site links back from the CSV output store
# ABOUTME: Lets a restarted crawl skip every site it has already saved

import csv
from collections.abc import Iterable
from pathlib import Path

from heritage_scraper.models import RESUME_KEY_COLUMN
from heritage_scraper.scraping.base import PersistenceError
from heritage_scraper.utils.logging import get_logger

logger = get_logger(__name__)


def load_scraped_links(path: Path) -> set[str]:
    """Collect the resume key (last column) of every data row in the output store.

    A missing or empty file yields an empty set. A file whose header does not end
    with the ``Link`` column predates resume support and also yields an empty set;
    ``CsvRecordWriter`` refuses to append to such a file.

    Raises:
        PersistenceError: If the file exists but cannot be read as UTF-8 CSV
    """
    if not path.exists():
        logger.info("No previous output found, starting fresh", path=str(path))
        return set()

    try:
        with path.open(newline="", encoding="utf-8") as handle:
            reader = csv.reader(handle)
            header = next(reader, None)
            if not header:
                return set()

            if header[-1].strip() != RESUME_KEY_COLUMN:
                logger.warning("Output store has no resume column", path=str(path), header=header)
                return set()

            links = {row[-1].strip() for row in reader if row and row[-1].strip()}
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise PersistenceError(f"Cannot read output store {path}: {e}") from e

    logger.info("Loaded previously scraped links", path=str(path), count=len(links))
    return links


def filter_pending(discovered: Iterable[str], scraped: set[str]) -> list[str]:
    """Return discovered links that are not yet in the output store, in discovery order."""
    return [link for link in discovered if link not in scraped]
