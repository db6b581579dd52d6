# ABOUTME: Shared pytest fixtures for scraper configuration, recorded sleeps and logging teardown
# ABOUTME: Keeps every test's output store and diagnostics inside tmp_path

import logging

import pytest
import structlog
from fakes import INDEX_URL, RecordingSleep
from loguru import logger

from heritage_scraper.config import ScraperConfig
from heritage_scraper.utils.logging.config import NOISY_LOGGERS


@pytest.fixture
def config(tmp_path) -> ScraperConfig:
    return ScraperConfig(
        _env_file=None,
        index_url=INDEX_URL,
        output_path=tmp_path / "sites.csv",
        diagnostics_dir=tmp_path / "diagnostics",
        gemini_api_key="",
    )


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def reset_logging():
    """Undo configure_logging so sinks opened in tmp dirs do not leak into other tests."""
    yield
    logger.remove()
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)
    logging.captureWarnings(False)
