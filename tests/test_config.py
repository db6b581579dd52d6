# ABOUTME: Tests for scraper configuration loading
# ABOUTME: Covers defaults, HERITAGE_SCRAPER_ environment overrides and validation

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from heritage_scraper.config import CAPTCHA_MARKER, ScraperConfig, get_config, reload_config


class TestScraperConfig:
    """Test configuration defaults and overrides."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = ScraperConfig(_env_file=None)

        assert config.index_url == "https://whc.unesco.org/en/list"
        assert config.output_path == Path("unesco_sites.csv")
        assert config.navigation_timeout_ms == 90_000
        assert config.wait_until == "networkidle"
        assert config.max_navigation_attempts == 3
        assert config.navigation_backoff_seconds == 2.0
        assert (config.jitter_min_ms, config.jitter_max_ms) == (1000, 3000)
        assert config.captcha_marker == CAPTCHA_MARKER
        assert config.missing_field_policy == "skip"
        assert config.summary_failure_policy == "fallback"
        assert config.image_policy == "hero"
        assert config.headless is False

    def test_environment_overrides(self):
        env = {
            "HERITAGE_SCRAPER_OUTPUT_PATH": "/tmp/heritage.csv",
            "HERITAGE_SCRAPER_MISSING_FIELD_POLICY": "abort",
            "HERITAGE_SCRAPER_JITTER_MAX_MS": "5000",
            "HERITAGE_SCRAPER_GEMINI_API_KEY": "secret",
            "HERITAGE_SCRAPER_HEADLESS": "true",
        }
        with patch.dict(os.environ, env, clear=True):
            config = ScraperConfig(_env_file=None)

        assert config.output_path == Path("/tmp/heritage.csv")
        assert config.missing_field_policy == "abort"
        assert config.jitter_max_ms == 5000
        assert config.gemini_api_key == "secret"
        assert config.headless is True

    def test_rejects_inverted_jitter_bounds(self):
        with pytest.raises(ValidationError, match="jitter_min_ms"):
            ScraperConfig(_env_file=None, jitter_min_ms=4000, jitter_max_ms=1000)

    def test_rejects_unknown_policy(self):
        with pytest.raises(ValidationError):
            ScraperConfig(_env_file=None, summary_failure_policy="ignore")

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValidationError):
            ScraperConfig(_env_file=None, max_navigation_attempts=0)


class TestGlobalConfig:
    """Test the lazily created CLI configuration."""

    def test_get_config_is_cached_until_reload(self):
        with patch.dict(os.environ, {"HERITAGE_SCRAPER_JITTER_MIN_MS": "10"}):
            first = reload_config()
            assert get_config() is first
            assert first.jitter_min_ms == 10

        second = reload_config()
        assert second is not first
        assert get_config() is second
