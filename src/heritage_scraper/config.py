# ABOUTME: Application configuration using Pydantic Settings for environment variables
# ABOUTME: Provides type-safe access to crawl pacing, failure policies, API keys and logging settings

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CAPTCHA_MARKER = (
    "This question is for testing whether you are a human visitor and to prevent automated spam submission"
)


class ScraperConfig(BaseSettings):
    """Scraper configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="HERITAGE_SCRAPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
    )

    # Source site
    index_url: str = Field(
        default="https://whc.unesco.org/en/list", description="Index page listing every site detail link"
    )
    output_path: Path = Field(default=Path("unesco_sites.csv"), description="CSV output store (also the resume log)")

    # Browser
    headless: bool = Field(default=False, description="Run the browser without a window (CAPTCHAs need one)")
    navigation_timeout_ms: int = Field(default=90_000, description="Per-navigation timeout in milliseconds")
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="networkidle", description="Navigation wait condition"
    )

    # Retry and pacing
    max_navigation_attempts: int = Field(default=3, ge=1, description="Navigation attempts before giving up")
    navigation_backoff_seconds: float = Field(default=2.0, ge=0, description="Fixed wait between navigation attempts")
    jitter_min_ms: int = Field(default=1000, ge=0, description="Lower bound of the delay before each site")
    jitter_max_ms: int = Field(default=3000, ge=0, description="Upper bound of the delay before each site")

    # Interactive verification
    captcha_marker: str = Field(default=CAPTCHA_MARKER, description="Page text that signals a human-verification wall")
    captcha_settle_seconds: float = Field(default=5.0, ge=0, description="Pause after the operator resumes")

    # Failure policies
    missing_field_policy: Literal["skip", "abort"] = Field(
        default="skip", description="What to do when a site page lacks a title or description"
    )
    summary_failure_policy: Literal["fallback", "abort"] = Field(
        default="fallback", description="What to do when the summarization API fails"
    )
    diagnostics_dir: Path = Field(
        default=Path("logs/diagnostics"), description="Where page dumps are written when a run aborts"
    )

    # Image collection
    image_policy: Literal["hero", "gallery"] = Field(default="hero", description="Collect one hero image or a gallery")
    max_gallery_images: int = Field(default=6, ge=1, description="Gallery image cap when image_policy is gallery")

    # Summarization
    gemini_api_key: str = Field(default="", description="Google Gemini API key for description summaries")
    gemini_model: str = Field(default="gemini-2.5-flash-lite", description="Gemini model used for summaries")
    gemini_api_version: str = Field(default="v1beta", description="Generative Language API version")
    summary_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for one summarization call")

    # Logging Configuration
    log_mode: Literal["interactive", "production"] = Field(default="interactive", description="Logging output mode")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging verbosity level"
    )

    log_file: Path | None = Field(default=None, description="Custom log file path (overrides default)")

    @model_validator(mode="after")
    def _check_jitter_bounds(self) -> "ScraperConfig":
        if self.jitter_min_ms > self.jitter_max_ms:
            raise ValueError("jitter_min_ms must not exceed jitter_max_ms")
        return self


# Global config instance - lazy loaded when first accessed
_config_instance: ScraperConfig | None = None


def get_config() -> ScraperConfig:
    """Get the global configuration instance.

    Creates the config on first access, subsequent calls return the same instance.
    Library code takes a ``ScraperConfig`` argument instead; this accessor is for the CLI.

    Returns:
        ScraperConfig: The application configuration instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = ScraperConfig()
    return _config_instance


def reload_config() -> ScraperConfig:
    """Reload configuration from environment variables.

    Useful for testing or when environment variables change at runtime.

    Returns:
        ScraperConfig: A fresh configuration instance
    """
    global _config_instance
    _config_instance = ScraperConfig()
    return _config_instance
