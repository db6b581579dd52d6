# ABOUTME: Core orchestration layer for the crawl
# ABOUTME: Sequences the scraping stages into one resumable run

from .pipeline import ScrapePipeline

__all__ = ["ScrapePipeline"]
