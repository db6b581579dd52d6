# ABOUTME: Resumable crawler for heritage site listings
# ABOUTME: Scrapes index and detail pages into a CSV of normalized site records

__version__ = "0.1.0"
