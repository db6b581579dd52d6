# ABOUTME: Shared utilities - logging setup, navigation retries and rich table rendering
# ABOUTME: Cross-cutting helpers used by the scraping stages and the CLI
