# ABOUTME: Main CLI application entry point using asyncclick for native async support
# ABOUTME: Provides commands to run the resumable crawl and inspect output and logging state

from pathlib import Path

import asyncclick as click
from rich.console import Console
from rich.panel import Panel

from heritage_scraper.config import get_config
from heritage_scraper.core.pipeline import ScrapePipeline
from heritage_scraper.scraping.base import PersistenceError, ScrapeAbortedError
from heritage_scraper.scraping.resume import load_scraped_links
from heritage_scraper.scraping.summarizer import GeminiSummarizer
from heritage_scraper.utils.logging import LoggingMode, configure_logging, get_logging_status
from heritage_scraper.utils.rich_tables import (
    create_logging_status_table,
    create_resume_status_table,
    create_run_summary_table,
    print_rich_table,
)

console = Console()


@click.command()
@click.option("--index-url", help="Index page listing the site links")
@click.option("--output", "output_path", type=click.Path(dir_okay=False, path_type=Path), help="CSV output store")
@click.option("--headless/--headed", default=None, help="Run the browser without a window")
@click.option("--missing-field-policy", type=click.Choice(["skip", "abort"]), help="Skip or abort on incomplete pages")
@click.option(
    "--summary-failure-policy", type=click.Choice(["fallback", "abort"]), help="Fallback or abort on API failure"
)
@click.option("--image-policy", type=click.Choice(["hero", "gallery"]), help="Collect one hero image or a gallery")
@click.pass_context
async def scrape(
    ctx,
    index_url: str | None,
    output_path: Path | None,
    headless: bool | None,
    missing_field_policy: str | None,
    summary_failure_policy: str | None,
    image_policy: str | None,
):
    """
    🏛️ Crawl the site list and append every new site to the CSV output.

    Sites already present in the output file are skipped, so an interrupted
    run can simply be started again.
    """
    json_output = ctx.obj["json_output"]
    overrides = {
        "index_url": index_url,
        "output_path": output_path,
        "headless": headless,
        "missing_field_policy": missing_field_policy,
        "summary_failure_policy": summary_failure_policy,
        "image_policy": image_policy,
    }
    config = get_config().model_copy(update={key: value for key, value in overrides.items() if value is not None})

    if not json_output:
        console.print(
            Panel.fit(
                f"🏛️ [bold cyan]Heritage Scraper[/bold cyan]\nIndex: {config.index_url}\nOutput: {config.output_path}",
                border_style="magenta",
            )
        )

    summarizer = GeminiSummarizer.from_config(config)
    pipeline = ScrapePipeline(config, summarizer)

    try:
        summary = await pipeline.run()
    except ScrapeAbortedError as e:
        if not json_output:
            console.print(f"[red]❌ Scrape aborted: {e}[/red]")
        ctx.exit(1)
    finally:
        await summarizer.close()

    if not json_output:
        print_rich_table(console, create_run_summary_table(summary))


@click.command()
@click.option("--output", "output_path", type=click.Path(dir_okay=False, path_type=Path), help="CSV output store")
@click.pass_context
def status(ctx, output_path: Path | None):
    """
    💾 Show how many sites the output store already holds.
    """
    path = output_path or get_config().output_path
    try:
        scraped = load_scraped_links(path)
    except PersistenceError as e:
        console.print(f"[red]❌ {e}[/red]")
        ctx.exit(1)
    print_rich_table(console, create_resume_status_table(str(path), len(scraped)))


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show current logging configuration and status.
    """
    logging_state = get_logging_status()
    print_rich_table(console, create_logging_status_table(logging_state))


def _initialize_logging(json_output: bool, log_level: str | None = None, log_file: str | None = None) -> None:
    """Initialize logging configuration."""
    config = get_config()
    mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE

    # Use config defaults when CLI parameters are not provided
    final_log_level = log_level or config.log_level
    final_log_file = log_file or (str(config.log_file) if config.log_file else None)

    configure_logging(mode=mode, log_level=final_log_level, log_file=final_log_file)


@click.group(invoke_without_command=True)
@click.option("--json", is_flag=True, help="Output structured JSON logs instead of rich interface")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json: bool, log_level: str | None, log_file: str | None):
    """
    🏛️ Heritage Scraper - resumable crawler for heritage site listings

    Collects each site's name, summarized description, coordinates and images
    into a CSV file, one record at a time.
    """
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json

    _initialize_logging(json, log_level, log_file)

    # Show help if no command provided
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


app.add_command(scrape)
app.add_command(status)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
