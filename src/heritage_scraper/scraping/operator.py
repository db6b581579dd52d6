# ABOUTME: Console implementation of the operator signal used during CAPTCHA pauses
# ABOUTME: Rings the terminal bell, shows a rich panel and waits for ENTER without a timeout

import asyncio
import sys

from rich.console import Console
from rich.panel import Panel

from heritage_scraper.utils.logging import get_logger


class ConsoleOperatorSignal:
    """Asks the person at the terminal to solve a verification wall in the browser window."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)
        self.logger = get_logger(__name__)

    async def alert(self, message: str) -> None:
        self.console.bell()
        self.console.print(Panel(message, title="⚠️  Operator needed", border_style="bold red"))
        self.logger.warning("Operator alerted", message=message)

    async def wait_for_resume(self) -> None:
        self.console.print("[bold yellow]Press ENTER once the page is usable again...[/bold yellow]")
        # Blocking read in a worker thread, no timeout
        await asyncio.to_thread(sys.stdin.readline)
        self.logger.info("Operator resumed the crawl")
