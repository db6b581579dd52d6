# ABOUTME: Tests for the console operator signal
# ABOUTME: Checks the alert output and that resuming waits on a stdin line

import io

import pytest
from rich.console import Console

from heritage_scraper.scraping.operator import ConsoleOperatorSignal


class TestConsoleOperatorSignal:
    @pytest.mark.asyncio
    async def test_alert_shows_message(self):
        buffer = io.StringIO()
        operator = ConsoleOperatorSignal(Console(file=buffer, width=100))

        await operator.alert("Solve the CAPTCHA on https://whc.unesco.org/en/list/211")

        assert "Operator needed" in buffer.getvalue()
        assert "https://whc.unesco.org/en/list/211" in buffer.getvalue()

    @pytest.mark.asyncio
    async def test_wait_for_resume_reads_a_line(self, monkeypatch):
        stdin = io.StringIO("\nleftover\n")
        monkeypatch.setattr("sys.stdin", stdin)
        operator = ConsoleOperatorSignal(Console(file=io.StringIO()))

        await operator.wait_for_resume()

        assert stdin.read() == "leftover\n"
