# ABOUTME: Appends each finished site record to the CSV output store as soon as it exists
# ABOUTME: Writes the header on first use, refuses foreign headers and fsyncs every row

import csv
import io
import os
from pathlib import Path
from typing import BinaryIO

from heritage_scraper.models import CSV_HEADER, EntityRecord
from heritage_scraper.scraping.base import PersistenceError
from heritage_scraper.utils.logging import get_logger


def render_row(values: list[str]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(values)
    return buffer.getvalue()


class CsvRecordWriter:
    """Owns the output file handle for one run.

    Use as an async context manager; ``append`` may only be called while open.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.records_written = 0
        self._handle: BinaryIO | None = None
        self.logger = get_logger(__name__)

    async def __aenter__(self) -> "CsvRecordWriter":
        self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Open the store for appending, writing the header into a new or empty file.

        Raises:
            PersistenceError: If the file cannot be opened or its header is not ``CSV_HEADER``
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            needs_header = not self.path.exists() or self.path.stat().st_size == 0
            if not needs_header:
                self._check_header()
            self._handle = self.path.open("ab", buffering=0)
            if needs_header:
                self._write(render_row(CSV_HEADER))
                self.logger.info("Created output store", path=str(self.path))
        except OSError as e:
            self.close()
            raise PersistenceError(f"Cannot open output store {self.path}: {e}") from e

    def append(self, record: EntityRecord) -> None:
        """Persist one record immediately.

        The row is rendered completely before anything touches the file. A failed
        write is rolled back so no partial row is left behind.
        """
        row = render_row(record.to_row())
        try:
            self._write(row)
        except OSError as e:
            raise PersistenceError(f"Failed to append {record.source_link} to {self.path}: {e}") from e

        self.records_written += 1
        self.logger.debug("Record appended", link=record.source_link, records_written=self.records_written)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _check_header(self) -> None:
        try:
            with self.path.open(newline="", encoding="utf-8") as handle:
                header = next(csv.reader(handle), None)
        except (UnicodeDecodeError, csv.Error) as e:
            raise PersistenceError(f"Output store {self.path} is not a readable CSV file: {e}") from e

        if header != CSV_HEADER:
            raise PersistenceError(
                f"Output store {self.path} has header {header!r}, expected {CSV_HEADER!r}; "
                "move it aside or choose another --output"
            )

    def _write(self, text: str) -> None:
        if self._handle is None:
            raise PersistenceError("Output store is not open")

        fd = self._handle.fileno()
        offset = os.fstat(fd).st_size
        remaining = memoryview(text.encode("utf-8"))
        try:
            while remaining:
                written = self._handle.write(remaining)
                remaining = remaining[written:]
            os.fsync(fd)
        except OSError:
            self._truncate(fd, offset)
            raise

    def _truncate(self, fd: int, offset: int) -> None:
        try:
            os.ftruncate(fd, offset)
        except OSError as e:
            self.logger.error("Could not roll back partial row", path=str(self.path), offset=offset, error=str(e))
