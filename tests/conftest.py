"""Shared fakes for the extraction and rendering tests."""

from __future__ import annotations

from typing import Optional, Sequence, Union

import pytest

from transcript.layout import LayoutEngine, PageSetup
from transcript.models import Role

Reading = Union[str, Exception]


class FakeRow:
    """Row whose copy action loads the next reading into the shared buffer."""

    def __init__(
        self, role: Role, readings: Sequence[Reading], buffer: "FakeClipboard"
    ) -> None:
        self.role = role
        self._readings = list(readings)
        self._buffer = buffer
        self.triggers = 0

    async def trigger_copy(self) -> None:
        self.triggers += 1
        reading = self._readings.pop(0) if self._readings else ""
        self._buffer.load(reading)


class FakeClipboard:
    """Single shared buffer; reading raises whatever the last trigger loaded."""

    def __init__(self) -> None:
        self._current: Reading = ""
        self.reads = 0

    def load(self, reading: Reading) -> None:
        self._current = reading

    async def read(self) -> str:
        self.reads += 1
        if isinstance(self._current, Exception):
            raise self._current
        return self._current


class FakeLocator:
    def __init__(self, rows: Sequence[FakeRow]) -> None:
        self.rows = list(rows)

    async def locate_rows(self) -> list[FakeRow]:
        return self.rows


class FakeHost:
    """Builds rows sharing one clipboard from ``(role, reading...)`` specs."""

    def __init__(self) -> None:
        self.clipboard = FakeClipboard()
        self.rows: list[FakeRow] = []

    def add(self, role: Role, *readings: Reading) -> FakeRow:
        row = FakeRow(role, readings, self.clipboard)
        self.rows.append(row)
        return row

    @property
    def locator(self) -> FakeLocator:
        return FakeLocator(self.rows)


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


class CapturingPrinter:
    """Stands in for Chromium: returns the HTML it was asked to print."""

    def __init__(self) -> None:
        self.html: Optional[str] = None
        self.setup: Optional[PageSetup] = None

    async def __call__(self, html: str, setup: PageSetup) -> bytes:
        self.html = html
        self.setup = setup
        return html.encode("utf-8")


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def printer() -> CapturingPrinter:
    return CapturingPrinter()


@pytest.fixture
def engine(printer: CapturingPrinter) -> LayoutEngine:
    return LayoutEngine(PageSetup(), printer=printer)
