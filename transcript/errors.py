"""Exception taxonomy for the extraction and export pipeline."""

from __future__ import annotations


class ExportError(Exception):
    """Base class for every failure raised by the export pipeline."""


class ExtractionEmpty(ExportError):
    """Raised when no turn could be recovered from the host rows."""

    def __init__(self, row_count: int = 0) -> None:
        self.row_count = row_count
        super().__init__("No conversation data found")


class ChannelReadFailure(ExportError):
    """Raised when a single row's content cannot be acquired."""


class TokenizeFailure(ExportError):
    """Raised when a turn's markdown cannot be tokenized."""


class DependencyUnavailable(ExportError):
    """Raised when a required collaborator library is not installed."""

    def __init__(self, missing: tuple[str, ...] | list[str]) -> None:
        self.missing = tuple(missing)
        names = ", ".join(self.missing)
        super().__init__(
            f"Required libraries failed to load: {names}. Install them with"
            " pip install -e . && playwright install chromium"
        )


class RecordFormatError(ExportError, ValueError):
    """Raised when a saved conversation record does not match the schema."""


__all__ = [
    "ChannelReadFailure",
    "DependencyUnavailable",
    "ExportError",
    "ExtractionEmpty",
    "RecordFormatError",
    "TokenizeFailure",
]
