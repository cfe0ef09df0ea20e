"""Typed export settings shared by the extractor, renderer, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

DEFAULT_ROW_SELECTOR = "div.message-row.items-end, div.message-row.items-start"
DEFAULT_COPY_BUTTON_SELECTOR = (
    'button[class*="inline-flex"][class*="h-8"][class*="w-8"]'
    ":has(svg.lucide-copy)"
)
DEFAULT_USER_ROW_CLASS = "items-end"

NUMERIC_FIELDS: tuple[str, ...] = ("base_font_size", "margin", "block_indent")


def _as_number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


def _as_count(name: str, value: Any) -> int:
    number = _as_number(name, value)
    if not number.is_integer():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(number)


@dataclass(slots=True)
class AcquisitionPolicy:
    """Timeout and retry knobs applied to every acquisition channel read.

    ``read_timeout=None`` waits indefinitely, so a stalled host page stalls
    the whole export. ``retries`` re-triggers the same row before skipping it.
    """

    read_timeout: Optional[float] = None
    retries: int = 0

    def __post_init__(self) -> None:
        if self.read_timeout is not None and self.read_timeout <= 0:
            self.read_timeout = None
        if self.retries < 0:
            raise ValueError("retries must be zero or positive")


@dataclass(slots=True)
class HostSelectors:
    """CSS selectors locating message rows and their copy buttons."""

    row_selector: str = DEFAULT_ROW_SELECTOR
    copy_button_selector: str = DEFAULT_COPY_BUTTON_SELECTOR
    user_row_class: str = DEFAULT_USER_ROW_CLASS


@dataclass(slots=True)
class ExportSettings:
    """Flattened configuration for one export invocation."""

    base_font_size: float = 12
    user_color: str = "blue"
    assistant_color: str = "red"
    margin: float = 50
    page_format: str = "Letter"
    block_indent: float = 20
    read_timeout: Optional[float] = None
    read_retries: int = 0
    output_dir: Path = Path("downloads")
    row_selector: str = DEFAULT_ROW_SELECTOR
    copy_button_selector: str = DEFAULT_COPY_BUTTON_SELECTOR
    user_row_class: str = DEFAULT_USER_ROW_CLASS

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(item.name for item in fields(cls))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ExportSettings":
        """Build settings from ``values``; unknown keys raise ``KeyError``."""

        known = set(cls.field_names())
        unknown = sorted(set(values) - known)
        if unknown:
            raise KeyError(", ".join(unknown))
        data = dict(values)
        for name in NUMERIC_FIELDS:
            if name in data:
                data[name] = _as_number(name, data[name])
        if data.get("read_timeout") is not None:
            data["read_timeout"] = _as_number(
                "read_timeout", data["read_timeout"]
            )
        if "read_retries" in data:
            data["read_retries"] = _as_count("read_retries", data["read_retries"])
        if "output_dir" in data:
            data["output_dir"] = Path(data["output_dir"])
        return cls(**data)

    @property
    def acquisition_policy(self) -> AcquisitionPolicy:
        return AcquisitionPolicy(
            read_timeout=self.read_timeout, retries=self.read_retries
        )

    @property
    def selectors(self) -> HostSelectors:
        return HostSelectors(
            row_selector=self.row_selector,
            copy_button_selector=self.copy_button_selector,
            user_row_class=self.user_row_class,
        )


__all__ = [
    "AcquisitionPolicy",
    "DEFAULT_COPY_BUTTON_SELECTOR",
    "DEFAULT_ROW_SELECTOR",
    "DEFAULT_USER_ROW_CLASS",
    "ExportSettings",
    "HostSelectors",
]
