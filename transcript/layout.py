"""Imperative document builder that prints a flowing HTML body to PDF.

Text is accumulated as styled HTML blocks; ``finalize`` hands the markup to a
headless Chromium through Playwright, which takes care of pagination.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from html import escape
from typing import Awaitable, Callable, Literal, Optional

from .errors import DependencyUnavailable

Align = Literal["left", "center", "right", "justify"]

LINE_HEIGHT_RATIO = 1.2
POINTS_PER_INCH = 72

SANS_STACK = "Helvetica, Arial, sans-serif"
MONO_STACK = "'Courier New', Courier, monospace"

# font name -> (css family, weight, style)
FONTS: dict[str, tuple[str, str, str]] = {
    "Helvetica": (SANS_STACK, "normal", "normal"),
    "Helvetica-Bold": (SANS_STACK, "bold", "normal"),
    "Helvetica-Oblique": (SANS_STACK, "normal", "italic"),
    "Courier": (MONO_STACK, "normal", "normal"),
}


@dataclass(frozen=True, slots=True)
class PageSetup:
    """Paper format and uniform margin (in points) for the printed PDF."""

    format: str = "Letter"
    margin: float = 50

    def margin_css(self) -> dict[str, str]:
        inches = f"{self.margin / POINTS_PER_INCH:.4f}in"
        return {"top": inches, "right": inches, "bottom": inches, "left": inches}


@dataclass(frozen=True, slots=True)
class TextStyle:
    font: str = "Helvetica"
    size: float = 12
    color: str = "black"

    @property
    def bold(self) -> bool:
        return FONTS[self.font][1] == "bold"

    @property
    def italic(self) -> bool:
        return FONTS[self.font][2] == "italic"

    @property
    def line_height(self) -> float:
        return self.size * LINE_HEIGHT_RATIO

    def css(self) -> str:
        family, weight, style = FONTS[self.font]
        return (
            f"font-family: {family}; font-size: {self.size:g}pt;"
            f" font-weight: {weight}; font-style: {style};"
            f" color: {self.color};"
        )


@dataclass(frozen=True, slots=True)
class LayoutInstruction:
    """Record of a single call made against the engine."""

    kind: Literal["text", "space", "line", "page"]
    text: str = ""
    style: Optional[TextStyle] = None
    align: Align = "left"
    indent: float = 0
    amount: float = 0


PdfPrinter = Callable[[str, PageSetup], Awaitable[bytes]]
Preflight = Callable[[], Awaitable[None]]


def _load_playwright():
    try:
        from playwright.async_api import (
            Error as PlaywrightError,
            async_playwright,
        )
    except ModuleNotFoundError as exc:
        raise DependencyUnavailable(["playwright"]) from exc
    return PlaywrightError, async_playwright


async def ensure_chromium() -> None:
    """Launch and close a headless Chromium; raise if it cannot start."""

    PlaywrightError, async_playwright = _load_playwright()
    async with async_playwright() as playwright_context:
        try:
            browser = await playwright_context.chromium.launch(headless=True)
        except PlaywrightError as exc:
            raise DependencyUnavailable(["chromium"]) from exc
        await browser.close()


async def print_html_to_pdf(html: str, setup: PageSetup) -> bytes:
    """Render ``html`` to PDF bytes using a headless Chromium."""

    PlaywrightError, async_playwright = _load_playwright()
    async with async_playwright() as playwright_context:
        try:
            browser = await playwright_context.chromium.launch(headless=True)
        except PlaywrightError as exc:
            raise DependencyUnavailable(["chromium"]) from exc
        try:
            page = await browser.new_page()
            await page.set_content(html, wait_until="load")
            return await page.pdf(
                format=setup.format,
                margin=setup.margin_css(),
                print_background=True,
            )
        finally:
            await browser.close()


class LayoutEngine:
    """Collects styled blocks and finalizes them into a PDF byte stream."""

    def __init__(
        self,
        setup: Optional[PageSetup] = None,
        *,
        printer: Optional[PdfPrinter] = None,
        style: Optional[TextStyle] = None,
        preflight: Optional[Preflight] = None,
    ) -> None:
        self.setup = setup or PageSetup()
        if preflight is None and printer is None:
            preflight = ensure_chromium
        self._printer = printer or print_html_to_pdf
        self._preflight = preflight
        self._style = style or TextStyle()
        self._blocks: list[str] = []
        self.instructions: list[LayoutInstruction] = []

    @property
    def style(self) -> TextStyle:
        return self._style

    def set_font(self, font: str) -> "LayoutEngine":
        if font not in FONTS:
            raise ValueError(f"Unknown font: {font}")
        self._style = replace(self._style, font=font)
        return self

    def set_size(self, size: float) -> "LayoutEngine":
        self._style = replace(self._style, size=size)
        return self

    def set_color(self, color: str) -> "LayoutEngine":
        self._style = replace(self._style, color=color)
        return self

    def write_text(
        self, text: str, *, align: Align = "left", indent: float = 0
    ) -> "LayoutEngine":
        style = self._style
        self.instructions.append(
            LayoutInstruction(
                kind="text", text=text, style=style, align=align, indent=indent
            )
        )
        self._blocks.append(
            f'<p class="block" style="{style.css()} text-align: {align};'
            f' margin-left: {indent:g}pt;">{escape(text)}</p>'
        )
        return self

    def move_down(self, lines: float = 1) -> "LayoutEngine":
        height = lines * self._style.line_height
        self.instructions.append(LayoutInstruction(kind="space", amount=lines))
        self._blocks.append(
            f'<div class="gap" style="height: {height:g}pt;"></div>'
        )
        return self

    def draw_line(
        self,
        *,
        color: str = "gray",
        width: float = 1,
        dash: Optional[tuple[float, float]] = (5, 5),
    ) -> "LayoutEngine":
        """Draw a horizontal rule; ``dash`` is an ``(on, off)`` length in points."""

        self.instructions.append(LayoutInstruction(kind="line"))
        if dash:
            on, off = dash
            paint = (
                f"repeating-linear-gradient(to right, {color} 0pt {on:g}pt,"
                f" transparent {on:g}pt {on + off:g}pt)"
            )
        else:
            paint = color
        self._blocks.append(
            f'<div class="rule" style="height: {width:g}pt;'
            f' background: {paint};"></div>'
        )
        return self

    def new_page(self) -> "LayoutEngine":
        self.instructions.append(LayoutInstruction(kind="page"))
        self._blocks.append('<div class="page-break"></div>')
        return self

    def to_html(self) -> str:
        body = "\n".join(self._blocks)
        return (
            "<!DOCTYPE html>\n"
            '<html><head><meta charset="utf-8"><style>\n'
            "body { margin: 0; }\n"
            ".block { margin-top: 0; margin-bottom: 0;"
            f" line-height: {LINE_HEIGHT_RATIO}; white-space: pre-wrap;"
            " overflow-wrap: anywhere; }\n"
            ".rule { width: 100%; }\n"
            ".page-break { break-after: page; }\n"
            "</style></head><body>\n"
            f"{body}\n"
            "</body></html>\n"
        )

    async def preflight(self) -> None:
        """Check the printer backend can start before any work is done."""

        if self._preflight is not None:
            await self._preflight()

    async def finalize(self) -> bytes:
        """Print the accumulated document and return the PDF bytes."""

        return await self._printer(self.to_html(), self.setup)


__all__ = [
    "Align",
    "FONTS",
    "LayoutEngine",
    "LayoutInstruction",
    "PageSetup",
    "PdfPrinter",
    "Preflight",
    "TextStyle",
    "ensure_chromium",
    "print_html_to_pdf",
]
