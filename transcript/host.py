"""Playwright adapters exposing a live chat page as rows and a channel."""

# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false

from __future__ import annotations

from typing import Any, List, Optional

try:
    from playwright.async_api import (  # type: ignore[import-not-found]
        Error as PlaywrightError,
    )
except ImportError as exc:  # pragma: no cover - surfacing missing dependency
    raise SystemExit(
        "Missing dependency 'playwright'. Install with pip install"
        " playwright && playwright install"
    ) from exc

from .errors import ChannelReadFailure
from .models import Role
from .settings import HostSelectors

CLIPBOARD_READ_SCRIPT = "() => navigator.clipboard.readText()"
CLIPBOARD_PERMISSIONS = ["clipboard-read", "clipboard-write"]


def classify_role(class_attr: Optional[str], user_row_class: str) -> Role:
    """Return ``Role.USER`` when the row carries the user alignment class."""

    classes = (class_attr or "").split()
    return Role.USER if user_row_class in classes else Role.ASSISTANT


class PlaywrightRow:
    """Message row whose copy button writes its text to the clipboard."""

    def __init__(self, role: Role, copy_button: Any) -> None:
        self.role = role
        self._copy_button = copy_button

    async def trigger_copy(self) -> None:
        try:
            await self._copy_button.click()
        except PlaywrightError as exc:
            raise ChannelReadFailure(f"Copy button click failed: {exc}") from exc


class PlaywrightRowLocator:
    """Find message rows on ``page`` that expose a copy button."""

    def __init__(self, page: Any, selectors: Optional[HostSelectors] = None) -> None:
        self.page = page
        self.selectors = selectors or HostSelectors()

    async def locate_rows(self) -> List[PlaywrightRow]:
        rows = self.page.locator(self.selectors.row_selector)
        handles: List[PlaywrightRow] = []
        for index in range(await rows.count()):
            row = rows.nth(index)
            button = row.locator(self.selectors.copy_button_selector).first
            if not await button.count():
                continue
            class_attr = await row.get_attribute("class")
            role = classify_role(class_attr, self.selectors.user_row_class)
            handles.append(PlaywrightRow(role, button))
        return handles


class ClipboardChannel:
    """Read the shared clipboard buffer from inside ``page``."""

    def __init__(self, page: Any) -> None:
        self.page = page

    async def read(self) -> str:
        try:
            text = await self.page.evaluate(CLIPBOARD_READ_SCRIPT)
        except PlaywrightError as exc:
            raise ChannelReadFailure(f"Clipboard read failed: {exc}") from exc
        return str(text or "")


__all__ = [
    "CLIPBOARD_PERMISSIONS",
    "ClipboardChannel",
    "PlaywrightRow",
    "PlaywrightRowLocator",
    "classify_role",
]
