"""Styled rendering of a conversation onto a ``LayoutEngine``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

from .errors import TokenizeFailure
from .layout import Align, LayoutEngine
from .models import Conversation, Role, Turn
from .settings import ExportSettings
from .tokens import (
    Blockquote,
    BulletList,
    CodeBlock,
    Heading,
    Other,
    Paragraph,
    Rule,
    Token,
    tokenize,
)

logger = logging.getLogger(__name__)

BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
ITALIC_FONT = "Helvetica-Oblique"
MONO_FONT = "Courier"
TEXT_COLOR = "black"
BULLET = "•"

TOKEN_GAP = 0.25
HEADER_GAP = 0.5
TURN_GAP = 1.5
TITLE_GAP = 2
TITLE_SIZE = 16
SUBTITLE_SIZE = 10
TITLE_TEXT = "Conversation"

Tokenizer = Callable[[str], Sequence[Token]]


@dataclass(slots=True)
class RenderCursor:
    """Active style plus how far the renderer has advanced the flow."""

    font: str = BODY_FONT
    size: float = 12
    color: str = TEXT_COLOR
    align: Align = "left"
    indent: float = 0
    advanced_lines: float = 0


class DocumentRenderer:
    """Emit layout instructions for each turn following the style policy."""

    def __init__(
        self,
        engine: LayoutEngine,
        *,
        settings: Optional[ExportSettings] = None,
        tokenizer: Tokenizer = tokenize,
    ) -> None:
        self.engine = engine
        self.settings = settings or ExportSettings()
        self.tokenizer = tokenizer
        self._cursor = RenderCursor(size=self.settings.base_font_size)

    @property
    def base_size(self) -> float:
        return self.settings.base_font_size

    @property
    def block_indent(self) -> float:
        return self.settings.block_indent

    @property
    def advanced_lines(self) -> float:
        """Total blank lines the renderer has moved down so far."""

        return self._cursor.advanced_lines

    def style(
        self,
        *,
        font: str = BODY_FONT,
        size: Optional[float] = None,
        color: str = TEXT_COLOR,
        align: Align = "left",
        indent: float = 0,
    ) -> None:
        cursor = self._cursor
        cursor.font = font
        cursor.size = self.base_size if size is None else size
        cursor.color = color
        cursor.align = align
        cursor.indent = indent
        self.engine.set_font(cursor.font).set_size(cursor.size).set_color(
            cursor.color
        )

    def write(self, text: str) -> None:
        self.engine.write_text(
            text, align=self._cursor.align, indent=self._cursor.indent
        )

    def advance(self, lines: float) -> None:
        self._cursor.advanced_lines += lines
        self.engine.move_down(lines)

    def rule(self) -> None:
        self.engine.draw_line(color="gray", width=1, dash=(5, 5))

    def render_title(self, generated_on: date) -> None:
        """Write the centered title and generation date."""

        self.style(font=BOLD_FONT, size=TITLE_SIZE, align="center")
        self.write(TITLE_TEXT)
        self.style(size=SUBTITLE_SIZE, align="center")
        self.write(
            f"Generated on {generated_on.month}/{generated_on.day}"
            f"/{generated_on.year}"
        )
        self.advance(TITLE_GAP)

    def render_header(self, role: Role) -> None:
        color = (
            self.settings.user_color
            if role is Role.USER
            else self.settings.assistant_color
        )
        self.style(font=BOLD_FONT, color=color)
        self.write(role.label)
        self.style()
        self.advance(HEADER_GAP)

    def render_token(self, token: Token) -> None:
        policy = STYLE_POLICIES[type(token)]
        policy(self, token)
        self.advance(TOKEN_GAP)

    def render_turn(self, turn: Turn) -> None:
        self.render_header(turn.role)
        try:
            tokens = self.tokenizer(turn.content)
        except TokenizeFailure as exc:
            logger.warning(
                "⚠️ Markdown parsing error for %s turn; writing raw text: %s",
                turn.role.value,
                exc,
            )
            self.style()
            self.write(turn.content)
        else:
            for token in tokens:
                self.render_token(token)
        self.advance(TURN_GAP)

    def render(self, conversation: Conversation) -> None:
        for turn in conversation:
            self.render_turn(turn)


def _render_heading(renderer: DocumentRenderer, token: Heading) -> None:
    renderer.style(font=BOLD_FONT, size=renderer.base_size - token.depth)
    renderer.write(token.text)


def _render_paragraph(renderer: DocumentRenderer, token: Paragraph) -> None:
    renderer.style()
    renderer.write(token.text)


def _render_list(renderer: DocumentRenderer, token: BulletList) -> None:
    renderer.style()
    for item in token.items:
        renderer.write(f"{BULLET} {item}")


def _render_code(renderer: DocumentRenderer, token: CodeBlock) -> None:
    renderer.style(
        font=MONO_FONT,
        size=renderer.base_size - 2,
        indent=renderer.block_indent,
    )
    renderer.write(token.text)


def _render_blockquote(renderer: DocumentRenderer, token: Blockquote) -> None:
    renderer.style(font=ITALIC_FONT, indent=renderer.block_indent)
    renderer.write(token.text)


def _render_rule(renderer: DocumentRenderer, token: Rule) -> None:
    renderer.rule()


def _render_other(renderer: DocumentRenderer, token: Other) -> None:
    renderer.style()
    renderer.write(token.text or "")


STYLE_POLICIES: dict[type, Callable[[DocumentRenderer, Token], None]] = {
    Heading: _render_heading,
    Paragraph: _render_paragraph,
    BulletList: _render_list,
    CodeBlock: _render_code,
    Blockquote: _render_blockquote,
    Rule: _render_rule,
    Other: _render_other,
}


__all__ = [
    "DocumentRenderer",
    "RenderCursor",
    "STYLE_POLICIES",
    "TITLE_TEXT",
    "Tokenizer",
]
