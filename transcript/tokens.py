"""Block-level markdown tokens and the tokenizer that produces them.

Markdown is converted to HTML with Python-Markdown, then the top-level block
elements are walked with BeautifulSoup and mapped onto a closed set of token
variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Union

from .errors import DependencyUnavailable, TokenizeFailure

MARKDOWN_EXTENSIONS: tuple[str, ...] = ("fenced_code", "sane_lists", "tables")
HEADING_TAGS = {f"h{depth}": depth for depth in range(1, 7)}
RAW_HTML_PREPROCESSORS: tuple[str, ...] = ("html_block",)
RAW_HTML_INLINE_PATTERNS: tuple[str, ...] = ("html",)


@dataclass(frozen=True, slots=True)
class Heading:
    depth: int
    text: str


@dataclass(frozen=True, slots=True)
class Paragraph:
    text: str


@dataclass(frozen=True, slots=True)
class BulletList:
    items: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CodeBlock:
    text: str


@dataclass(frozen=True, slots=True)
class Blockquote:
    text: str


@dataclass(frozen=True, slots=True)
class Rule:
    pass


@dataclass(frozen=True, slots=True)
class Other:
    text: str = ""


Token = Union[Heading, Paragraph, BulletList, CodeBlock, Blockquote, Rule, Other]

TOKEN_TYPES: tuple[type, ...] = (
    Heading,
    Paragraph,
    BulletList,
    CodeBlock,
    Blockquote,
    Rule,
    Other,
)


def _element_to_token(element: Any) -> Token:
    name = element.name
    if name in HEADING_TAGS:
        return Heading(depth=HEADING_TAGS[name], text=element.get_text().strip())
    if name == "p":
        return Paragraph(text=element.get_text().strip())
    if name in ("ul", "ol"):
        items = tuple(
            item.get_text().strip()
            for item in element.find_all("li", recursive=False)
        )
        return BulletList(items=items)
    if name == "pre":
        return CodeBlock(text=element.get_text().rstrip("\n"))
    if name == "blockquote":
        return Blockquote(text=element.get_text().strip())
    if name == "hr":
        return Rule()
    return Other(text=element.get_text().strip())


def _build_processor(markdown: Any) -> Any:
    """Return a Markdown processor that treats raw HTML as literal text."""

    processor = markdown.Markdown(extensions=list(MARKDOWN_EXTENSIONS))
    for name in RAW_HTML_PREPROCESSORS:
        if name in processor.preprocessors:
            processor.preprocessors.deregister(name)
    for name in RAW_HTML_INLINE_PATTERNS:
        if name in processor.inlinePatterns:
            processor.inlinePatterns.deregister(name)
    return processor


def tokenize(text: str) -> List[Token]:
    """Split ``text`` into ordered block tokens.

    Angle brackets in prose (``a<b``, ``Vec<String>``) are kept as text
    rather than parsed as HTML tags.

    Raises ``TokenizeFailure`` when the markdown cannot be converted and
    ``DependencyUnavailable`` when the parsing libraries are missing.
    """

    try:
        import markdown
        from bs4 import BeautifulSoup, NavigableString
    except ModuleNotFoundError as exc:
        raise DependencyUnavailable([exc.name or "markdown"]) from exc

    try:
        html = _build_processor(markdown).convert(text)
        soup = BeautifulSoup(html, "lxml")
    except Exception as exc:  # library-controlled failure modes
        raise TokenizeFailure(f"Markdown parsing error: {exc}") from exc

    root = soup.body if soup.body is not None else soup
    tokens: List[Token] = []
    for child in root.children:
        if isinstance(child, NavigableString):
            stray = str(child).strip()
            if stray:
                tokens.append(Other(text=stray))
            continue
        tokens.append(_element_to_token(child))
    return tokens


__all__ = [
    "Blockquote",
    "BulletList",
    "CodeBlock",
    "Heading",
    "MARKDOWN_EXTENSIONS",
    "Other",
    "Paragraph",
    "Rule",
    "TOKEN_TYPES",
    "Token",
    "tokenize",
]
