import logging
from datetime import date

from transcript.errors import TokenizeFailure
from transcript.layout import LayoutEngine
from transcript.models import Conversation, Role, Turn
from transcript.renderer import STYLE_POLICIES, DocumentRenderer
from transcript.settings import ExportSettings
from transcript.tokens import TOKEN_TYPES, tokenize


def _texts(engine: LayoutEngine):
    return [item for item in engine.instructions if item.kind == "text"]


def test_every_token_type_has_a_style_policy() -> None:
    assert set(STYLE_POLICIES) == set(TOKEN_TYPES)


def test_heading_is_bold_at_base_size_minus_depth(engine) -> None:
    renderer = DocumentRenderer(engine, settings=ExportSettings(base_font_size=12))

    renderer.render_turn(Turn(Role.USER, "# Title"))

    header, heading = _texts(engine)
    assert heading.text == "Title"
    assert heading.style.bold
    assert heading.style.size == 11


def test_role_header_is_colored_then_reset(engine) -> None:
    renderer = DocumentRenderer(engine)

    renderer.render(
        Conversation.from_turns(
            [Turn(Role.USER, "hi"), Turn(Role.ASSISTANT, "hello")]
        )
    )

    user_header, user_body, bot_header, bot_body = _texts(engine)
    assert (user_header.text, user_header.style.color) == ("User:", "blue")
    assert (bot_header.text, bot_header.style.color) == ("Assistant:", "red")
    assert user_header.style.bold and bot_header.style.bold
    for body in (user_body, bot_body):
        assert body.style.font == "Helvetica"
        assert body.style.color == "black"
        assert body.style.size == 12


def test_spacing_between_tokens_and_turns(engine) -> None:
    renderer = DocumentRenderer(engine)

    renderer.render_turn(Turn(Role.USER, "first\n\nsecond"))

    gaps = [item.amount for item in engine.instructions if item.kind == "space"]
    assert gaps == [0.5, 0.25, 0.25, 1.5]
    assert renderer.advanced_lines == sum(gaps) == 2.5


def test_list_items_are_bulleted_lines(engine) -> None:
    renderer = DocumentRenderer(engine)

    renderer.render_turn(Turn(Role.ASSISTANT, "- apples\n- pears"))

    assert [item.text for item in _texts(engine)[1:]] == ["• apples", "• pears"]


def test_code_and_blockquote_are_indented(engine) -> None:
    renderer = DocumentRenderer(engine)

    renderer.render_turn(Turn(Role.ASSISTANT, "```\nx = 1\n```\n\n> note"))

    code, quote = _texts(engine)[1:]
    assert code.style.font == "Courier"
    assert code.style.size == 10
    assert code.indent == 20
    assert quote.style.italic
    assert quote.style.size == 12
    assert quote.indent == 20


def test_rule_draws_a_line_without_text(engine) -> None:
    renderer = DocumentRenderer(engine)

    renderer.render_turn(Turn(Role.ASSISTANT, "above\n\n---\n\nbelow"))

    kinds = [item.kind for item in engine.instructions]
    assert kinds.count("line") == 1
    assert [item.text for item in _texts(engine)] == ["Assistant:", "above", "below"]


def test_tokenize_failure_falls_back_to_raw_text(engine, caplog) -> None:
    broken = "# not *really* parsed"

    def picky_tokenizer(text: str):
        if text == broken:
            raise TokenizeFailure("boom")
        return tokenize(text)

    renderer = DocumentRenderer(engine, tokenizer=picky_tokenizer)
    conversation = Conversation.from_turns(
        [
            Turn(Role.USER, broken),
            Turn(Role.ASSISTANT, "# Fine"),
        ]
    )

    with caplog.at_level(logging.WARNING, logger="transcript.renderer"):
        renderer.render(conversation)

    texts = _texts(engine)
    assert [item.text for item in texts] == [
        "User:",
        broken,
        "Assistant:",
        "Fine",
    ]
    assert not texts[1].style.bold
    assert texts[1].style.size == 12
    assert texts[3].style.bold
    assert any("Markdown parsing error" in rec.message for rec in caplog.records)


def test_title_block_is_centered(engine) -> None:
    renderer = DocumentRenderer(engine)

    renderer.render_title(date(2024, 3, 7))

    title, subtitle = _texts(engine)
    assert (title.text, title.align, title.style.size) == ("Conversation", "center", 16)
    assert title.style.bold
    assert subtitle.text == "Generated on 3/7/2024"
    assert subtitle.align == "center"
    assert subtitle.style.size == 10


def test_angle_bracket_text_reaches_the_document(engine) -> None:
    renderer = DocumentRenderer(engine)

    renderer.render_turn(Turn(Role.ASSISTANT, "Use Vec<String> when a<b and c>d"))

    assert [item.text for item in _texts(engine)] == [
        "Assistant:",
        "Use Vec<String> when a<b and c>d",
    ]
    assert "Vec&lt;String&gt; when a&lt;b and c&gt;d" in engine.to_html()
