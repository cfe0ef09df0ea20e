import asyncio
import json
from datetime import date

import pytest

from transcript.actions import (
    ConsoleNotifier,
    ensure_dependencies,
    run_document_export,
    run_record_export,
    run_record_to_document,
)
from transcript.errors import ChannelReadFailure, DependencyUnavailable
from transcript.exporters import export_record
from transcript.layout import LayoutEngine
from transcript.models import Conversation, Role, Turn


def _populate(host) -> None:
    host.add(Role.USER, "# Question")
    host.add(Role.ASSISTANT, ChannelReadFailure("denied"))
    host.add(Role.ASSISTANT, "Answer")


def test_record_export_produces_artifact(host, notifier) -> None:
    _populate(host)

    artifact = asyncio.run(
        run_record_export(
            host.locator, host.clipboard, notifier=notifier, clock=lambda: 42.0
        )
    )

    assert artifact is not None
    assert artifact.filename == "conversation_42000.json"
    assert json.loads(artifact.payload) == {
        "messages": [
            {"role": "user", "content": "# Question"},
            {"role": "assistant", "content": "Answer"},
        ]
    }
    assert notifier.messages == []


@pytest.mark.parametrize("action", ["record", "document"])
def test_empty_host_notifies_once_and_produces_nothing(
    action, host, notifier, printer
) -> None:
    if action == "record":
        call = run_record_export(host.locator, host.clipboard, notifier=notifier)
    else:
        call = run_document_export(
            host.locator,
            host.clipboard,
            notifier=notifier,
            engine=LayoutEngine(printer=printer),
            dependencies=(),
        )

    assert asyncio.run(call) is None
    assert notifier.messages == ["No conversation data found"]
    assert printer.html is None


def test_document_export_renders_recovered_turns(host, notifier, printer) -> None:
    _populate(host)

    artifact = asyncio.run(
        run_document_export(
            host.locator,
            host.clipboard,
            notifier=notifier,
            engine=LayoutEngine(printer=printer),
            dependencies=(),
            generated_on=date(2025, 6, 1),
            clock=lambda: 1.5,
        )
    )

    assert artifact is not None
    assert artifact.filename == "conversation_1500.pdf"
    assert artifact.media_type == "application/pdf"
    assert ">Question<" in printer.html
    assert ">Answer<" in printer.html


def test_missing_dependency_aborts_before_extraction(
    host, notifier, printer
) -> None:
    row = host.add(Role.USER, "hi")

    artifact = asyncio.run(
        run_document_export(
            host.locator,
            host.clipboard,
            notifier=notifier,
            engine=LayoutEngine(printer=printer),
            dependencies=("surely_not_an_installed_module_xyz",),
        )
    )

    assert artifact is None
    assert row.triggers == 0
    assert len(notifier.messages) == 1
    assert "surely_not_an_installed_module_xyz" in notifier.messages[0]
    assert printer.html is None


def test_ensure_dependencies_lists_missing_modules() -> None:
    ensure_dependencies(["json"])
    with pytest.raises(DependencyUnavailable) as excinfo:
        ensure_dependencies(["json", "missing_mod_a", "missing_mod_b"])

    assert excinfo.value.missing == ("missing_mod_a", "missing_mod_b")


def test_record_to_document(tmp_path, notifier, printer) -> None:
    record = tmp_path / "conversation.json"
    record.write_bytes(
        export_record(Conversation.from_turns([Turn(Role.USER, "saved text")]))
    )

    artifact = asyncio.run(
        run_record_to_document(
            record,
            notifier=notifier,
            engine=LayoutEngine(printer=printer),
            dependencies=(),
        )
    )

    assert artifact is not None
    assert ">saved text<" in printer.html


def test_record_to_document_with_no_messages(tmp_path, notifier, printer) -> None:
    record = tmp_path / "empty.json"
    record.write_text('{"messages": []}', encoding="utf-8")

    artifact = asyncio.run(
        run_record_to_document(
            record,
            notifier=notifier,
            engine=LayoutEngine(printer=printer),
            dependencies=(),
        )
    )

    assert artifact is None
    assert notifier.messages == ["No conversation data found"]


def test_console_notifier_prints_and_records(capsys) -> None:
    console = ConsoleNotifier()

    console.notify("No conversation data found")

    assert console.messages == ["No conversation data found"]
    assert "⚠️ No conversation data found" in capsys.readouterr().out


def test_browser_failure_while_printing_notifies(host, notifier) -> None:
    host.add(Role.USER, "hi")

    async def broken_printer(html, setup):
        raise DependencyUnavailable(["chromium"])

    artifact = asyncio.run(
        run_document_export(
            host.locator,
            host.clipboard,
            notifier=notifier,
            engine=LayoutEngine(printer=broken_printer),
            dependencies=(),
        )
    )

    assert artifact is None
    assert len(notifier.messages) == 1
    assert notifier.messages[0].startswith(
        "Required libraries failed to load: chromium"
    )


def test_missing_browser_aborts_before_extraction(
    host, notifier, printer
) -> None:
    row = host.add(Role.USER, "hi")

    async def no_browser():
        raise DependencyUnavailable(["chromium"])

    artifact = asyncio.run(
        run_document_export(
            host.locator,
            host.clipboard,
            notifier=notifier,
            engine=LayoutEngine(printer=printer, preflight=no_browser),
            dependencies=(),
        )
    )

    assert artifact is None
    assert row.triggers == 0
    assert len(notifier.messages) == 1
    assert "chromium" in notifier.messages[0]
    assert printer.html is None


def test_record_to_document_checks_browser_first(
    tmp_path, notifier, printer
) -> None:
    record = tmp_path / "conversation.json"
    record.write_bytes(
        export_record(Conversation.from_turns([Turn(Role.USER, "saved text")]))
    )

    async def no_browser():
        raise DependencyUnavailable(["chromium"])

    artifact = asyncio.run(
        run_record_to_document(
            record,
            notifier=notifier,
            engine=LayoutEngine(printer=printer, preflight=no_browser),
            dependencies=(),
        )
    )

    assert artifact is None
    assert "chromium" in notifier.messages[0]
    assert printer.html is None
