"""Export a chat transcript from a live browser page as JSON or PDF."""

# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false
# pyright: reportUnknownArgumentType=false

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

try:
    from playwright.async_api import (  # type: ignore[import-not-found]
        async_playwright,
    )
except ImportError as exc:
    raise SystemExit(
        "Missing dependency 'playwright'. Install with pip install"
        " playwright && playwright install"
    ) from exc

from config_loader import ConfigError, resolve_export_settings
from transcript.actions import (
    ConsoleNotifier,
    run_document_export,
    run_record_export,
    run_record_to_document,
)
from transcript.errors import RecordFormatError
from transcript.exporters import ExportArtifact, save_artifact
from transcript.extractor import AcquisitionChannel, RowLocator
from transcript.host import (
    CLIPBOARD_PERMISSIONS,
    ClipboardChannel,
    PlaywrightRowLocator,
)
from transcript.settings import ExportSettings

HostAction = Callable[
    [RowLocator, AcquisitionChannel], Awaitable[Optional[ExportArtifact]]
]


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments for the conversation exporter."""

    parser = argparse.ArgumentParser(
        description=(
            "Extract a chat conversation by replaying its copy buttons and"
            " save it as a JSON record or a styled PDF."
        )
    )
    parser.add_argument("--config", help="Path to config JSON file.")
    parser.add_argument(
        "--output-dir", help="Override the directory receiving exports."
    )
    parser.add_argument(
        "--read-timeout",
        type=float,
        help="Seconds to wait for each clipboard read (default: no limit).",
    )
    parser.add_argument(
        "--read-retries",
        type=int,
        help="Extra attempts per row after a failed read (default: 0).",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, summary in (
        ("record", "Save the conversation as a JSON record."),
        ("document", "Save the conversation as a PDF document."),
    ):
        command = subparsers.add_parser(name, help=summary)
        command.add_argument("--url", required=True, help="Chat page URL.")
        command.add_argument(
            "--cdp-endpoint",
            help=(
                "Attach to a running Chromium (e.g. http://localhost:9222)"
                " instead of launching one."
            ),
        )
        command.add_argument(
            "--headed",
            action="store_true",
            help="Show the launched browser window.",
        )

    from_record = subparsers.add_parser(
        "from-record", help="Render a saved JSON record into a PDF."
    )
    from_record.add_argument("record", help="Path to a conversation JSON file.")
    return parser.parse_args(argv)


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _find_open_page(context: Any, url: str) -> Any:
    for page in context.pages:
        if page.url.startswith(url):
            return page
    return None


async def run_on_host_page(
    args: argparse.Namespace,
    settings: ExportSettings,
    action: HostAction,
) -> Optional[ExportArtifact]:
    """Open ``args.url`` in Chromium and run ``action`` against the page."""

    async with async_playwright() as playwright_context:
        chromium = playwright_context.chromium
        if args.cdp_endpoint:
            browser: Any = await chromium.connect_over_cdp(args.cdp_endpoint)
            context: Any = (
                browser.contexts[0]
                if browser.contexts
                else await browser.new_context()
            )
        else:
            browser = await chromium.launch(headless=not args.headed)
            context = await browser.new_context()

        try:
            await context.grant_permissions(
                CLIPBOARD_PERMISSIONS, origin=_origin(args.url)
            )
            page = _find_open_page(context, args.url)
            if page is None:
                page = await context.new_page()
                print(f"Opening {args.url}")
                await page.goto(args.url)
                await page.wait_for_load_state("networkidle")
            locator = PlaywrightRowLocator(page, settings.selectors)
            channel = ClipboardChannel(page)
            return await action(locator, channel)
        finally:
            if not args.cdp_endpoint:
                await browser.close()


async def run_command(
    args: argparse.Namespace, settings: ExportSettings, notifier: ConsoleNotifier
) -> Optional[ExportArtifact]:
    """Dispatch the parsed subcommand to its export action."""

    if args.command == "from-record":
        return await run_record_to_document(
            Path(args.record), notifier=notifier, settings=settings
        )

    runner = (
        run_record_export if args.command == "record" else run_document_export
    )

    async def action(
        locator: RowLocator, channel: AcquisitionChannel
    ) -> Optional[ExportArtifact]:
        return await runner(
            locator, channel, notifier=notifier, settings=settings
        )

    return await run_on_host_page(args, settings, action)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the conversation export CLI."""

    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = resolve_export_settings(
            args.config,
            output_dir=args.output_dir,
            read_timeout=args.read_timeout,
            read_retries=args.read_retries,
        )
    except ConfigError as exc:
        raise SystemExit(f"Config error: {exc}") from exc

    notifier = ConsoleNotifier()
    try:
        artifact = asyncio.run(run_command(args, settings, notifier))
    except (RecordFormatError, OSError) as exc:
        raise SystemExit(f"Export failed: {exc}") from exc

    if artifact is None:
        return 1
    save_artifact(artifact, settings.output_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
