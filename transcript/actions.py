"""User-invocable export actions and their failure notifications."""

from __future__ import annotations

import importlib.util
import logging
import time
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .errors import DependencyUnavailable, ExportError, ExtractionEmpty
from .exporters import (
    Clock,
    ExportArtifact,
    document_artifact,
    export_document,
    read_record_file,
    record_artifact,
)
from .extractor import AcquisitionChannel, RowLocator, extract_conversation
from .layout import LayoutEngine, PageSetup
from .models import Conversation
from .settings import ExportSettings

logger = logging.getLogger(__name__)

DOCUMENT_DEPENDENCIES: tuple[str, ...] = ("markdown", "bs4", "lxml", "playwright")


class Notifier(Protocol):
    """Receives the single blocking message shown when an export aborts."""

    def notify(self, message: str) -> None:
        ...


class ConsoleNotifier:
    """Print failure notifications and remember them for the exit status."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)
        print(f"⚠️ {message}")


def ensure_dependencies(modules: Iterable[str]) -> None:
    """Raise ``DependencyUnavailable`` naming every module that is missing."""

    missing = [name for name in modules if importlib.util.find_spec(name) is None]
    if missing:
        raise DependencyUnavailable(missing)


def _abort(notifier: Notifier, exc: ExportError) -> None:
    logger.info("Export aborted: %s", exc)
    notifier.notify(str(exc))


async def run_record_export(
    locator: RowLocator,
    channel: AcquisitionChannel,
    *,
    notifier: Notifier,
    settings: Optional[ExportSettings] = None,
    clock: Clock = time.time,
) -> Optional[ExportArtifact]:
    """Extract the host conversation and package it as a JSON record."""

    resolved = settings or ExportSettings()
    try:
        conversation = await extract_conversation(
            locator, channel, policy=resolved.acquisition_policy
        )
    except ExtractionEmpty as exc:
        _abort(notifier, exc)
        return None
    return record_artifact(conversation, clock)


def _engine_for(
    settings: ExportSettings, engine: Optional[LayoutEngine]
) -> LayoutEngine:
    return engine or LayoutEngine(PageSetup(settings.page_format, settings.margin))


async def _document_from(
    conversation: Conversation,
    settings: ExportSettings,
    engine: LayoutEngine,
    generated_on: Optional[date],
    clock: Clock,
    notifier: Notifier,
) -> Optional[ExportArtifact]:
    try:
        payload = await export_document(
            conversation,
            settings=settings,
            engine=engine,
            generated_on=generated_on,
        )
    except DependencyUnavailable as exc:
        _abort(notifier, exc)
        return None
    return document_artifact(payload, clock)


async def run_document_export(
    locator: RowLocator,
    channel: AcquisitionChannel,
    *,
    notifier: Notifier,
    settings: Optional[ExportSettings] = None,
    engine: Optional[LayoutEngine] = None,
    dependencies: Iterable[str] = DOCUMENT_DEPENDENCIES,
    generated_on: Optional[date] = None,
    clock: Clock = time.time,
) -> Optional[ExportArtifact]:
    """Extract the host conversation and render it into a PDF artifact.

    Missing collaborators, the browser included, abort before any row is
    triggered.
    """

    resolved = settings or ExportSettings()
    document_engine = _engine_for(resolved, engine)
    try:
        ensure_dependencies(dependencies)
        await document_engine.preflight()
        conversation = await extract_conversation(
            locator, channel, policy=resolved.acquisition_policy
        )
    except (DependencyUnavailable, ExtractionEmpty) as exc:
        _abort(notifier, exc)
        return None
    return await _document_from(
        conversation, resolved, document_engine, generated_on, clock, notifier
    )


async def run_record_to_document(
    record_path: Path,
    *,
    notifier: Notifier,
    settings: Optional[ExportSettings] = None,
    engine: Optional[LayoutEngine] = None,
    dependencies: Iterable[str] = DOCUMENT_DEPENDENCIES,
    generated_on: Optional[date] = None,
    clock: Clock = time.time,
) -> Optional[ExportArtifact]:
    """Render a previously saved JSON record into a PDF artifact."""

    resolved = settings or ExportSettings()
    document_engine = _engine_for(resolved, engine)
    try:
        ensure_dependencies(dependencies)
        await document_engine.preflight()
    except DependencyUnavailable as exc:
        _abort(notifier, exc)
        return None

    conversation = read_record_file(record_path)
    if not conversation:
        _abort(notifier, ExtractionEmpty())
        return None
    return await _document_from(
        conversation, resolved, document_engine, generated_on, clock, notifier
    )


__all__ = [
    "ConsoleNotifier",
    "DOCUMENT_DEPENDENCIES",
    "Notifier",
    "ensure_dependencies",
    "run_document_export",
    "run_record_export",
    "run_record_to_document",
]
