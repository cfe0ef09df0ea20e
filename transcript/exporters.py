"""Turn a conversation into record and document byte payloads."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Union

from .errors import RecordFormatError
from .layout import LayoutEngine, PageSetup
from .models import Conversation
from .renderer import DocumentRenderer
from .settings import ExportSettings

FILENAME_PREFIX = "conversation"
RECORD_EXTENSION = "json"
DOCUMENT_EXTENSION = "pdf"
RECORD_MEDIA_TYPE = "application/json"
DOCUMENT_MEDIA_TYPE = "application/pdf"

Clock = Callable[[], float]


@dataclass(slots=True)
class ExportArtifact:
    """Finished export payload ready to be written out."""

    filename: str
    payload: bytes
    media_type: str

    @property
    def kind(self) -> str:
        return "PDF" if self.media_type == DOCUMENT_MEDIA_TYPE else "JSON"


def build_filename(extension: str, clock: Clock = time.time) -> str:
    """Return ``conversation_<epoch-millis>.<extension>``."""

    return f"{FILENAME_PREFIX}_{int(clock() * 1000)}.{extension}"


def export_record(conversation: Conversation) -> bytes:
    """Serialize ``conversation`` as the pretty-printed record payload."""

    data = {"messages": conversation.to_records()}
    return json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8")


def load_record(payload: Union[bytes, str]) -> Conversation:
    """Parse a record payload back into a ``Conversation``."""

    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise RecordFormatError(f"Record is not valid JSON: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("messages"), list):
        raise RecordFormatError("Record must be an object with a messages list")
    return Conversation.from_records(data["messages"])


def read_record_file(path: Path) -> Conversation:
    return load_record(Path(path).read_bytes())


async def export_document(
    conversation: Conversation,
    *,
    settings: Optional[ExportSettings] = None,
    engine: Optional[LayoutEngine] = None,
    renderer: Optional[DocumentRenderer] = None,
    generated_on: Optional[date] = None,
) -> bytes:
    """Render the title block and every turn, then finalize the PDF."""

    resolved = settings or ExportSettings()
    if renderer is not None:
        engine = renderer.engine
    elif engine is None:
        engine = LayoutEngine(
            PageSetup(format=resolved.page_format, margin=resolved.margin)
        )
    if renderer is None:
        renderer = DocumentRenderer(engine, settings=resolved)

    renderer.render_title(generated_on or date.today())
    renderer.render(conversation)
    return await engine.finalize()


def record_artifact(
    conversation: Conversation, clock: Clock = time.time
) -> ExportArtifact:
    return ExportArtifact(
        filename=build_filename(RECORD_EXTENSION, clock),
        payload=export_record(conversation),
        media_type=RECORD_MEDIA_TYPE,
    )


def document_artifact(payload: bytes, clock: Clock = time.time) -> ExportArtifact:
    return ExportArtifact(
        filename=build_filename(DOCUMENT_EXTENSION, clock),
        payload=payload,
        media_type=DOCUMENT_MEDIA_TYPE,
    )


def save_artifact(artifact: ExportArtifact, directory: Path) -> Path:
    """Write ``artifact`` under ``directory`` and report the location."""

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / artifact.filename
    destination.write_bytes(artifact.payload)
    print(f"✅ {artifact.kind} written: {destination}")
    return destination


__all__ = [
    "Clock",
    "DOCUMENT_MEDIA_TYPE",
    "ExportArtifact",
    "RECORD_MEDIA_TYPE",
    "build_filename",
    "document_artifact",
    "export_document",
    "export_record",
    "load_record",
    "read_record_file",
    "record_artifact",
    "save_artifact",
]
