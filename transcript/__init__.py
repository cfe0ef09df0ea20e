"""Conversation extraction, record export, and styled PDF rendering."""

from .actions import (
    ConsoleNotifier,
    run_document_export,
    run_record_export,
    run_record_to_document,
)
from .errors import (
    ChannelReadFailure,
    DependencyUnavailable,
    ExportError,
    ExtractionEmpty,
    RecordFormatError,
    TokenizeFailure,
)
from .exporters import (
    ExportArtifact,
    build_filename,
    export_document,
    export_record,
    load_record,
    save_artifact,
)
from .extractor import extract_conversation
from .models import Conversation, Role, Turn
from .settings import AcquisitionPolicy, ExportSettings

__all__ = [
    "AcquisitionPolicy",
    "ChannelReadFailure",
    "ConsoleNotifier",
    "Conversation",
    "DependencyUnavailable",
    "ExportArtifact",
    "ExportError",
    "ExportSettings",
    "ExtractionEmpty",
    "RecordFormatError",
    "Role",
    "TokenizeFailure",
    "Turn",
    "build_filename",
    "export_document",
    "export_record",
    "extract_conversation",
    "load_record",
    "run_document_export",
    "run_record_export",
    "run_record_to_document",
    "save_artifact",
]
