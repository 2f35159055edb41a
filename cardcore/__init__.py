"""Core parsing, rendering and export utilities for redcard."""

from .document import Document, parse  # noqa: F401
from .inline import StyledSpan, tokenize  # noqa: F401
from .export import (  # noqa: F401
    ExportBusy,
    ExportError,
    ExportRequest,
    RasterizationFailed,
    Snapshot,
    SnapshotExporter,
)

__all__ = [
    "Document",
    "parse",
    "StyledSpan",
    "tokenize",
    "ExportBusy",
    "ExportError",
    "ExportRequest",
    "RasterizationFailed",
    "Snapshot",
    "SnapshotExporter",
]
