"""Draftline - dual-representation content editing for articles and newsletters."""

from draftline.autosave import AutosaveCoordinator
from draftline.config import DraftlineConfig, load_config
from draftline.errors import (
    DeliveryError,
    DraftlineError,
    ErrorReport,
    PersistenceError,
    ValidationError,
)
from draftline.models import (
    ContentMode,
    Document,
    DocumentKind,
    DocumentRecord,
    DocumentStatus,
    RenderedArtifact,
    TemplateDocument,
)
from draftline.session import ActionResult, EditorSession
from draftline.store import JsonDocumentStore, RecordStore

__version__ = "0.1.0"

__all__ = [
    "ActionResult",
    "AutosaveCoordinator",
    "ContentMode",
    "DeliveryError",
    "Document",
    "DocumentKind",
    "DocumentRecord",
    "DocumentStatus",
    "DraftlineConfig",
    "DraftlineError",
    "EditorSession",
    "ErrorReport",
    "JsonDocumentStore",
    "PersistenceError",
    "RecordStore",
    "RenderedArtifact",
    "TemplateDocument",
    "ValidationError",
    "__version__",
    "load_config",
]
