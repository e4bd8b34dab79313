"""Record store interface and a JSON-backed implementation.

The editing core reaches the hosted database only through the four
``RecordStore`` calls.  ``JsonDocumentStore`` persists all records in a
single JSON file, loaded on init and saved after every write, which is
enough for local use and tests.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field

from draftline.models import DocumentKind, DocumentRecord, DocumentStatus

logger = logging.getLogger(__name__)

STORE_FILENAME = ".draftline-store.json"

# Fields callers may never overwrite through update_document.
_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

# Alias to avoid shadowing by JsonDocumentStore.list_documents
_list = list


class RecordStore(Protocol):
    """The external record store.  Failures surface as opaque exceptions."""

    async def create_document(self, data: dict[str, Any]) -> DocumentRecord: ...

    async def get_document(self, document_id: str) -> DocumentRecord | None: ...

    async def update_document(self, document_id: str, partial: dict[str, Any]) -> DocumentRecord: ...

    async def delete_document(self, document_id: str) -> None: ...


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    records: list[DocumentRecord] = Field(default_factory=list)


class JsonDocumentStore:
    """JSON-backed CRUD store for document records.

    Loads the store file on init and saves after every mutation.
    """

    def __init__(self, output_dir: Path) -> None:
        self._path = output_dir / STORE_FILENAME
        self._data = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt document store at %s, starting fresh", self._path)
            return _StoreData()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            self._data.model_dump_json(indent=2),
            encoding="utf-8",
        )

    def _find(self, document_id: str) -> DocumentRecord | None:
        for record in self._data.records:
            if record.id == document_id:
                return record
        return None

    def _require(self, document_id: str) -> DocumentRecord:
        record = self._find(document_id)
        if record is None:
            raise KeyError(document_id)
        return record

    # ── RecordStore ──────────────────────────────────────────────

    async def create_document(self, data: dict[str, Any]) -> DocumentRecord:
        """Insert a new record; ``id`` and timestamps are assigned here."""
        now = datetime.now(tz=UTC)
        payload = {k: v for k, v in data.items() if k not in _IMMUTABLE_FIELDS}
        record = DocumentRecord.model_validate(
            {
                "id": uuid.uuid4().hex,
                "created_at": now,
                "updated_at": now,
                **payload,
            }
        )
        self._data.records.append(record)
        self._save()
        return record.model_copy(deep=True)

    async def get_document(self, document_id: str) -> DocumentRecord | None:
        """Return a copy of a record by id, or None if not found."""
        record = self._find(document_id)
        return record.model_copy(deep=True) if record else None

    async def update_document(self, document_id: str, partial: dict[str, Any]) -> DocumentRecord:
        """Merge ``partial`` into a record (last write wins).

        Raises KeyError if the id does not exist.
        """
        record = self._require(document_id)
        merged = record.model_dump()
        merged.update({k: v for k, v in partial.items() if k not in _IMMUTABLE_FIELDS})
        merged["updated_at"] = datetime.now(tz=UTC)
        updated = DocumentRecord.model_validate(merged)
        self._data.records = [updated if r.id == document_id else r for r in self._data.records]
        self._save()
        return updated.model_copy(deep=True)

    async def delete_document(self, document_id: str) -> None:
        """Remove a record.  Raises KeyError if the id does not exist."""
        self._require(document_id)
        self._data.records = [r for r in self._data.records if r.id != document_id]
        self._save()

    # ── Read helpers ─────────────────────────────────────────────

    def list_documents(
        self,
        kind: DocumentKind | None = None,
        status: DocumentStatus | None = None,
    ) -> _list[DocumentRecord]:
        """Return records, optionally filtered by kind and/or status."""
        results = self._data.records
        if kind is not None:
            results = [r for r in results if r.kind == kind]
        if status is not None:
            results = [r for r in results if r.status == status]
        return [r.model_copy(deep=True) for r in results]
