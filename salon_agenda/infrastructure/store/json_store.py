from __future__ import annotations

import asyncio
import json
import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Mapping

from salon_agenda.application.exceptions import BackingStoreError, NotFoundError
from salon_agenda.application.ports.document_store import DocumentCollectionPort
from salon_agenda.infrastructure.store.memory_store import filter_range, new_document_id

_TIMESTAMP_TAG = "$timestamp"
_DATE_TAG = "$date"


class JsonDocumentCollection(DocumentCollectionPort):
    """
    One JSON file per collection, for local development. Writes are atomic.

    File access runs in a worker thread under a threading.Lock, so the event
    loop is not blocked. An unreadable file reads as empty but refuses
    writes until it is repaired or removed.
    """

    def __init__(self, name: str, data_dir: str = "./data/collections") -> None:
        self.name = name
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    @property
    def file_path(self) -> Path:
        return self._data_dir / f"{self.name}.json"

    async def insert(self, data: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        document = dict(data)

        def change(documents: dict[str, dict[str, Any]]) -> None:
            documents[doc_id] = document

        await self._write(change)
        return doc_id

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        return (await self._read()).get(doc_id)

    async def patch(self, doc_id: str, fields: Mapping[str, Any]) -> None:
        def change(documents: dict[str, dict[str, Any]]) -> None:
            if doc_id not in documents:
                raise NotFoundError(f"{self.name}/{doc_id} not found")
            documents[doc_id].update(fields)

        await self._write(change)

    async def set(self, doc_id: str, fields: Mapping[str, Any], merge: bool = True) -> None:
        def change(documents: dict[str, dict[str, Any]]) -> None:
            if merge and doc_id in documents:
                documents[doc_id].update(fields)
            else:
                documents[doc_id] = dict(fields)

        await self._write(change)

    async def delete(self, doc_id: str) -> None:
        def change(documents: dict[str, dict[str, Any]]) -> None:
            documents.pop(doc_id, None)

        await self._write(change)

    async def query_range(
        self,
        field: str,
        start: Any,
        end: Any,
        equals: Mapping[str, Any] | None = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        return filter_range((await self._read()).items(), field, start, end, equals)

    async def _read(self) -> dict[str, dict[str, Any]]:
        return await asyncio.to_thread(self._locked_load)

    async def _write(self, change: Callable[[dict[str, dict[str, Any]]], None]) -> None:
        await asyncio.to_thread(self._locked_write, change)

    def _locked_load(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return self._load()

    def _locked_write(self, change: Callable[[dict[str, dict[str, Any]]], None]) -> None:
        with self._lock:
            documents = self._load(strict=True)
            change(documents)
            self._save(documents)

    def _load(self, strict: bool = False) -> dict[str, dict[str, Any]]:
        """Load the collection file, empty if missing. strict raises on an unreadable file."""
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                return json.load(f, object_hook=_decode)
        except (ValueError, IOError) as e:
            self._logger.error(
                "Unreadable collection file",
                extra={"collection": self.name, "error": str(e)},
            )
            if strict:
                raise BackingStoreError(f"Collection file {self.file_path} is unreadable; not overwriting it") from e
            return {}

    def _save(self, documents: dict[str, dict[str, Any]]) -> None:
        temp_path = self.file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(documents, f, indent=2, ensure_ascii=False, default=_encode)
            temp_path.replace(self.file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_TIMESTAMP_TAG: value.isoformat()}
    if isinstance(value, date):
        return {_DATE_TAG: value.isoformat()}
    raise TypeError(f"Cannot store {type(value).__name__} in a JSON collection")


def _decode(obj: dict[str, Any]) -> Any:
    if len(obj) == 1:
        if _TIMESTAMP_TAG in obj:
            return datetime.fromisoformat(obj[_TIMESTAMP_TAG])
        if _DATE_TAG in obj:
            return date.fromisoformat(obj[_DATE_TAG])
    return obj
