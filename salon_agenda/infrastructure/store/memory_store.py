from __future__ import annotations

import copy
import uuid
from datetime import date, datetime, time
from typing import Any, Mapping

from salon_agenda.application.exceptions import NotFoundError
from salon_agenda.application.ports.document_store import DocumentCollectionPort


class MemoryDocumentCollection(DocumentCollectionPort):
    def __init__(self, name: str, documents: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self.name = name
        self._documents: dict[str, dict[str, Any]] = {
            doc_id: dict(data) for doc_id, data in (documents or {}).items()
        }

    async def insert(self, data: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        self._documents[doc_id] = copy.deepcopy(dict(data))
        return doc_id

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        document = self._documents.get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def patch(self, doc_id: str, fields: Mapping[str, Any]) -> None:
        if doc_id not in self._documents:
            raise NotFoundError(f"{self.name}/{doc_id} not found")
        self._documents[doc_id].update(copy.deepcopy(dict(fields)))

    async def set(self, doc_id: str, fields: Mapping[str, Any], merge: bool = True) -> None:
        if merge and doc_id in self._documents:
            self._documents[doc_id].update(copy.deepcopy(dict(fields)))
        else:
            self._documents[doc_id] = copy.deepcopy(dict(fields))

    async def delete(self, doc_id: str) -> None:
        self._documents.pop(doc_id, None)

    async def query_range(
        self,
        field: str,
        start: Any,
        end: Any,
        equals: Mapping[str, Any] | None = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        return filter_range(self._documents.items(), field, start, end, equals)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Copy of every document, keyed by id."""
        return copy.deepcopy(self._documents)


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


def filter_range(
    documents: Any,
    field: str,
    start: Any,
    end: Any,
    equals: Mapping[str, Any] | None = None,
) -> list[tuple[str, dict[str, Any]]]:
    lower, upper = comparable(start), comparable(end)
    matches = []
    for doc_id, data in documents:
        if field not in data:
            continue
        value = comparable(data[field])
        try:
            in_range = lower <= value <= upper
        except TypeError:
            continue
        if not in_range:
            continue
        if equals and any(data.get(key) != expected for key, expected in equals.items()):
            continue
        matches.append((doc_id, copy.deepcopy(data)))
    matches.sort(key=lambda item: (comparable(item[1][field]), item[0]))
    return matches


def comparable(value: Any) -> Any:
    """Bring dates, datetimes and ISO date strings onto one ordering."""
    if isinstance(value, datetime):
        return value.astimezone().replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return value
