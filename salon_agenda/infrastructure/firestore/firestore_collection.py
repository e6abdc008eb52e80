from __future__ import annotations

from typing import Any, Mapping

from salon_agenda.application.ports.document_store import DocumentCollectionPort
from salon_agenda.infrastructure.firestore.firestore_client import FirestoreClient


class FirestoreCollection(DocumentCollectionPort):
    def __init__(self, client: FirestoreClient, name: str) -> None:
        self._client = client
        self.name = name

    async def insert(self, data: Mapping[str, Any]) -> str:
        return await self._client.create_document(self.name, data)

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        return await self._client.get_document(self.name, doc_id)

    async def patch(self, doc_id: str, fields: Mapping[str, Any]) -> None:
        await self._client.patch_document(self.name, doc_id, fields, merge=True, must_exist=True)

    async def set(self, doc_id: str, fields: Mapping[str, Any], merge: bool = True) -> None:
        await self._client.patch_document(self.name, doc_id, fields, merge=merge)

    async def delete(self, doc_id: str) -> None:
        await self._client.delete_document(self.name, doc_id)

    async def query_range(
        self,
        field: str,
        start: Any,
        end: Any,
        equals: Mapping[str, Any] | None = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        return await self._client.run_range_query(self.name, field, start, end, equals)
