from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping


class DocumentCollectionPort(ABC):
    """
    One logical collection of a document database (bookings, slots,
    availability records). Documents are plain dicts keyed by wire field
    names; timestamps are naive local datetimes.
    """

    name: str

    @abstractmethod
    async def insert(self, data: Mapping[str, Any]) -> str:
        """Create a document with a store-assigned id. Returns the id."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, doc_id: str) -> dict[str, Any] | None:
        """Return a copy of the document, or None if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def patch(self, doc_id: str, fields: Mapping[str, Any]) -> None:
        """Overwrite the given fields of an existing document. Raises NotFoundError if missing."""
        raise NotImplementedError

    @abstractmethod
    async def set(self, doc_id: str, fields: Mapping[str, Any], merge: bool = True) -> None:
        """Create or overwrite a document under a caller-chosen id."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, doc_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def query_range(
        self,
        field: str,
        start: Any,
        end: Any,
        equals: Mapping[str, Any] | None = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        """Documents with start <= doc[field] <= end (and matching `equals`), ordered by field."""
        raise NotImplementedError
