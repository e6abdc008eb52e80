from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from salon_agenda.application.exceptions import BackingStoreError, NotFoundError
from salon_agenda.core.config import settings
from salon_agenda.infrastructure.firestore.values import decode_fields, encode_fields, encode_value

_RANGE_OPS = (("GREATER_THAN_OR_EQUAL", 0), ("LESS_THAN_OR_EQUAL", 1))


class FirestoreClient:
    """Thin async client for the Firestore REST v1 documents API."""

    def __init__(
        self,
        project_id: str | None = None,
        database: str | None = None,
        api_key: str | None = None,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._project_id = project_id or settings.FIRESTORE_PROJECT_ID
        self._database = database or settings.FIRESTORE_DATABASE
        self._api_key = api_key or settings.FIRESTORE_API_KEY
        self._access_token = access_token or settings.FIRESTORE_ACCESS_TOKEN
        self._base_url = (base_url or settings.FIRESTORE_BASE_URL).rstrip("/")
        self._logger = logging.getLogger(__name__)

        if not self._project_id:
            raise ValueError("FIRESTORE_PROJECT_ID is required for the Firestore store")

        headers = {"Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.FIRESTORE_TIMEOUT_SECONDS,
            headers=headers,
            transport=transport,
        )

    @property
    def documents_root(self) -> str:
        return f"projects/{self._project_id}/databases/{self._database}/documents"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_document(self, collection: str, data: Mapping[str, Any]) -> str:
        url = f"{self._base_url}/{self.documents_root}/{collection}"
        response = await self._request("POST", url, json={"fields": encode_fields(data)})
        return response.json()["name"].rsplit("/", 1)[-1]

    async def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        url = f"{self._base_url}/{self.documents_root}/{collection}/{doc_id}"
        response = await self._request("GET", url, allow_not_found=True)
        if response is None:
            return None
        return decode_fields(response.json().get("fields", {}))

    async def patch_document(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        merge: bool = True,
        must_exist: bool = False,
    ) -> None:
        """
        merge=True only touches the given fields (updateMask); merge=False
        replaces the whole document. must_exist turns a missing document into
        NotFoundError instead of creating it.
        """
        url = f"{self._base_url}/{self.documents_root}/{collection}/{doc_id}"
        params: list[tuple[str, str]] = []
        if merge:
            params.extend(("updateMask.fieldPaths", field) for field in data)
        if must_exist:
            params.append(("currentDocument.exists", "true"))
        response = await self._request(
            "PATCH",
            url,
            params=params,
            json={"fields": encode_fields(data)},
            allow_not_found=must_exist,
        )
        if response is None:
            raise NotFoundError(f"{collection}/{doc_id} not found")

    async def delete_document(self, collection: str, doc_id: str) -> None:
        url = f"{self._base_url}/{self.documents_root}/{collection}/{doc_id}"
        await self._request("DELETE", url)

    async def run_range_query(
        self,
        collection: str,
        field: str,
        start: Any,
        end: Any,
        equals: Mapping[str, Any] | None = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        filters = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": op,
                    "value": encode_value((start, end)[index]),
                }
            }
            for op, index in _RANGE_OPS
        ]
        for key, value in (equals or {}).items():
            filters.append(
                {"fieldFilter": {"field": {"fieldPath": key}, "op": "EQUAL", "value": encode_value(value)}}
            )

        body = {
            "structuredQuery": {
                "from": [{"collectionId": collection}],
                "where": {"compositeFilter": {"op": "AND", "filters": filters}},
                "orderBy": [{"field": {"fieldPath": field}, "direction": "ASCENDING"}],
            }
        }
        url = f"{self._base_url}/{self.documents_root}:runQuery"
        response = await self._request("POST", url, json=body)

        results: list[tuple[str, dict[str, Any]]] = []
        for row in response.json():
            document = row.get("document")
            if not document:
                continue
            doc_id = document["name"].rsplit("/", 1)[-1]
            results.append((doc_id, decode_fields(document.get("fields", {}))))
        return results

    async def _request(
        self,
        method: str,
        url: str,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        allow_not_found: bool = False,
    ) -> httpx.Response | None:
        query = list(params or [])
        if self._api_key:
            query.append(("key", self._api_key))
        try:
            response = await self._client.request(method, url, params=query, json=json)
        except httpx.HTTPError as e:
            self._logger.error("Firestore request failed", extra={"collection": url, "error": str(e)})
            raise BackingStoreError(f"Firestore {method} failed: {e}") from e

        if response.status_code == 404 and allow_not_found:
            return None
        if response.status_code >= 400:
            try:
                error_message = response.json().get("error", {}).get("message")
            except Exception:
                error_message = response.text
            self._logger.error(
                "Firestore returned an error",
                extra={"collection": url, "error": f"{response.status_code} {error_message}"},
            )
            raise BackingStoreError(f"Firestore {method} returned {response.status_code}: {error_message}")
        return response
