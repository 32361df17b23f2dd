"""Read-only access to the documents of a file-search store."""

from __future__ import annotations

from typing import Any, Protocol

from knowsynth.backend import GeminiRestClient

DocumentPage = dict[str, Any]


class DocumentStore(Protocol):
    """Listing contract of the external document store."""

    async def list_documents(
        self,
        store_name: str,
        page_size: int = 20,
        page_token: str | None = None,
    ) -> DocumentPage:
        """Return one page ``{documents: [...], nextPageToken?}``."""


class GeminiDocumentStore:
    """Document listing over the ``fileSearchStores/*/documents`` REST resource."""

    def __init__(self, client: GeminiRestClient) -> None:
        self._client = client

    async def list_documents(
        self,
        store_name: str,
        page_size: int = 20,
        page_token: str | None = None,
    ) -> DocumentPage:
        params: dict[str, Any] = {"pageSize": page_size}
        if page_token:
            params["pageToken"] = page_token
        return await self._client.get(
            f"{store_name}/documents",
            params=params,
            error_message="Failed to list documents",
        )


class EmptyDocumentStore:
    """Store used when no remote backend is configured."""

    async def list_documents(
        self,
        store_name: str,
        page_size: int = 20,
        page_token: str | None = None,
    ) -> DocumentPage:
        return {"documents": []}


async def list_all_documents(store: DocumentStore, store_name: str, *, page_size: int = 20) -> list[dict[str, Any]]:
    """Follow ``nextPageToken`` until every document of ``store_name`` is listed."""

    documents: list[dict[str, Any]] = []
    page_token: str | None = None
    while True:
        page = await store.list_documents(store_name, page_size, page_token)
        documents.extend(doc for doc in page.get("documents") or [] if isinstance(doc, dict))
        page_token = page.get("nextPageToken") or None
        if not page_token:
            return documents


__all__ = ["DocumentStore", "EmptyDocumentStore", "GeminiDocumentStore", "list_all_documents"]
