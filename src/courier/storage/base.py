"""Qdrant plumbing shared by the storage mixins.

Rows are kept as Qdrant point payloads. Nothing here is searched by
vector, so every point carries a one-dimensional placeholder vector.
"""

from __future__ import annotations

import uuid
from typing import Any

from qdrant_client import AsyncQdrantClient, models

from courier.config import settings

# Registry and ledger collections (keys are the logical table names)
COLLECTION_NAMES = {
    "endpoints": "webhooks_endpoints",
    "subscriptions": "webhooks_subscriptions",
    "deliveries": "webhooks_deliveries",
}

# Keyword payload indexes per collection
PAYLOAD_INDEXES = {
    "endpoints": ("site_id",),
    "subscriptions": ("site_id", "event_type", "endpoint_id"),
    "deliveries": ("site_id", "endpoint_id", "status"),
}

PLACEHOLDER_VECTOR_DIM = 1
SCROLL_PAGE_SIZE = 256

POINT_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "courier:rows")


class StorageBase:
    """Owns the Qdrant client and the collections behind every table."""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        prefix: str | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Create the store; nothing connects until ``initialize``.

        Args:
            url: Qdrant URL, ``settings.qdrant_url`` when omitted.
            api_key: Qdrant API key, ``settings.qdrant_api_key`` when omitted.
            prefix: Collection prefix, ``settings.collection_prefix`` when omitted.
            client: Ready-made client, e.g. ``AsyncQdrantClient(location=":memory:")``.
        """
        self._url = url or settings.qdrant_url
        self._api_key = api_key or settings.qdrant_api_key
        self._prefix = prefix or settings.collection_prefix
        self._client = client
        self._ready = False

    @property
    def client(self) -> AsyncQdrantClient:
        if self._client is None:
            raise RuntimeError("CourierStorage is not initialized; call initialize() first")
        return self._client

    async def initialize(self) -> None:
        """Open the client if needed and create missing collections."""
        if self._client is None:
            self._client = AsyncQdrantClient(url=self._url, api_key=self._api_key)
        if not self._ready:
            await self._ensure_collections()
            self._ready = True

    async def close(self) -> None:
        if self._client is None:
            return
        await self._client.close()
        self._client = None
        self._ready = False

    async def __aenter__(self) -> StorageBase:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _collection_name(self, table: str) -> str:
        """Full collection name for a logical table."""
        suffix = COLLECTION_NAMES.get(table, table)
        return f"{self._prefix}_{suffix}"

    def _point_id(self, table: str, row_id: str) -> str:
        """Stable point id for a row; the same row always lands on the same point."""
        return str(uuid.uuid5(POINT_ID_NAMESPACE, f"{table}/{row_id}"))

    @staticmethod
    def _placeholder_vector() -> list[float]:
        return [0.0] * PLACEHOLDER_VECTOR_DIM

    async def _ensure_collections(self) -> None:
        """Ensure registry and ledger collections exist with indexes."""
        for table in COLLECTION_NAMES:
            created = await self._ensure_collection(self._collection_name(table))
            if created:
                await self._create_indexes(table)

    async def _ensure_collection(self, collection_name: str) -> bool:
        """Create the collection if missing. Returns True if it was created."""
        if await self.client.collection_exists(collection_name):
            return False
        await self.client.create_collection(
            collection_name=collection_name,
            vectors_config=models.VectorParams(
                size=PLACEHOLDER_VECTOR_DIM,
                distance=models.Distance.DOT,
            ),
        )
        return True

    async def _create_indexes(self, table: str) -> None:
        """Create keyword payload indexes for filtered reads."""
        collection_name = self._collection_name(table)
        for field_name in PAYLOAD_INDEXES.get(table, ()):
            await self.client.create_payload_index(
                collection_name=collection_name,
                field_name=field_name,
                field_schema=models.PayloadSchemaType.KEYWORD,
            )

    async def _upsert_row(self, table: str, row_id: str, payload: dict[str, Any]) -> None:
        await self.client.upsert(
            collection_name=self._collection_name(table),
            points=[
                models.PointStruct(
                    id=self._point_id(table, row_id),
                    vector=self._placeholder_vector(),
                    payload=payload,
                )
            ],
        )

    async def _scroll_all(
        self,
        table: str,
        scroll_filter: models.Filter,
    ) -> list[dict[str, Any]]:
        """Read every payload matching ``scroll_filter``, following pagination."""
        payloads: list[dict[str, Any]] = []
        offset: Any = None
        while True:
            results, offset = await self.client.scroll(
                collection_name=self._collection_name(table),
                scroll_filter=scroll_filter,
                limit=SCROLL_PAGE_SIZE,
                offset=offset,
                with_payload=True,
                with_vectors=False,
            )
            payloads.extend(r.payload for r in results if r.payload is not None)
            if offset is None:
                return payloads
