"""Generic row access by table and id."""

from __future__ import annotations

from typing import Any

from courier.storage.retry import qdrant_retry


class RecordMixin:
    """Mixin providing single-row reads and writes for arbitrary tables.

    Each table maps to its own collection, created on first write.
    """

    _collection_name: Any
    _point_id: Any
    _upsert_row: Any
    _ensure_collection: Any
    client: Any

    @qdrant_retry
    async def store_record(self, table: str, record: dict[str, Any]) -> str:
        """Store a row in ``table``. The row must carry an ``id``.

        Returns:
            The record ID.
        """
        if "id" not in record:
            raise ValueError(f"Record for table {table} has no id")
        record_id = str(record["id"])
        await self._ensure_collection(self._collection_name(table))
        await self._upsert_row(table, record_id, record)
        return record_id

    @qdrant_retry
    async def fetch_record(self, table: str, record_id: str) -> dict[str, Any] | None:
        """Fetch one row by id.

        Returns:
            The row payload, or None if the table or row does not exist.
        """
        collection = self._collection_name(table)
        if not await self.client.collection_exists(collection):
            return None

        results = await self.client.retrieve(
            collection_name=collection,
            ids=[self._point_id(table, record_id)],
            with_payload=True,
        )
        if not results or results[0].payload is None:
            return None
        return dict(results[0].payload)
