"""Hydrates the record snapshot sent as the envelope's ``data``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from courier.exceptions import CourierError, RecordNotFoundError, StorageError

if TYPE_CHECKING:
    from courier.storage import RecordStore


class RecordFetcher:
    """Single-row lookup by table and id."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def fetch_by_table_and_id(self, table: str, record_id: str) -> dict[str, Any]:
        """Fetch a row.

        Raises:
            RecordNotFoundError: If no such row exists.
            StorageError: If the query fails.
        """
        try:
            record = await self._store.fetch_record(table, record_id)
        except CourierError:
            raise
        except Exception as e:
            raise StorageError(
                f"Failed to fetch record from {table} with id {record_id}: {e}"
            ) from e

        if record is None:
            raise RecordNotFoundError(table, record_id)
        return record
