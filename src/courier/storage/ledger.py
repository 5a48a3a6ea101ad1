"""Delivery ledger operations for Courier storage.

Each delivery is one point keyed by its delivery id. Updates go through
``set_payload`` so an update touches only the attempt fields and is
atomic per row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from qdrant_client import models

from courier.storage.retry import qdrant_retry

if TYPE_CHECKING:
    from courier.models import DeliveryRecord, DeliveryUpdate


class LedgerMixin:
    """Mixin providing delivery ledger operations for CourierStorage.

    This mixin expects the following from the base class:
    - _collection_name(table) -> str
    - _point_id(table, row_id) -> str
    - _upsert_row(table, row_id, payload)
    - _scroll_all(table, scroll_filter) -> list[dict]
    - client: AsyncQdrantClient
    """

    _collection_name: Any
    _point_id: Any
    _upsert_row: Any
    _scroll_all: Any
    client: Any

    @qdrant_retry
    async def insert_delivery(self, record: DeliveryRecord) -> str:
        """Insert a new delivery row.

        Args:
            record: DeliveryRecord to insert.

        Returns:
            The delivery ID.
        """
        await self._upsert_row("deliveries", record.id, record.model_dump(mode="json"))
        return record.id

    @qdrant_retry
    async def update_delivery(self, delivery_id: str, update: DeliveryUpdate) -> None:
        """Write the attempt fields of an existing delivery row.

        Args:
            delivery_id: ID of the delivery to update.
            update: Fields recorded after an attempt cycle.
        """
        await self.client.set_payload(
            collection_name=self._collection_name("deliveries"),
            payload=update.model_dump(mode="json"),
            points=[self._point_id("deliveries", delivery_id)],
        )

    @qdrant_retry
    async def get_delivery(self, delivery_id: str) -> DeliveryRecord | None:
        """Get a delivery row by ID, or None if not found."""
        from courier.models import DeliveryRecord

        results = await self.client.retrieve(
            collection_name=self._collection_name("deliveries"),
            ids=[self._point_id("deliveries", delivery_id)],
            with_payload=True,
        )
        if not results or results[0].payload is None:
            return None
        return DeliveryRecord.model_validate(results[0].payload)

    @qdrant_retry
    async def list_deliveries(
        self,
        site_id: str,
        endpoint_id: str | None = None,
        status: str | None = None,
    ) -> list[DeliveryRecord]:
        """List delivery rows for a site, newest attempt first.

        Args:
            site_id: Site to list deliveries for.
            endpoint_id: Optional endpoint filter.
            status: Optional status filter (pending, retrying, delivered, failed).

        Returns:
            List of DeliveryRecord.
        """
        from courier.models import DeliveryRecord

        filters: list[models.Condition] = [
            models.FieldCondition(key="site_id", match=models.MatchValue(value=site_id)),
        ]
        if endpoint_id is not None:
            filters.append(
                models.FieldCondition(key="endpoint_id", match=models.MatchValue(value=endpoint_id))
            )
        if status is not None:
            filters.append(
                models.FieldCondition(key="status", match=models.MatchValue(value=status))
            )

        payloads = await self._scroll_all("deliveries", models.Filter(must=filters))
        deliveries = [DeliveryRecord.model_validate(p) for p in payloads]
        # Rows never attempted sort last
        deliveries.sort(
            key=lambda d: d.last_attempt_at.isoformat() if d.last_attempt_at else "",
            reverse=True,
        )
        return deliveries
