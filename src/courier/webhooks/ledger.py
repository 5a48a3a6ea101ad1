"""Delivery ledger: the audit row behind every delivery.

Opening a row is the one fatal write: no delivery runs without its
audit row. Attempt updates are best-effort; a failed update is logged
and the delivery loop carries on from its in-memory state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from courier.exceptions import LedgerError
from courier.logging import get_logger
from courier.models import DeliveryRecord, DeliveryUpdate

if TYPE_CHECKING:
    from datetime import datetime

    from courier.models import DeliveryStatus
    from courier.storage import DeliveryLedgerStore

logger = get_logger(__name__)


class DeliveryLedger:
    """Creates and mutates delivery rows through a ``DeliveryLedgerStore``."""

    def __init__(self, store: DeliveryLedgerStore) -> None:
        self._store = store

    async def open(
        self,
        *,
        delivery_id: str,
        site_id: str,
        endpoint_id: str,
        subscription_id: str | None,
        event_type: str,
        payload: dict[str, Any],
    ) -> DeliveryRecord:
        """Create the pending row for a new delivery.

        Raises:
            LedgerError: If the row cannot be written.
        """
        record = DeliveryRecord(
            id=delivery_id,
            site_id=site_id,
            endpoint_id=endpoint_id,
            subscription_id=subscription_id,
            event_type=event_type,
            payload=payload,
            status="pending",
            attempt_count=0,
        )
        try:
            await self._store.insert_delivery(record)
        except Exception as e:
            raise LedgerError(delivery_id, str(e)) from e
        return record

    async def record_attempt(
        self,
        delivery_id: str,
        *,
        attempt: int,
        status: DeliveryStatus,
        response_status: int | None,
        response_body: str | None,
        attempted_at: datetime,
    ) -> bool:
        """Record the outcome of an attempt cycle.

        Returns:
            True if the row was updated. Failures are logged, never raised.
        """
        update = DeliveryUpdate(
            attempt_count=attempt,
            last_attempt_at=attempted_at,
            status=status,
            response_status=response_status,
            response_body=response_body,
            delivered_at=attempted_at if status == "delivered" else None,
        )
        try:
            await self._store.update_delivery(delivery_id, update)
        except Exception as e:
            logger.error(
                "Failed to update delivery",
                delivery_id=delivery_id,
                status=status,
                attempt=attempt,
                error=str(e),
            )
            return False
        return True
