"""Repository seams consumed by the webhook engine.

Each component receives the store it needs through its constructor, so
tests substitute ``AsyncMock`` fakes and production wires
``CourierStorage``, which implements all three.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from courier.models import DeliveryRecord, DeliveryUpdate, Endpoint, Subscription


@runtime_checkable
class EndpointRegistry(Protocol):
    """Read side of the endpoint/subscription registry."""

    async def list_endpoints(self, site_id: str, active_only: bool = True) -> list[Endpoint]:
        """Endpoints for a site, optionally only those with ``is_active``."""
        ...

    async def list_subscriptions(
        self,
        site_id: str,
        event_types: list[str] | None = None,
        subscription_ids: list[str] | None = None,
        active_only: bool = True,
    ) -> list[Subscription]:
        """Subscriptions for a site matching any of ``event_types``."""
        ...


@runtime_checkable
class DeliveryLedgerStore(Protocol):
    """Atomic insert and update-by-id of delivery rows."""

    async def insert_delivery(self, record: DeliveryRecord) -> str:
        """Insert a new delivery row and return its id."""
        ...

    async def update_delivery(self, delivery_id: str, update: DeliveryUpdate) -> None:
        """Overwrite the attempt fields of an existing delivery row."""
        ...


@runtime_checkable
class RecordStore(Protocol):
    """Single-row lookup in an arbitrary table."""

    async def fetch_record(self, table: str, record_id: str) -> dict[str, Any] | None:
        """Return the row, or None if it does not exist."""
        ...
