"""Endpoint and subscription registry operations.

Reads serve the subscription resolver. The store methods exist so the
registry can be seeded; the real write path lives in the admin flow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from qdrant_client import models

from courier.storage.retry import qdrant_retry

if TYPE_CHECKING:
    from courier.models import Endpoint, Subscription


class RegistryMixin:
    """Mixin providing registry operations for CourierStorage.

    This mixin expects the following from the base class:
    - _upsert_row(table, row_id, payload)
    - _scroll_all(table, scroll_filter) -> list[dict]
    """

    _upsert_row: Any
    _scroll_all: Any

    @qdrant_retry
    async def store_endpoint(self, endpoint: Endpoint) -> str:
        """Store or replace an endpoint row.

        Args:
            endpoint: Endpoint to store.

        Returns:
            The endpoint ID.
        """
        await self._upsert_row("endpoints", endpoint.id, endpoint.model_dump(mode="json"))
        return endpoint.id

    @qdrant_retry
    async def store_subscription(self, subscription: Subscription) -> str:
        """Store or replace a subscription row."""
        await self._upsert_row(
            "subscriptions", subscription.id, subscription.model_dump(mode="json")
        )
        return subscription.id

    @qdrant_retry
    async def list_endpoints(self, site_id: str, active_only: bool = True) -> list[Endpoint]:
        """List endpoints for a site.

        Args:
            site_id: Site to list endpoints for.
            active_only: If True, only return rows with ``is_active``.

        Returns:
            List of Endpoint.
        """
        from courier.models import Endpoint

        filters: list[models.Condition] = [
            models.FieldCondition(key="site_id", match=models.MatchValue(value=site_id)),
        ]
        if active_only:
            filters.append(
                models.FieldCondition(key="is_active", match=models.MatchValue(value=True))
            )

        payloads = await self._scroll_all("endpoints", models.Filter(must=filters))
        return [Endpoint.model_validate(p) for p in payloads]

    @qdrant_retry
    async def list_subscriptions(
        self,
        site_id: str,
        event_types: list[str] | None = None,
        subscription_ids: list[str] | None = None,
        active_only: bool = True,
    ) -> list[Subscription]:
        """List subscriptions for a site.

        Args:
            site_id: Site to list subscriptions for.
            event_types: If given, keep rows whose event_type is any of these.
            subscription_ids: If given, keep only these subscription ids.
            active_only: If True, only return rows with ``is_active``.

        Returns:
            List of Subscription.
        """
        from courier.models import Subscription

        filters: list[models.Condition] = [
            models.FieldCondition(key="site_id", match=models.MatchValue(value=site_id)),
        ]
        if active_only:
            filters.append(
                models.FieldCondition(key="is_active", match=models.MatchValue(value=True))
            )
        if event_types:
            filters.append(
                models.FieldCondition(key="event_type", match=models.MatchAny(any=event_types))
            )
        if subscription_ids:
            filters.append(
                models.FieldCondition(key="id", match=models.MatchAny(any=subscription_ids))
            )

        payloads = await self._scroll_all("subscriptions", models.Filter(must=filters))
        return [Subscription.model_validate(p) for p in payloads]
