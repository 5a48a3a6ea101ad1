"""Subscription resolution: which endpoints should hear about an event.

Both lookups are pure reads. A failed query raises ``ResolutionError``
so callers never mistake "could not ask" for "nobody is listening".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from courier.exceptions import ResolutionError
from courier.logging import get_logger

if TYPE_CHECKING:
    from courier.models import Endpoint, Subscription
    from courier.storage import EndpointRegistry

logger = get_logger(__name__)


class SubscriptionResolver:
    """Reads active endpoints and subscriptions for a site."""

    def __init__(self, registry: EndpointRegistry) -> None:
        self._registry = registry

    async def list_active_endpoints(self, site_id: str) -> list[Endpoint]:
        """Endpoints that are active and in an eligible handshake state.

        Args:
            site_id: Site whose endpoints to list.

        Returns:
            Endpoints with ``is_active`` and handshake status verified,
            none (or missing) or pending.

        Raises:
            ResolutionError: If the registry query fails.
        """
        try:
            endpoints = await self._registry.list_endpoints(site_id, active_only=True)
        except Exception as e:
            raise ResolutionError(f"Failed to fetch webhook endpoints: {e}") from e

        eligible = [endpoint for endpoint in endpoints if endpoint.is_deliverable()]
        logger.debug(
            "Resolved webhook endpoints",
            site_id=site_id,
            found=len(endpoints),
            eligible=len(eligible),
        )
        return eligible

    async def list_active_subscriptions(
        self,
        site_id: str,
        event_type: str | None = None,
        event_types: list[str] | None = None,
        subscription_ids: list[str] | None = None,
    ) -> list[Subscription]:
        """Active subscriptions for a site and one or more event types.

        Args:
            site_id: Site whose subscriptions to list.
            event_type: Single event type to match.
            event_types: Event types to match; takes precedence over ``event_type``.
            subscription_ids: Optional explicit id allow-list.

        Returns:
            Matching active subscriptions.

        Raises:
            ResolutionError: If the registry query fails.
        """
        types: list[str] | None = None
        if event_types:
            types = list(event_types)
        elif event_type:
            types = [event_type]
        ids = list(subscription_ids) if subscription_ids else None

        try:
            subscriptions = await self._registry.list_subscriptions(
                site_id,
                event_types=types,
                subscription_ids=ids,
                active_only=True,
            )
        except Exception as e:
            raise ResolutionError(f"Failed to fetch webhook subscriptions: {e}") from e

        return [
            sub
            for sub in subscriptions
            if sub.is_active
            and (types is None or sub.event_type in types)
            and (ids is None or sub.id in ids)
        ]
