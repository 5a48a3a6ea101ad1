"""Fan a record change out to every subscribed endpoint.

Resolves endpoints and subscriptions, fetches the record once, then runs
one delivery per endpoint that has a matching subscription. Deliveries
run one after another; a caller wanting parallel fan-out schedules
``WebhookDeliverer.deliver`` itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from courier.logging import bound_context, get_logger
from courier.models import DispatchOutcome, DispatchResult
from courier.webhooks.naming import event_name_variants, resolve_event_name

if TYPE_CHECKING:
    from courier.models import Subscription
    from courier.webhooks.delivery import WebhookDeliverer
    from courier.webhooks.records import RecordFetcher
    from courier.webhooks.resolver import SubscriptionResolver

logger = get_logger(__name__)


class WebhookDispatcher:
    """Resolves targets for a record change and delivers to each.

    Example:
        ```python
        dispatcher = WebhookDispatcher(
            SubscriptionResolver(storage),
            RecordFetcher(storage),
            WebhookDeliverer(storage),
        )
        result = await dispatcher.dispatch(
            site_id="site_1", table="leads", event_type="UPDATE", object_id="L1"
        )
        ```
    """

    def __init__(
        self,
        resolver: SubscriptionResolver,
        fetcher: RecordFetcher,
        deliverer: WebhookDeliverer,
    ) -> None:
        self._resolver = resolver
        self._fetcher = fetcher
        self._deliverer = deliverer

    async def dispatch(
        self,
        *,
        site_id: str,
        table: str,
        event_type: str,
        object_id: str,
        event: str | None = None,
        subscription_ids: list[str] | None = None,
    ) -> DispatchResult:
        """Deliver a record change to all subscribed endpoints.

        Args:
            site_id: Site the change belongs to.
            table: Table of the changed record.
            event_type: Raw change type.
            object_id: Id of the changed record.
            event: Explicit event name; overrides the derived one.
            subscription_ids: Restrict delivery to these subscriptions.

        Returns:
            DispatchResult summarizing every delivery made.

        Raises:
            ResolutionError: If endpoints or subscriptions cannot be read.
            RecordNotFoundError: If the changed record does not exist.
        """
        event_name = resolve_event_name(table, event_type, event).lower()

        with bound_context(site_id=site_id, event_name=event_name, object_id=object_id):
            endpoints = await self._resolver.list_active_endpoints(site_id)
            subscriptions = await self._resolver.list_active_subscriptions(
                site_id,
                event_types=event_name_variants(event_name),
                subscription_ids=subscription_ids,
            )
            logger.info(
                "Resolved webhook targets",
                endpoints=len(endpoints),
                subscriptions=len(subscriptions),
            )

            if not endpoints or not subscriptions:
                logger.info("No active endpoint with a matching subscription, skipping")
                return DispatchResult(skipped=len(endpoints))

            by_endpoint: dict[str, Subscription] = {}
            for subscription in subscriptions:
                by_endpoint[subscription.endpoint_id] = subscription

            targets = [endpoint for endpoint in endpoints if endpoint.id in by_endpoint]
            result = DispatchResult(skipped=len(endpoints) - len(targets))
            if not targets:
                return result

            record = await self._fetcher.fetch_by_table_and_id(table, object_id)

            for endpoint in targets:
                delivery = await self._deliverer.deliver(
                    site_id=site_id,
                    endpoint=endpoint,
                    subscription=by_endpoint[endpoint.id],
                    event_type=event_type,
                    event=event_name,
                    table=table,
                    object_id=object_id,
                    record=record,
                )
                result.deliveries.append(
                    DispatchOutcome(
                        endpoint_id=endpoint.id,
                        delivered=delivery.delivered,
                        attempts=delivery.attempts,
                        delivery_id=delivery.delivery_id,
                        response_status=delivery.response_status,
                    )
                )

            result.attempted = len(result.deliveries)
            result.delivered = sum(1 for d in result.deliveries if d.delivered)
            logger.info(
                "Webhook dispatch complete",
                attempted=result.attempted,
                delivered=result.delivered,
                skipped=result.skipped,
            )
            return result
