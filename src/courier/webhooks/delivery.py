"""Webhook delivery: GET-then-POST attempts with bounded retries.

One delivery sends one event to one endpoint:

1. A delivery id is generated and a pending ledger row is written. This
   write is the only fatal step.
2. Each attempt cycle builds a fresh envelope (new ``attempt`` and
   ``timestamp``), signs its exact JSON with the endpoint secret, and
   sends a GET ping carrying the context as query parameters. A 2xx ends
   the delivery. Otherwise the same headers plus the JSON body are POSTed.
3. Failed cycles are recorded as ``retrying`` (or ``failed`` once the
   budget is spent) and followed by a backoff sleep from the schedule.

Ledger updates after step 1 are best-effort; the returned result always
reflects what actually happened on the wire.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx

from courier.config import settings
from courier.exceptions import ValidationError
from courier.logging import bound_context, get_logger
from courier.models import DeliveryResult, WebhookEnvelope, generate_id, utcnow
from courier.webhooks.attempt import attempt_once
from courier.webhooks.ledger import DeliveryLedger
from courier.webhooks.naming import resolve_event_name
from courier.webhooks.signing import sign_payload
from courier.webhooks.state import (
    DeliveryPhase,
    DeliveryState,
    backoff_delay_ms,
    begin_attempt,
    next_state,
)

if TYPE_CHECKING:
    from courier.models import Endpoint, Subscription
    from courier.storage import DeliveryLedgerStore
    from courier.webhooks.attempt import AttemptResult

logger = get_logger(__name__)

EVENT_HEADER = "X-Webhook-Event"
DELIVERY_HEADER = "X-Webhook-Delivery"
SIGNATURE_HEADER = "X-Webhook-Signature"

Sleeper = Callable[[float], Awaitable[Any]]


class WebhookDeliverer:
    """Delivers events to a single endpoint at a time.

    Each ``deliver`` call is independent; callers fanning out to many
    endpoints bound their own concurrency.

    Example:
        ```python
        deliverer = WebhookDeliverer(storage)
        result = await deliverer.deliver(
            site_id="site_1",
            endpoint=endpoint,
            event_type="UPDATE",
            table="leads",
            object_id="L1",
            record={"id": "L1"},
        )
        ```
    """

    def __init__(
        self,
        ledger_store: DeliveryLedgerStore,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float | None = None,
        max_attempts: int | None = None,
        attempt_delays_ms: Sequence[int] | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize the deliverer.

        Args:
            ledger_store: Store for delivery rows.
            http_client: Shared client; a short-lived one is opened per
                delivery when omitted.
            timeout_seconds: Request timeout for self-opened clients.
            max_attempts: Default attempt budget.
            attempt_delays_ms: Default backoff schedule in milliseconds.
            sleep: Coroutine used to wait between attempts.

        Raises:
            ValidationError: If the attempt budget or schedule is invalid.
        """
        self._ledger = DeliveryLedger(ledger_store)
        self._http_client = http_client
        if timeout_seconds is None:
            timeout_seconds = settings.webhook_timeout_seconds
        if max_attempts is None:
            max_attempts = settings.webhook_max_attempts
        if attempt_delays_ms is None:
            attempt_delays_ms = settings.webhook_attempt_delays_ms
        _check_retry_policy(max_attempts, attempt_delays_ms)

        self._timeout = timeout_seconds
        self._max_attempts = max_attempts
        self._attempt_delays_ms = list(attempt_delays_ms)
        self._sleep = sleep

    async def deliver(
        self,
        *,
        site_id: str,
        endpoint: Endpoint,
        event_type: str,
        table: str,
        object_id: str,
        record: Any,
        subscription: Subscription | None = None,
        max_attempts: int | None = None,
        attempt_delays_ms: Sequence[int] | None = None,
        event: str | None = None,
    ) -> DeliveryResult:
        """Deliver one event to one endpoint.

        Args:
            site_id: Site the event belongs to.
            endpoint: Receiver.
            event_type: Raw change type (CREATE, UPDATE, modify, ...).
            table: Table the record lives in.
            object_id: Id of the changed record.
            record: Record snapshot sent as ``data``.
            subscription: Subscription that matched, if any.
            max_attempts: Attempt budget for this delivery.
            attempt_delays_ms: Backoff schedule for this delivery.
            event: Explicit event name; overrides the derived one.

        Returns:
            DeliveryResult with the true outcome and last response.

        Raises:
            ValidationError: If the attempt budget or schedule is invalid.
            LedgerError: If the pending ledger row cannot be created.
        """
        budget = self._max_attempts if max_attempts is None else max_attempts
        delays = list(self._attempt_delays_ms if attempt_delays_ms is None else attempt_delays_ms)
        _check_retry_policy(budget, delays)

        delivery_id = generate_id()
        event_name = resolve_event_name(table, event_type, event)

        with bound_context(
            delivery_id=delivery_id, endpoint_id=endpoint.id, event_name=event_name
        ):
            await self._ledger.open(
                delivery_id=delivery_id,
                site_id=site_id,
                endpoint_id=endpoint.id,
                subscription_id=subscription.id if subscription else None,
                event_type=event_name,
                # Preview only; the full envelope is rebuilt per attempt
                payload={"id": object_id, "table": table, "event": event, "site_id": site_id},
            )

            state = DeliveryState()
            last: AttemptResult | None = None

            async with self._client() as client:
                while not state.is_terminal:
                    state = begin_attempt(state)
                    envelope = WebhookEnvelope(
                        id=delivery_id,
                        type=event_name,
                        site_id=site_id,
                        table=table,
                        object_id=object_id,
                        data=record,
                        attempt=state.attempt,
                    )
                    last = await self._attempt_cycle(client, endpoint, envelope)
                    state = next_state(state, last, budget)

                    await self._ledger.record_attempt(
                        delivery_id,
                        attempt=state.attempt,
                        status=state.ledger_status,
                        response_status=last.response_status,
                        response_body=last.response_body,
                        attempted_at=utcnow(),
                    )

                    if state.phase == DeliveryPhase.RETRYING:
                        delay_ms = backoff_delay_ms(state.attempt, delays)
                        logger.info(
                            "Webhook attempt failed, retrying",
                            attempt=state.attempt,
                            max_attempts=budget,
                            delay_ms=delay_ms,
                            response_status=last.response_status,
                        )
                        await self._sleep(delay_ms / 1000)

            delivered = state.phase == DeliveryPhase.DELIVERED
            if delivered:
                logger.info(
                    "Webhook delivered",
                    attempts=state.attempt,
                    response_status=last.response_status if last else None,
                )
            else:
                logger.warning(
                    "Webhook delivery failed",
                    attempts=state.attempt,
                    response_status=last.response_status if last else None,
                )

        return DeliveryResult(
            delivered=delivered,
            attempts=state.attempt,
            response_status=last.response_status if last else None,
            response_body=last.response_body if last else None,
            delivery_id=delivery_id,
        )

    async def _attempt_cycle(
        self,
        client: httpx.AsyncClient,
        endpoint: Endpoint,
        envelope: WebhookEnvelope,
    ) -> AttemptResult:
        """Run the GET ping and, unless it succeeds, the POST fallback."""
        body = envelope.to_body()
        headers = build_headers(envelope.type, envelope.id, sign_payload(endpoint.secret, body))

        ping = await attempt_once(
            client,
            "GET",
            endpoint.target_url,
            headers=headers,
            params={
                "delivery_id": envelope.id,
                "event": envelope.type,
                "site_id": envelope.site_id,
                "table": envelope.table,
                "object_id": envelope.object_id,
            },
        )
        if ping.succeeded:
            return ping

        logger.debug(
            "GET not acknowledged, falling back to POST",
            attempt=envelope.attempt,
            response_status=ping.response_status,
        )
        return await attempt_once(
            client,
            "POST",
            endpoint.target_url,
            headers={"Content-Type": "application/json", **headers},
            content=body,
        )

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client


def _check_retry_policy(max_attempts: int, delays_ms: Sequence[int]) -> None:
    if max_attempts < 1:
        raise ValidationError("max_attempts", "must be at least 1")
    if not delays_ms or any(delay < 0 for delay in delays_ms):
        raise ValidationError("attempt_delays_ms", "must be a non-empty list of delays >= 0")


def build_headers(event_name: str, delivery_id: str, signature: str | None) -> dict[str, str]:
    """Headers shared by the GET and POST phases."""
    headers = {
        EVENT_HEADER: event_name,
        DELIVERY_HEADER: delivery_id,
    }
    if signature:
        headers[SIGNATURE_HEADER] = signature
    return headers
