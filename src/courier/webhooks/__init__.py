"""Webhook delivery engine for Courier.

Resolves which endpoints subscribe to a record change and delivers
HMAC-signed callbacks to them with bounded retries and a delivery ledger.

Example:
    ```python
    from courier.storage import CourierStorage
    from courier.webhooks import (
        RecordFetcher,
        SubscriptionResolver,
        WebhookDeliverer,
        WebhookDispatcher,
    )

    async with CourierStorage() as storage:
        dispatcher = WebhookDispatcher(
            SubscriptionResolver(storage),
            RecordFetcher(storage),
            WebhookDeliverer(storage),
        )
        await dispatcher.dispatch(
            site_id="site_1", table="leads", event_type="UPDATE", object_id="L1"
        )
    ```
"""

from .attempt import (
    AttemptHttpError,
    AttemptResult,
    AttemptSuccess,
    AttemptTransportError,
    attempt_once,
)
from .delivery import (
    DELIVERY_HEADER,
    EVENT_HEADER,
    SIGNATURE_HEADER,
    WebhookDeliverer,
    build_headers,
)
from .dispatch import WebhookDispatcher
from .ledger import DeliveryLedger
from .naming import (
    build_event_name,
    event_name_variants,
    resolve_event_name,
    singularize,
    to_past_tense,
)
from .records import RecordFetcher
from .resolver import SubscriptionResolver
from .signing import sign_payload, verify_signature
from .state import DeliveryPhase, DeliveryState, backoff_delay_ms, begin_attempt, next_state

__all__ = [
    # Naming
    "build_event_name",
    "event_name_variants",
    "resolve_event_name",
    "singularize",
    "to_past_tense",
    # Signing
    "sign_payload",
    "verify_signature",
    # Resolution and records
    "RecordFetcher",
    "SubscriptionResolver",
    # Ledger
    "DeliveryLedger",
    # Attempts and state machine
    "AttemptHttpError",
    "AttemptResult",
    "AttemptSuccess",
    "AttemptTransportError",
    "attempt_once",
    "DeliveryPhase",
    "DeliveryState",
    "backoff_delay_ms",
    "begin_attempt",
    "next_state",
    # Delivery
    "DELIVERY_HEADER",
    "EVENT_HEADER",
    "SIGNATURE_HEADER",
    "WebhookDeliverer",
    "WebhookDispatcher",
    "build_headers",
]
