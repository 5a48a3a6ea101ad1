"""Data models for Courier.

Registry Types:
    - Endpoint: Registered HTTP receiver (read-only here)
    - Subscription: Endpoint-to-event-type binding (read-only here)

Ledger Types:
    - DeliveryRecord: Per-delivery audit row
    - DeliveryUpdate: Fields written after each attempt cycle

Wire and Result Types:
    - WebhookEnvelope: JSON body sent to receivers
    - DeliveryResult: Outcome of one delivery
    - DispatchResult, DispatchOutcome: Outcome of a fan-out
"""

from .base import generate_id, utcnow
from .webhook import (
    ELIGIBLE_HANDSHAKE_STATUSES,
    DeliveryRecord,
    DeliveryResult,
    DeliveryStatus,
    DeliveryUpdate,
    DispatchOutcome,
    DispatchResult,
    Endpoint,
    Subscription,
    WebhookEnvelope,
)

__all__ = [
    # Helpers
    "generate_id",
    "utcnow",
    # Registry
    "ELIGIBLE_HANDSHAKE_STATUSES",
    "Endpoint",
    "Subscription",
    # Ledger
    "DeliveryRecord",
    "DeliveryStatus",
    "DeliveryUpdate",
    # Wire and results
    "WebhookEnvelope",
    "DeliveryResult",
    "DispatchOutcome",
    "DispatchResult",
]
