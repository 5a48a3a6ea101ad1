"""Webhook models: registry rows, ledger rows and wire payloads.

Endpoints and subscriptions are read-only here; they are written by an
external admin flow. Delivery records are the per-delivery audit trail
kept by the ledger. The envelope is what receivers actually see.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .base import generate_id, utcnow

# Ledger status of a delivery
DeliveryStatus = Literal["pending", "retrying", "delivered", "failed"]

# Handshake states that may receive traffic. "none" and "pending" are
# accepted so endpoints still in setup get deliveries before verification.
ELIGIBLE_HANDSHAKE_STATUSES: frozenset[str] = frozenset({"verified", "none", "pending"})


class Endpoint(BaseModel):
    """A registered HTTP receiver for a site's webhooks.

    Attributes:
        id: Endpoint identifier.
        site_id: Site that owns the endpoint.
        name: Optional display name.
        description: Optional human-readable description.
        target_url: URL receiving GET pings and POST deliveries.
        secret: Shared secret for HMAC-SHA256 signing; unsigned when empty.
        is_active: Whether the endpoint is switched on.
        handshake_status: Verification state (verified, none, pending, ...).
    """

    # Registry rows may carry columns this service does not use
    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="Endpoint identifier")
    site_id: str = Field(description="Site that owns the endpoint")
    name: str | None = Field(default=None, description="Display name")
    description: str | None = Field(default=None, description="Human-readable description")
    target_url: str = Field(description="Receiver URL")
    secret: str | None = Field(default=None, description="HMAC signing secret")
    is_active: bool = Field(default=True, description="Whether the endpoint is active")
    handshake_status: str | None = Field(default=None, description="Verification state")

    @property
    def handshake_state(self) -> str:
        """Normalized handshake status; a missing status counts as "none"."""
        return (self.handshake_status or "none").lower()

    def is_deliverable(self) -> bool:
        """Check if this endpoint is active and in an eligible handshake state."""
        return self.is_active and self.handshake_state in ELIGIBLE_HANDSHAKE_STATUSES


class Subscription(BaseModel):
    """Binds one endpoint to one event type for one site."""

    model_config = ConfigDict(extra="ignore")

    id: str
    site_id: str
    endpoint_id: str
    event_type: str
    is_active: bool = True


class DeliveryRecord(BaseModel):
    """Ledger row for one logical delivery of one event to one endpoint.

    The id is generated once per delivery and is shared by every HTTP
    call made for it. ``payload`` holds only a preview; the full envelope
    is rebuilt on every attempt.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=generate_id)
    site_id: str
    endpoint_id: str
    subscription_id: str | None = None
    event_type: str = Field(description="Canonical event name")
    payload: dict[str, Any] = Field(default_factory=dict, description="Payload preview")
    status: DeliveryStatus = "pending"
    attempt_count: int = Field(default=0, ge=0)
    last_attempt_at: datetime | None = None
    response_status: int | None = None
    response_body: str | None = None
    delivered_at: datetime | None = None


class DeliveryUpdate(BaseModel):
    """Fields written to the ledger after an attempt cycle."""

    model_config = ConfigDict(extra="forbid")

    attempt_count: int = Field(ge=1)
    last_attempt_at: datetime = Field(default_factory=utcnow)
    status: DeliveryStatus
    response_status: int | None = None
    response_body: str | None = None
    delivered_at: datetime | None = None


class WebhookEnvelope(BaseModel):
    """Event payload sent to webhook receivers.

    Built fresh for every attempt: ``attempt`` and ``timestamp`` change,
    everything else is stable for the delivery.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(description="Delivery id")
    type: str = Field(description="Canonical event name")
    site_id: str
    table: str
    object_id: str
    data: Any = Field(default=None, description="Record snapshot")
    attempt: int = Field(ge=1, description="1-based attempt number")
    timestamp: datetime = Field(default_factory=utcnow)

    def to_body(self) -> str:
        """Serialize to the exact JSON string that is signed and posted."""
        return self.model_dump_json()


class DeliveryResult(BaseModel):
    """Outcome of one delivery, independent of ledger write health."""

    delivered: bool
    attempts: int = Field(ge=0)
    response_status: int | None = None
    response_body: str | None = None
    delivery_id: str


class DispatchOutcome(BaseModel):
    """Per-endpoint summary inside a dispatch result."""

    endpoint_id: str
    delivered: bool
    attempts: int
    delivery_id: str
    response_status: int | None = None


class DispatchResult(BaseModel):
    """Summary of fanning one record change out to subscribed endpoints.

    Attributes:
        delivered: Endpoints that acknowledged with a 2xx.
        attempted: Endpoints a delivery was run for.
        skipped: Active endpoints with no matching subscription.
        deliveries: One outcome per attempted endpoint, in delivery order.
    """

    delivered: int = 0
    attempted: int = 0
    skipped: int = 0
    deliveries: list[DispatchOutcome] = Field(default_factory=list)


__all__ = [
    "ELIGIBLE_HANDSHAKE_STATUSES",
    "DeliveryRecord",
    "DeliveryResult",
    "DeliveryStatus",
    "DeliveryUpdate",
    "DispatchOutcome",
    "DispatchResult",
    "Endpoint",
    "Subscription",
    "WebhookEnvelope",
]
