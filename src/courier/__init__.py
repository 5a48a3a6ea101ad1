"""Courier: signed webhook delivery for record changes.

Notifies subscribers about created/updated/deleted records by delivering
HMAC-signed HTTP callbacks, retrying with backoff, and keeping one audit
row per delivery.

Quick Start:
    from courier.storage import CourierStorage
    from courier.webhooks import SubscriptionResolver, WebhookDeliverer

    async with CourierStorage() as storage:
        resolver = SubscriptionResolver(storage)
        deliverer = WebhookDeliverer(storage)

        for endpoint in await resolver.list_active_endpoints("site_1"):
            result = await deliverer.deliver(
                site_id="site_1",
                endpoint=endpoint,
                event_type="UPDATE",
                table="leads",
                object_id="L1",
                record={"id": "L1"},
            )
"""

__version__ = "0.1.0"

# Configuration
from .config import Settings, settings

# Exceptions
from .exceptions import (
    ConfigurationError,
    CourierError,
    LedgerError,
    NotFoundError,
    RecordNotFoundError,
    ResolutionError,
    StorageError,
    ValidationError,
)

# Logging
from .logging import (
    bind_context,
    bound_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)

# Models
from .models import (
    DeliveryRecord,
    DeliveryResult,
    DispatchResult,
    Endpoint,
    Subscription,
    WebhookEnvelope,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Settings",
    "settings",
    # Exceptions
    "CourierError",
    "ValidationError",
    "NotFoundError",
    "RecordNotFoundError",
    "StorageError",
    "ResolutionError",
    "LedgerError",
    "ConfigurationError",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "bound_context",
    "clear_context",
    "unbind_context",
    # Models
    "Endpoint",
    "Subscription",
    "DeliveryRecord",
    "WebhookEnvelope",
    "DeliveryResult",
    "DispatchResult",
]
