"""Storage backends for Courier.

The webhook engine depends only on the protocols; ``CourierStorage``
is the Qdrant-backed implementation of all of them.

Example:
    ```python
    from courier.storage import CourierStorage

    async with CourierStorage() as storage:
        subscriptions = await storage.list_subscriptions("site_1", event_types=["lead.updated"])
    ```
"""

from .base import COLLECTION_NAMES
from .client import CourierStorage
from .protocols import DeliveryLedgerStore, EndpointRegistry, RecordStore

__all__ = [
    "COLLECTION_NAMES",
    "CourierStorage",
    "DeliveryLedgerStore",
    "EndpointRegistry",
    "RecordStore",
]
