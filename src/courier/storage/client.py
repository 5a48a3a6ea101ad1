"""Qdrant storage client for Courier.

Combines the registry, ledger and record mixins into one store that
satisfies ``EndpointRegistry``, ``DeliveryLedgerStore`` and ``RecordStore``.

Example:
    ```python
    from courier.storage import CourierStorage

    async with CourierStorage() as storage:
        endpoints = await storage.list_endpoints("site_1")
    ```
"""

from __future__ import annotations

from .base import StorageBase
from .ledger import LedgerMixin
from .records import RecordMixin
from .registry import RegistryMixin


class CourierStorage(RegistryMixin, LedgerMixin, RecordMixin, StorageBase):
    """Async Qdrant-backed store for the webhook engine.

    This class combines functionality from multiple mixins:
    - RegistryMixin: store_endpoint, store_subscription, list_endpoints, list_subscriptions
    - LedgerMixin: insert_delivery, update_delivery, get_delivery, list_deliveries
    - RecordMixin: store_record, fetch_record
    """
