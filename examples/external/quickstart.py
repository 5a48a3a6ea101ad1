#!/usr/bin/env python3
"""Courier quickstart against a running Qdrant.

Prerequisites:
    docker run -p 6333:6333 qdrant/qdrant
    export COURIER_QDRANT_URL=http://localhost:6333
    export RECEIVER_URL=https://your-receiver.example/hooks

Seeds one endpoint and subscription, then dispatches a lead update.
"""

import asyncio
import os

from courier import configure_logging
from courier.models import Endpoint, Subscription
from courier.storage import CourierStorage
from courier.webhooks import (
    RecordFetcher,
    SubscriptionResolver,
    WebhookDeliverer,
    WebhookDispatcher,
)


async def main() -> None:
    configure_logging(format="text")
    receiver_url = os.environ.get("RECEIVER_URL", "https://httpbin.org/status/200")

    async with CourierStorage() as storage:
        await storage.store_endpoint(
            Endpoint(
                id="ep_quickstart",
                site_id="site_demo",
                target_url=receiver_url,
                secret=os.environ.get("RECEIVER_SECRET", "change-me"),
            )
        )
        await storage.store_subscription(
            Subscription(
                id="sub_quickstart",
                site_id="site_demo",
                endpoint_id="ep_quickstart",
                event_type="lead.updated",
            )
        )
        await storage.store_record("leads", {"id": "L1", "name": "Ada Lovelace"})

        dispatcher = WebhookDispatcher(
            SubscriptionResolver(storage),
            RecordFetcher(storage),
            WebhookDeliverer(storage, max_attempts=2),
        )
        result = await dispatcher.dispatch(
            site_id="site_demo", table="leads", event_type="UPDATE", object_id="L1"
        )
        print(result.model_dump_json(indent=2))


if __name__ == "__main__":
    asyncio.run(main())
