#!/usr/bin/env python3
"""Webhook delivery demo.

Runs a full dispatch against an in-memory Qdrant and a fake receiver:

- Event names are derived from table + change type (leads/UPDATE -> lead.updated)
- Every attempt is signed with HMAC-SHA256 over the exact JSON body
- The receiver ignores GET pings and fails the first POST, so the
  delivery succeeds on its second attempt cycle

No external dependencies required - runs entirely locally.
"""

import asyncio

import httpx
from qdrant_client import AsyncQdrantClient

from courier.models import Endpoint, Subscription
from courier.storage import CourierStorage
from courier.webhooks import (
    SIGNATURE_HEADER,
    RecordFetcher,
    SubscriptionResolver,
    WebhookDeliverer,
    WebhookDispatcher,
    build_event_name,
    verify_signature,
)

SECRET = "demo-secret"


def make_receiver() -> httpx.MockTransport:
    posts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal posts
        print(f"  <- {request.method} {request.url}")
        if request.method == "GET":
            return httpx.Response(405)

        posts += 1
        signature = request.headers[SIGNATURE_HEADER]
        valid = verify_signature(request.content.decode(), SECRET, signature)
        print(f"     signature valid: {valid}")
        if posts == 1:
            return httpx.Response(503, text="warming up")
        return httpx.Response(200, text="ok")

    return httpx.MockTransport(handler)


async def no_sleep(seconds: float) -> None:
    print(f"  .. backing off {seconds:.1f}s (skipped in demo)")


async def main() -> None:
    print("=" * 70)
    print("Courier Webhook Delivery Demo")
    print("=" * 70)

    print("\n1. EVENT NAMES")
    print("-" * 70)
    for table, change in [("leads", "UPDATE"), ("companies", "insert"), ("classes", "remove")]:
        print(f"  {table:<10} {change:<8} -> {build_event_name(table, change)}")

    print("\n2. DISPATCH")
    print("-" * 70)
    storage = CourierStorage(prefix="demo", client=AsyncQdrantClient(location=":memory:"))
    await storage.initialize()

    await storage.store_endpoint(
        Endpoint(
            id="ep_crm",
            site_id="site_1",
            name="CRM sync",
            target_url="https://receiver.example/hooks",
            secret=SECRET,
            handshake_status="verified",
        )
    )
    await storage.store_subscription(
        Subscription(id="sub_1", site_id="site_1", endpoint_id="ep_crm", event_type="lead.updated")
    )
    await storage.store_record("leads", {"id": "L1", "name": "Ada Lovelace"})

    async with httpx.AsyncClient(transport=make_receiver()) as http_client:
        dispatcher = WebhookDispatcher(
            SubscriptionResolver(storage),
            RecordFetcher(storage),
            WebhookDeliverer(storage, http_client=http_client, sleep=no_sleep),
        )
        result = await dispatcher.dispatch(
            site_id="site_1", table="leads", event_type="UPDATE", object_id="L1"
        )

    print(f"\n  attempted={result.attempted} delivered={result.delivered}")

    print("\n3. LEDGER")
    print("-" * 70)
    for outcome in result.deliveries:
        row = await storage.get_delivery(outcome.delivery_id)
        if row is not None:
            print(f"  {row.id}: status={row.status} attempts={row.attempt_count}")
            print(f"  last response: {row.response_status} {row.response_body!r}")

    await storage.close()


if __name__ == "__main__":
    asyncio.run(main())
