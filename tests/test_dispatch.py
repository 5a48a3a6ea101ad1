"""Tests for fanning a record change out to subscribed endpoints."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from conftest import RecordingSleep, make_response
from courier.exceptions import RecordNotFoundError, ResolutionError
from courier.models import Endpoint, Subscription
from courier.webhooks import (
    RecordFetcher,
    SubscriptionResolver,
    WebhookDeliverer,
    WebhookDispatcher,
)


def make_endpoint(endpoint_id: str, **kwargs: object) -> Endpoint:
    return Endpoint(
        id=endpoint_id,
        site_id="site_1",
        target_url=f"https://example.com/{endpoint_id}",
        secret="abc",
        **kwargs,
    )


def make_subscription(
    subscription_id: str, endpoint_id: str, event_type: str = "lead.updated"
) -> Subscription:
    return Subscription(
        id=subscription_id,
        site_id="site_1",
        endpoint_id=endpoint_id,
        event_type=event_type,
    )


@pytest.fixture
def dispatcher(
    mock_store: AsyncMock, http_client: AsyncMock, sleep: RecordingSleep
) -> WebhookDispatcher:
    return WebhookDispatcher(
        SubscriptionResolver(mock_store),
        RecordFetcher(mock_store),
        WebhookDeliverer(mock_store, http_client=http_client, max_attempts=2, sleep=sleep),
    )


async def dispatch(dispatcher: WebhookDispatcher, **overrides: object):
    kwargs: dict[str, object] = {
        "site_id": "site_1",
        "table": "leads",
        "event_type": "UPDATE",
        "object_id": "L1",
    }
    kwargs.update(overrides)
    return await dispatcher.dispatch(**kwargs)


class TestDispatch:
    """Tests for WebhookDispatcher.dispatch."""

    async def test_no_endpoints_short_circuits(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock, http_client: AsyncMock
    ) -> None:
        mock_store.list_subscriptions.return_value = [make_subscription("s1", "ep_a")]

        result = await dispatch(dispatcher)

        assert result.attempted == 0
        assert result.delivered == 0
        assert result.skipped == 0
        mock_store.fetch_record.assert_not_called()
        http_client.request.assert_not_called()

    async def test_no_subscriptions_skips_all_endpoints(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock, http_client: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [make_endpoint("ep_a"), make_endpoint("ep_b")]

        result = await dispatch(dispatcher)

        assert result.attempted == 0
        assert result.skipped == 2
        mock_store.fetch_record.assert_not_called()
        http_client.request.assert_not_called()

    async def test_delivers_to_subscribed_endpoints_only(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock, http_client: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [
            make_endpoint("ep_a"),
            make_endpoint("ep_b"),
            make_endpoint("ep_c"),
        ]
        mock_store.list_subscriptions.return_value = [
            make_subscription("s_a", "ep_a"),
            make_subscription("s_c", "ep_c"),
        ]
        mock_store.fetch_record.return_value = {"id": "L1", "name": "Ada"}
        http_client.request.return_value = make_response(200)

        result = await dispatch(dispatcher)

        assert result.attempted == 2
        assert result.delivered == 2
        assert result.skipped == 1
        assert [d.endpoint_id for d in result.deliveries] == ["ep_a", "ep_c"]
        urls = [call.args[1] for call in http_client.request.call_args_list]
        assert [url.split("?")[0] for url in urls] == [
            "https://example.com/ep_a",
            "https://example.com/ep_c",
        ]
        mock_store.fetch_record.assert_awaited_once_with("leads", "L1")

        subscription_ids = [
            call.args[0].subscription_id for call in mock_store.insert_delivery.call_args_list
        ]
        assert subscription_ids == ["s_a", "s_c"]

    async def test_ineligible_endpoints_are_not_targets(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock, http_client: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [
            make_endpoint("ep_a", handshake_status="failed"),
            make_endpoint("ep_b", is_active=False),
        ]
        mock_store.list_subscriptions.return_value = [
            make_subscription("s_a", "ep_a"),
            make_subscription("s_b", "ep_b"),
        ]

        result = await dispatch(dispatcher)

        assert result.attempted == 0
        http_client.request.assert_not_called()

    async def test_last_subscription_per_endpoint_wins(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock, http_client: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [make_endpoint("ep_a")]
        mock_store.list_subscriptions.return_value = [
            make_subscription("s_first", "ep_a"),
            make_subscription("s_second", "ep_a"),
        ]
        mock_store.fetch_record.return_value = {"id": "L1"}
        http_client.request.return_value = make_response(200)

        result = await dispatch(dispatcher)

        assert result.attempted == 1
        record = mock_store.insert_delivery.call_args.args[0]
        assert record.subscription_id == "s_second"

    async def test_failed_delivery_counted(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock, http_client: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [make_endpoint("ep_a"), make_endpoint("ep_b")]
        mock_store.list_subscriptions.return_value = [
            make_subscription("s_a", "ep_a"),
            make_subscription("s_b", "ep_b"),
        ]
        mock_store.fetch_record.return_value = {"id": "L1"}
        # ep_a: GET ok. ep_b: two failed cycles (GET + POST each).
        http_client.request.side_effect = [make_response(200)] + [make_response(500)] * 4

        result = await dispatch(dispatcher)

        assert result.attempted == 2
        assert result.delivered == 1
        assert [(d.endpoint_id, d.delivered, d.attempts) for d in result.deliveries] == [
            ("ep_a", True, 1),
            ("ep_b", False, 2),
        ]
        assert result.deliveries[1].response_status == 500

    async def test_subscription_query_uses_name_variants(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [make_endpoint("ep_a")]

        await dispatch(dispatcher, event="Tasks.Created")

        kwargs = mock_store.list_subscriptions.call_args.kwargs
        assert kwargs["event_types"] == ["tasks.created", "task.created"]

    async def test_record_sent_as_data(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock, http_client: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [make_endpoint("ep_a")]
        mock_store.list_subscriptions.return_value = [make_subscription("s_a", "ep_a")]
        mock_store.fetch_record.return_value = {"id": "L1", "name": "Ada"}
        http_client.request.side_effect = [make_response(404), make_response(200)]

        await dispatch(dispatcher)

        body = json.loads(http_client.request.call_args.kwargs["content"])
        assert body["data"] == {"id": "L1", "name": "Ada"}
        assert body["type"] == "lead.updated"

    async def test_subscription_allow_list_forwarded(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [make_endpoint("ep_a")]

        await dispatch(dispatcher, subscription_ids=["s_a"])

        kwargs = mock_store.list_subscriptions.call_args.kwargs
        assert kwargs["subscription_ids"] == ["s_a"]

    async def test_missing_record_raises(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock, http_client: AsyncMock
    ) -> None:
        mock_store.list_endpoints.return_value = [make_endpoint("ep_a")]
        mock_store.list_subscriptions.return_value = [make_subscription("s_a", "ep_a")]

        with pytest.raises(RecordNotFoundError):
            await dispatch(dispatcher)

        http_client.request.assert_not_called()

    async def test_registry_failure_raises(
        self, dispatcher: WebhookDispatcher, mock_store: AsyncMock
    ) -> None:
        mock_store.list_endpoints.side_effect = ConnectionError("registry down")

        with pytest.raises(ResolutionError):
            await dispatch(dispatcher)
