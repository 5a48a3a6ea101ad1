"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from courier.models import Endpoint, Subscription

# Add tests directory to path so helpers here can be imported by test modules
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))


def make_response(status_code: int, text: str = "") -> MagicMock:
    """Create a stand-in for an httpx.Response."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.text = text
    return response


class RecordingSleep:
    """Async sleep replacement that records requested delays in seconds."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def mock_store() -> AsyncMock:
    """Mock store implementing registry, ledger and record protocols."""
    store = AsyncMock()
    store.list_endpoints = AsyncMock(return_value=[])
    store.list_subscriptions = AsyncMock(return_value=[])
    store.insert_delivery = AsyncMock(side_effect=lambda record: record.id)
    store.update_delivery = AsyncMock(return_value=None)
    store.fetch_record = AsyncMock(return_value=None)
    return store


@pytest.fixture
def http_client() -> AsyncMock:
    """Mock HTTP client whose ``request`` returns 500 unless reconfigured."""
    client = AsyncMock(spec=httpx.AsyncClient)
    client.request = AsyncMock(return_value=make_response(500, "error"))
    return client


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def endpoint() -> Endpoint:
    """A signed, verified endpoint."""
    return Endpoint(
        id="ep_1",
        site_id="site_1",
        name="CRM sync",
        target_url="https://example.com/hook",
        secret="abc",
        is_active=True,
        handshake_status="verified",
    )


@pytest.fixture
def subscription() -> Subscription:
    return Subscription(
        id="sub_1",
        site_id="site_1",
        endpoint_id="ep_1",
        event_type="lead.updated",
        is_active=True,
    )
