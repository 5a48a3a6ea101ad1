"""Tests for Courier structured logging."""

import pytest
import structlog

from courier.exceptions import ConfigurationError
from courier.logging import (
    bind_context,
    bound_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_configure_with_defaults(self):
        configure_logging()
        get_logger("test").info("test message")

    def test_configure_with_text_format(self):
        configure_logging(level="DEBUG", format="text")
        get_logger("test").debug("text format message")

    def test_configure_with_json_format(self):
        configure_logging(level="INFO", format="json")
        get_logger("test").info("json format message")

    def test_unknown_format_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown log format"):
            configure_logging(format="xml")


class TestContext:
    """Tests for context binding."""

    def test_bind_and_unbind(self):
        bind_context(delivery_id="d_1", endpoint_id="ep_1")
        assert structlog.contextvars.get_contextvars() == {
            "delivery_id": "d_1",
            "endpoint_id": "ep_1",
        }

        unbind_context("endpoint_id")
        assert structlog.contextvars.get_contextvars() == {"delivery_id": "d_1"}

    def test_clear(self):
        bind_context(delivery_id="d_1")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_bound_context_restores_on_exit(self):
        bind_context(site_id="site_1")

        with bound_context(delivery_id="d_1"):
            assert structlog.contextvars.get_contextvars() == {
                "site_id": "site_1",
                "delivery_id": "d_1",
            }

        assert structlog.contextvars.get_contextvars() == {"site_id": "site_1"}

    def test_bound_context_restores_on_error(self):
        with pytest.raises(RuntimeError), bound_context(delivery_id="d_1"):
            raise RuntimeError("boom")

        assert structlog.contextvars.get_contextvars() == {}
