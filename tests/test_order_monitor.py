# tests/test_order_monitor.py
"""Tests for the boundary operations and their JSON envelopes."""
import json

import pytest

from config.config import Config
from src.errors import (
    ConfigurationError,
    MalformedInputError,
    OrderNotFoundError,
    UpstreamFetchError,
)
from src.models.models import Degraded, Ok
from src.services import order_monitor
from src.services.order_monitor import (
    fetch_customer_orders_count,
    get_order_detail,
    health_check,
    list_active_orders,
    validate_order_id,
)
from src.services.responses import error_envelope, order_envelope, orders_envelope


class StubClient:
    def __init__(self, pages=None, order=None, customer_count=None):
        self.pages = list(pages or [])
        self.order = order
        self.customer_count = customer_count
        self.order_requests = []

    def get_orders_page(self, created_at_min=None, page_info=None, limit=None):
        page = self.pages.pop(0)
        if isinstance(page, Exception):
            raise page
        return page

    def get_order(self, order_id):
        self.order_requests.append(order_id)
        if isinstance(self.order, Exception):
            raise self.order
        return self.order

    def get_customer_orders_count(self, customer_id):
        if isinstance(self.customer_count, Exception):
            raise self.customer_count
        return self.customer_count


@pytest.fixture
def config():
    return Config(access_token="tok", max_pages=5)


class TestListActiveOrders:
    def test_end_to_end(self, config, order_factory, now):
        client = StubClient(
            pages=[
                ([order_factory(id=1, age_days=9), order_factory(id=2, tags="entregue")], "c2"),
                ([order_factory(id=3, financial_status="voided")], None),
            ]
        )

        result = list_active_orders(config, client=client, now=now)

        assert [o.order.id for o in result.orders] == [1]
        assert result.pages_processed == 2
        assert result.partial is False
        assert result.stats.total_fetched == 3
        assert result.stats.valid == 2
        assert result.stats.delivered_filtered == 1
        assert result.stats.active == 1
        assert result.stats.late_percentage == 100.0

    def test_page_ceiling_reported(self, config, order_factory, now):
        client = StubClient(pages=[([order_factory(id=i)], f"c{i}") for i in range(5)])

        result = list_active_orders(config, max_pages=2, client=client, now=now)

        assert result.pages_processed == 2
        assert result.reached_page_limit is True
        assert orders_envelope(result)["partial"] is True

    def test_abort_policy_propagates(self, config, order_factory, now):
        client = StubClient(pages=[([order_factory()], "c2"), UpstreamFetchError("x", 500)])
        with pytest.raises(UpstreamFetchError):
            list_active_orders(config, client=client, now=now)

    def test_return_partial_policy(self, config, order_factory, now):
        client = StubClient(pages=[([order_factory()], "c2"), UpstreamFetchError("x", 500)])

        result = list_active_orders(config, on_error="return_partial", client=client, now=now)

        assert len(result.orders) == 1
        envelope = orders_envelope(result)
        assert envelope["success"] is True
        assert envelope["partial"] is True
        assert "HTTP 500" in envelope["error"]

    def test_missing_token_short_circuits(self):
        with pytest.raises(ConfigurationError):
            list_active_orders(Config(access_token=None))


class TestGetOrderDetail:
    @pytest.mark.parametrize("order_id", ["", None, "12a", "#1001", "-5"])
    def test_malformed_id_rejected_before_fetch(self, config, order_id):
        client = StubClient(order={"id": 1})
        with pytest.raises(MalformedInputError):
            get_order_detail(config, order_id, client=client)
        assert client.order_requests == []

    def test_id_trimmed(self):
        assert validate_order_id(" 123 ") == "123"
        assert validate_order_id(123) == "123"

    def test_detail_with_customer_history(self, config, order_factory):
        client = StubClient(order=order_factory(customer={"id": 9}), customer_count=5)

        detail = get_order_detail(config, "5001", client=client)

        assert client.order_requests == ["5001"]
        assert detail.order["customer"]["orders_count"] == 5
        assert detail.customer_orders_degraded is False

    def test_customer_history_failure_is_degraded(self, config, order_factory):
        client = StubClient(
            order=order_factory(customer={"id": 9}),
            customer_count=UpstreamFetchError("boom", 503),
        )

        detail = get_order_detail(config, "5001", client=client)

        assert detail.order["customer"]["orders_count"] == 1
        assert detail.customer_orders_degraded is True

    def test_not_found_propagates(self, config):
        client = StubClient(order=OrderNotFoundError("404"))
        with pytest.raises(OrderNotFoundError):
            get_order_detail(config, "404", client=client)


def test_fetch_customer_orders_count_results():
    assert fetch_customer_orders_count(StubClient(customer_count=7), 1) == Ok(7)

    result = fetch_customer_orders_count(StubClient(customer_count=UpstreamFetchError("x")), 1)
    assert isinstance(result, Degraded)
    assert result.value == order_monitor.DEFAULT_CUSTOMER_ORDERS
    assert result.degraded is True


class TestEnvelopes:
    def test_orders_envelope_is_json_serializable(self, config, order_factory, now):
        client = StubClient(pages=[([order_factory(age_days=3)], None)])
        envelope = orders_envelope(list_active_orders(config, client=client, now=now))

        payload = json.loads(json.dumps(envelope, default=str))
        assert payload["success"] is True
        assert payload["total"] == 1
        assert payload["orders"][0]["prazoStatus"] == "aguardando"
        assert payload["stats"]["active"] == 1
        assert "error" not in payload

    def test_order_envelope(self, config, order_factory):
        client = StubClient(order=order_factory())
        envelope = order_envelope(get_order_detail(config, "5001", client=client))
        assert envelope["success"] is True
        assert envelope["order"]["id"] == 5001

    def test_known_error(self):
        envelope = error_envelope(OrderNotFoundError("77"))
        assert envelope == {
            "success": False,
            "error": "not_found",
            "message": "Order 77 not found (HTTP 404)",
        }

    def test_unexpected_error_hides_details(self):
        envelope = error_envelope(RuntimeError("secret stack detail"))
        assert envelope["error"] == "internal"
        assert "secret" not in envelope["message"]
        assert "trace" not in envelope

    def test_debug_adds_trace(self):
        try:
            raise MalformedInputError("bad id")
        except MalformedInputError as e:
            envelope = error_envelope(e, debug=True)
        assert "MalformedInputError" in envelope["trace"]


def test_health_check():
    data = health_check()
    assert data["success"] is True
    assert data["timestamp"]


class TestConfig:
    def test_from_env(self):
        cfg = Config.from_env(
            {
                "SHOPIFY_DOMAIN": "loja.myshopify.com",
                "SHOPIFY_ACCESS_TOKEN": "abc",
                "ORDERS_MAX_PAGES": "15",
                "ORDERS_ON_ERROR": "return_partial",
                "APP_DEBUG": "true",
            }
        )
        assert cfg.api_url == "https://loja.myshopify.com/admin/api/2024-01"
        assert cfg.max_pages == 15
        assert cfg.lookback_days == 90
        assert cfg.on_error == "return_partial"
        assert cfg.debug is True
        assert cfg.require_token() == "abc"

    def test_missing_token(self):
        cfg = Config.from_env({})
        assert cfg.access_token is None
        with pytest.raises(ConfigurationError):
            cfg.require_token()
