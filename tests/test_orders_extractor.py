# tests/test_orders_extractor.py
import threading
from types import SimpleNamespace

import pytest

from src.errors import FetchCancelledError, UpstreamFetchError
from src.extractors.orders_extractor import OnError, extract_orders


class StubClient:
    """Serves canned pages; an Exception instance in ``pages`` is raised."""

    def __init__(self, pages):
        self.pages = list(pages)
        self.calls = []

    def get_orders_page(self, created_at_min=None, page_info=None, limit=None):
        self.calls.append({"created_at_min": created_at_min, "page_info": page_info})
        page = self.pages[len(self.calls) - 1]
        if isinstance(page, Exception):
            raise page
        return page


def test_follows_cursor_until_last_page():
    client = StubClient(
        [
            ([{"id": 1}, {"id": 2}], "c2"),
            ([{"id": 3}], "c3"),
            ([{"id": 4}], None),
        ]
    )

    result = extract_orders(client, lookback_days=90, max_pages=10)

    assert [o["id"] for o in result.orders] == [1, 2, 3, 4]
    assert result.pages_processed == 3
    assert result.reached_page_limit is False
    assert result.partial is False
    assert [c["page_info"] for c in client.calls] == [None, "c2", "c3"]


def test_page_ceiling_stops_without_error():
    client = SimpleNamespace(
        get_orders_page=lambda **kwargs: ([{"id": 1}], "always-more"),
    )

    result = extract_orders(client, lookback_days=90, max_pages=2)

    assert result.pages_processed == 2
    assert len(result.orders) == 2
    assert result.reached_page_limit is True
    assert result.partial is True


def test_empty_page_terminates():
    client = StubClient([([{"id": 1}], "c2"), ([], "c3")])

    result = extract_orders(client, max_pages=10)

    assert result.orders == [{"id": 1}]
    assert result.pages_processed == 2
    assert len(client.calls) == 2


def test_empty_first_page():
    client = StubClient([([], None)])
    result = extract_orders(client)
    assert result.orders == []
    assert result.pages_processed == 1


def test_created_at_min_uses_lookback_window():
    client = StubClient([([], None)])
    extract_orders(client, lookback_days=30)
    assert client.calls[0]["created_at_min"].endswith("+00:00")


class TestFailurePolicy:
    def test_abort_discards_partial_pages(self):
        client = StubClient(
            [([{"id": 1}], "c2"), UpstreamFetchError("down", status_code=502)]
        )

        with pytest.raises(UpstreamFetchError) as exc:
            extract_orders(client, on_error=OnError.ABORT)
        assert exc.value.status_code == 502

    def test_return_partial_keeps_earlier_pages(self):
        client = StubClient(
            [([{"id": 1}], "c2"), UpstreamFetchError("down", status_code=502)]
        )

        result = extract_orders(client, on_error="return_partial")

        assert result.orders == [{"id": 1}]
        assert result.pages_processed == 1
        assert result.error.status_code == 502
        assert result.partial is True

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            extract_orders(StubClient([]), on_error="ignore")


def test_cancellation_checked_before_each_call():
    cancel = threading.Event()

    class CancellingClient(StubClient):
        def get_orders_page(self, **kwargs):
            page = super().get_orders_page(**kwargs)
            cancel.set()
            return page

    client = CancellingClient([([{"id": 1}], "c2"), ([{"id": 2}], None)])

    with pytest.raises(FetchCancelledError):
        extract_orders(client, cancel=cancel)
    assert len(client.calls) == 1
