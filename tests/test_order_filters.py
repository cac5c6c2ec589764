# tests/test_order_filters.py
import pytest

from src.models.models import RawOrder
from src.transformers.order_filters import filter_valid_orders, is_valid_order


@pytest.mark.parametrize("status", ["paid", "authorized", "partially_paid", "PAID"])
def test_tracked_financial_statuses(order_factory, now, status):
    order = RawOrder.from_dict(order_factory(financial_status=status))
    assert is_valid_order(order, now)


@pytest.mark.parametrize("status", ["refunded", "voided", "expired", "", None])
def test_untracked_financial_statuses(order_factory, now, status):
    order = RawOrder.from_dict(order_factory(financial_status=status))
    assert not is_valid_order(order, now)


def test_cancelled_by_timestamp(order_factory, days_ago, now):
    order = RawOrder.from_dict(order_factory(cancelled_at=days_ago(1)))
    assert not is_valid_order(order, now)


def test_cancelled_by_reason_only(order_factory, now):
    order = RawOrder.from_dict(order_factory(cancel_reason="customer"))
    assert not is_valid_order(order, now)


class TestPartiallyRefunded:
    def test_fully_refunded_excluded(self, order_factory, now):
        order = RawOrder.from_dict(
            order_factory(
                financial_status="partially_refunded", total_price="100", total_refunds="100"
            )
        )
        assert not is_valid_order(order, now)

    def test_partial_refund_kept(self, order_factory, now):
        order = RawOrder.from_dict(
            order_factory(
                financial_status="partially_refunded", total_price="100", total_refunds="30.5"
            )
        )
        assert is_valid_order(order, now)

    def test_refund_amount_from_transactions(self, order_factory, now):
        order = RawOrder.from_dict(
            order_factory(
                financial_status="partially_refunded",
                total_price="100",
                refunds=[
                    {"transactions": [{"kind": "refund", "amount": "60.00"}]},
                    {"transactions": [{"kind": "refund", "amount": "40.00"}]},
                ],
            )
        )
        assert order.total_refunds == 100.0
        assert not is_valid_order(order, now)


class TestPending:
    def test_recent_pending_kept(self, order_factory, now):
        order = RawOrder.from_dict(order_factory(age_days=7, financial_status="pending"))
        assert is_valid_order(order, now)

    def test_abandoned_pending_dropped(self, order_factory, now):
        order = RawOrder.from_dict(order_factory(age_days=8, financial_status="pending"))
        assert not is_valid_order(order, now)


def test_missing_id_or_creation_time(order_factory, now):
    assert not is_valid_order(RawOrder.from_dict(order_factory(id=None)), now)
    assert not is_valid_order(RawOrder.from_dict(order_factory(created_at=None)), now)
    assert not is_valid_order(RawOrder.from_dict(order_factory(created_at="not a date")), now)


def test_filter_preserves_order(order_factory, now):
    orders = [
        RawOrder.from_dict(order_factory(id=3)),
        RawOrder.from_dict(order_factory(id=2, financial_status="refunded")),
        RawOrder.from_dict(order_factory(id=1)),
    ]
    assert [o.id for o in filter_valid_orders(orders, now)] == [3, 1]
