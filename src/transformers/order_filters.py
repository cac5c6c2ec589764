# src/transformers/order_filters.py
"""Drops cancelled, refunded, voided and abandoned orders."""
from datetime import datetime
from typing import Iterable, List, Optional

from src.models.models import RawOrder
from src.transformers.dates import days_since

__all__ = ["TRACKED_FINANCIAL_STATUSES", "PENDING_GRACE_DAYS", "is_valid_order", "filter_valid_orders"]

TRACKED_FINANCIAL_STATUSES = frozenset({"paid", "authorized", "partially_paid"})
PENDING_GRACE_DAYS = 7


def is_valid_order(order: RawOrder, now: Optional[datetime] = None) -> bool:
    if order.id in (None, "") or order.created_at is None:
        return False

    if order.cancelled_at is not None or order.cancel_reason:
        return False

    status = order.financial_status
    if status in TRACKED_FINANCIAL_STATUSES:
        return True
    if status == "partially_refunded":
        return order.total_refunds < order.total_price
    if status == "pending":
        return days_since(order.created_at, now) <= PENDING_GRACE_DAYS
    # refunded, voided, expired, unknown
    return False


def filter_valid_orders(
    orders: Iterable[RawOrder], now: Optional[datetime] = None
) -> List[RawOrder]:
    return [o for o in orders if is_valid_order(o, now)]
