#!/usr/bin/env python3
# src/transformers/order_enricher.py
"""Classifies active orders: age, delivery, tracking and SLA urgency."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.models.models import ClassifiedOrder, RawOrder, UrgencyLevel
from src.transformers.dates import days_since, to_store_timezone, utc_now
from src.transformers.delivery import is_delivered
from src.transformers.order_filters import filter_valid_orders
from src.transformers.tracking import aggregate_tracking
from src.transformers.urgency import classify_urgency, is_late

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

URGENCY_RANK = {
    UrgencyLevel.CRITICAL: 0,
    UrgencyLevel.HIGH: 1,
    UrgencyLevel.MEDIUM: 2,
    UrgencyLevel.NORMAL: 3,
    UrgencyLevel.DELIVERED: 4,
}


@dataclass
class EnrichmentResult:
    active: List[ClassifiedOrder] = field(default_factory=list)
    total_fetched: int = 0
    valid: int = 0
    delivered: int = 0


def classify_order(
    order: RawOrder,
    now: Optional[datetime] = None,
    store_timezone: str = "America/Sao_Paulo",
) -> ClassifiedOrder:
    """
    Enrich a single order with its derived fields.

    Args:
        order: Parsed upstream order
        now: Reference time (defaults to the current UTC time)
        store_timezone: Timezone used for ``created_at_local``

    Returns:
        ClassifiedOrder wrapping the untouched order
    """
    now = now or utc_now()
    days = days_since(order.created_at, now)
    delivered = is_delivered(order, now)
    tracking = aggregate_tracking(order)
    urgency = classify_urgency(days, tracking.has_tracking, delivered)

    return ClassifiedOrder(
        order=order,
        days_since_order=days,
        is_delivered=delivered,
        tracking=tracking,
        urgency_level=urgency.level,
        prazo_status=urgency.prazo_status,
        is_late=is_late(days, tracking.has_tracking),
        created_at_local=to_store_timezone(order.created_at, store_timezone),
    )


def sort_orders(orders: List[ClassifiedOrder]) -> List[ClassifiedOrder]:
    """Most urgent first, then oldest first, then by id."""
    return sorted(
        orders,
        key=lambda o: (
            URGENCY_RANK.get(o.urgency_level, len(URGENCY_RANK)),
            -o.days_since_order,
            str(o.order.id),
        ),
    )


def parse_orders(raw_orders: List[Dict[str, Any]]) -> List[RawOrder]:
    if not raw_orders:
        return []

    return [RawOrder.from_dict(order) for order in raw_orders if isinstance(order, dict)]


def enrich_orders(
    raw_orders: List[Dict[str, Any]],
    now: Optional[datetime] = None,
    store_timezone: str = "America/Sao_Paulo",
) -> EnrichmentResult:
    """
    Filter, classify and sort a fetched order collection.

    Delivered orders are counted and dropped; only active orders are returned,
    sorted most urgent first.
    """
    now = now or utc_now()
    parsed = parse_orders(raw_orders)
    valid = filter_valid_orders(parsed, now)

    result = EnrichmentResult(total_fetched=len(raw_orders or []), valid=len(valid))
    active = []
    for order in valid:
        classified = classify_order(order, now, store_timezone)
        if classified.is_delivered:
            result.delivered += 1
            continue
        active.append(classified)

    result.active = sort_orders(active)
    logger.info(
        "Classified orders: %d fetched, %d valid, %d delivered, %d active",
        result.total_fetched,
        result.valid,
        result.delivered,
        len(result.active),
    )
    return result
