# src/transformers/stats.py
from typing import Dict, Iterable, List

from src.models.models import ClassifiedOrder, Stats, UrgencyLevel

__all__ = ["AGE_BUCKETS", "age_bucket", "summarize"]

# (upper bound inclusive, label); the last bucket catches everything older
AGE_BUCKETS = [(7, "0-7"), (15, "8-15"), (30, "16-30")]
OLDEST_BUCKET = "30+"

URGENCY_LEVELS = (
    UrgencyLevel.NORMAL,
    UrgencyLevel.MEDIUM,
    UrgencyLevel.HIGH,
    UrgencyLevel.CRITICAL,
)


def _percentage(count: int, total: int) -> float:
    if not total:
        return 0.0
    return round(count / total * 100, 1)


def age_bucket(days: int) -> str:
    for upper, label in AGE_BUCKETS:
        if days <= upper:
            return label
    return OLDEST_BUCKET


def summarize(
    active_orders: Iterable[ClassifiedOrder],
    total_fetched: int = 0,
    valid: int = 0,
    delivered_filtered: int = 0,
) -> Stats:
    orders: List[ClassifiedOrder] = list(active_orders)
    active = len(orders)

    by_urgency: Dict[str, int] = {level.value: 0 for level in URGENCY_LEVELS}
    by_age: Dict[str, int] = {label: 0 for _, label in AGE_BUCKETS}
    by_age[OLDEST_BUCKET] = 0

    with_tracking = late = 0
    for o in orders:
        by_urgency[o.urgency_level.value] = by_urgency.get(o.urgency_level.value, 0) + 1
        by_age[age_bucket(o.days_since_order)] += 1
        if o.has_tracking:
            with_tracking += 1
        if o.is_late:
            late += 1

    return Stats(
        total_fetched=total_fetched,
        valid=valid,
        delivered_filtered=delivered_filtered,
        active=active,
        by_urgency=by_urgency,
        with_tracking=with_tracking,
        without_tracking=active - with_tracking,
        by_age=by_age,
        late=late,
        late_percentage=_percentage(late, active),
        tracking_percentage=_percentage(with_tracking, active),
    )
