# tests/test_stats.py
import pytest

from src.models.models import ClassifiedOrder, RawOrder, TrackingEntry, TrackingInfo
from src.transformers.stats import age_bucket, summarize
from src.transformers.urgency import classify_urgency, is_late


def _classified(days, numbers=()):
    tracking = TrackingInfo([TrackingEntry(n, "Correios") for n in numbers])
    urgency = classify_urgency(days, tracking.has_tracking)
    return ClassifiedOrder(
        order=RawOrder(id=days),
        days_since_order=days,
        is_delivered=False,
        tracking=tracking,
        urgency_level=urgency.level,
        prazo_status=urgency.prazo_status,
        is_late=is_late(days, tracking.has_tracking),
    )


def test_empty_collection_has_zero_percentages():
    stats = summarize([])
    assert stats.active == 0
    assert stats.late_percentage == 0.0
    assert stats.tracking_percentage == 0.0
    assert stats.by_urgency == {"normal": 0, "medium": 0, "high": 0, "critical": 0}
    assert stats.by_age == {"0-7": 0, "8-15": 0, "16-30": 0, "30+": 0}


def test_counts_and_percentages():
    orders = [
        _classified(2),  # normal, not late
        _classified(9),  # critical, late
        _classified(18, ["BR1"]),  # high, late
        _classified(40, ["BR2"]),  # critical, late
    ]

    stats = summarize(orders, total_fetched=10, valid=7, delivered_filtered=3)

    assert stats.total_fetched == 10
    assert stats.valid == 7
    assert stats.delivered_filtered == 3
    assert stats.active == 4
    assert stats.by_urgency == {"normal": 1, "medium": 0, "high": 1, "critical": 2}
    assert stats.with_tracking == 2
    assert stats.without_tracking == 2
    assert stats.by_age == {"0-7": 1, "8-15": 1, "16-30": 1, "30+": 1}
    assert stats.late == 3
    assert stats.late_percentage == 75.0
    assert stats.tracking_percentage == 50.0


def test_percentage_rounded_to_one_decimal():
    stats = summarize([_classified(1), _classified(1), _classified(9)])
    assert stats.late_percentage == 33.3
    assert 0 <= stats.tracking_percentage <= 100


@pytest.mark.parametrize(
    "days, bucket", [(0, "0-7"), (7, "0-7"), (8, "8-15"), (15, "8-15"), (30, "16-30"), (31, "30+")]
)
def test_age_bucket_edges(days, bucket):
    assert age_bucket(days) == bucket


def test_to_dict_keys():
    data = summarize([_classified(1)]).to_dict()
    assert data["active"] == 1
    assert set(data) >= {"latePercentage", "trackingPercentage", "byUrgency", "byAge"}
