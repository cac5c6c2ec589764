# tests/conftest.py

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# make the project root importable (so both src/ and config/ work)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def days_ago():
    """ISO timestamp ``n`` days (plus a few minutes) before NOW."""

    def _days_ago(n: float) -> str:
        return (NOW - timedelta(days=n, minutes=5)).isoformat()

    return _days_ago


@pytest.fixture
def order_factory(days_ago):
    """Minimal valid Shopify order payload with overrides."""

    def _order(age_days: float = 5, **overrides):
        order = {
            "id": 5001,
            "name": "#1001",
            "order_number": 1001,
            "created_at": days_ago(age_days),
            "financial_status": "paid",
            "fulfillment_status": None,
            "total_price": "150.00",
            "currency": "BRL",
            "tags": "",
            "note": None,
            "note_attributes": [],
            "line_items": [],
            "fulfillments": [],
        }
        order.update(overrides)
        return order

    return _order
