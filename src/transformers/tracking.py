# src/transformers/tracking.py
"""Collects the tracking numbers scattered across an order's fulfillments."""
from typing import Optional

from src.models.models import RawOrder, TrackingEntry, TrackingInfo

DEFAULT_CARRIER = "unspecified"


def aggregate_tracking(order: RawOrder) -> TrackingInfo:
    """
    Build the deduplicated tracking set for one order.

    Sources are visited in a fixed order: the order-level ``tracking_numbers``,
    then each fulfillment's ``tracking_number``, then each fulfillment's
    ``tracking_numbers``. A number is kept the first time it is seen (exact,
    case-sensitive match, no trimming) together with the best carrier/URL
    available there.
    """
    info = TrackingInfo()
    seen = set()

    def add(number: str, carrier: str = "", url: Optional[str] = None):
        if not number.strip() or number in seen:
            return
        seen.add(number)
        info.entries.append(
            TrackingEntry(number=number, carrier=carrier or DEFAULT_CARRIER, url=url or None)
        )

    for number in order.tracking_numbers:
        add(number)

    for f in order.fulfillments:
        if f.tracking_number:
            url = f.tracking_url or (f.tracking_urls[0] if f.tracking_urls else None)
            carrier = f.tracking_company or (
                f.tracking_companies[0] if f.tracking_companies else ""
            )
            add(f.tracking_number, carrier, url)

    for f in order.fulfillments:
        for i, number in enumerate(f.tracking_numbers):
            # tracking_urls and tracking_companies may be shorter than tracking_numbers
            url = f.tracking_urls[i] if i < len(f.tracking_urls) else None
            carrier = f.tracking_companies[i] if i < len(f.tracking_companies) else ""
            add(number, carrier or f.tracking_company, url)

    return info
