# src/transformers/delivery.py
"""
Decides whether an order already reached the customer.

Shopify rarely reports a terminal shipment status for Brazilian carriers, so
delivery is inferred from several weak signals. The rules run in order and the
first one that matches wins; cheap, reliable signals come first and the
elapsed-time fallback comes last.
"""
import unicodedata
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional

from src.models.models import RawOrder
from src.transformers.dates import days_since

DELIVERED_TAGS = ("entregue", "delivered", "finalizado", "concluido", "completo")
DELIVERED_NOTE_WORDS = ("entregue", "delivered")
PRESUMED_DELIVERED_AFTER_DAYS = 60


def _fold(text: str) -> str:
    """Case-fold and strip accents, so "Concluído" matches "concluido"."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _fulfillment_delivered(order: RawOrder, now: Optional[datetime]) -> bool:
    return any(
        f.shipment_status.lower() == "delivered" or f.status.lower() == "delivered"
        for f in order.fulfillments
    )


def _tagged_delivered(order: RawOrder, now: Optional[datetime]) -> bool:
    # Whole tags only, so "undelivered" or "pagamento incompleto" do not match
    tags = {_fold(tag).strip() for tag in order.tags.split(",")}
    return not tags.isdisjoint(DELIVERED_TAGS)


def _noted_delivered(order: RawOrder, now: Optional[datetime]) -> bool:
    note = _fold(order.note)
    return any(word in note for word in DELIVERED_NOTE_WORDS)


def _presumed_delivered(order: RawOrder, now: Optional[datetime]) -> bool:
    return (
        order.fulfillment_status == "fulfilled"
        and days_since(order.created_at, now) > PRESUMED_DELIVERED_AFTER_DAYS
    )


class DeliveryRule(NamedTuple):
    name: str
    check: Callable[[RawOrder, Optional[datetime]], bool]


DELIVERY_RULES: List[DeliveryRule] = [
    DeliveryRule("fulfillment_status", _fulfillment_delivered),
    DeliveryRule("tags", _tagged_delivered),
    DeliveryRule("note", _noted_delivered),
    DeliveryRule("elapsed_time", _presumed_delivered),
]


def matching_rule(order: RawOrder, now: Optional[datetime] = None) -> Optional[str]:
    """Name of the first rule that marks the order delivered, or None."""
    for rule in DELIVERY_RULES:
        if rule.check(order, now):
            return rule.name
    return None


def is_delivered(order: RawOrder, now: Optional[datetime] = None) -> bool:
    return matching_rule(order, now) is not None
