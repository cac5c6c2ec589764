# src/transformers/timeline.py
"""Builds the lifecycle timeline shown on the order detail view."""
from datetime import datetime, timezone
from typing import List

from src.models.models import Event, EventType, RawOrder

SHIPPED_STATUSES = ("success", "fulfilled")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(event: Event):
    # Undated events come first, in the order they were generated
    return (event.date is not None, event.date or _EPOCH)


def build_timeline(order: RawOrder) -> List[Event]:
    """
    Derive placed/paid/shipped/delivered events for one order.

    The "order placed" event is always present. Events are sorted by date
    ascending; ``sorted`` is stable, so events that share a timestamp (or have
    none) keep the order they were generated in.
    """
    events = [
        Event(
            type=EventType.ORDER_CREATED,
            title="Pedido realizado",
            description=f"Pedido {order.name or order.id} criado",
            date=order.created_at,
        )
    ]

    if order.financial_status == "paid":
        events.append(
            Event(
                type=EventType.PAYMENT_CONFIRMED,
                title="Pagamento confirmado",
                description="Pagamento aprovado",
                date=order.processed_at or order.created_at,
            )
        )

    for f in order.fulfillments:
        if f.status.lower() in SHIPPED_STATUSES:
            number = f.tracking_number or (f.tracking_numbers[0] if f.tracking_numbers else "")
            description = "Pedido enviado"
            if number:
                description = f"Pedido enviado - rastreio {number}"
            events.append(
                Event(
                    type=EventType.ORDER_SHIPPED,
                    title="Pedido enviado",
                    description=description,
                    date=f.created_at or order.created_at,
                    tracking_number=number or None,
                )
            )

    for f in order.fulfillments:
        if f.shipment_status.lower() == "delivered":
            events.append(
                Event(
                    type=EventType.ORDER_DELIVERED,
                    title="Pedido entregue",
                    description="Entrega confirmada pela transportadora",
                    date=f.updated_at or f.created_at or order.created_at,
                )
            )

    return sorted(events, key=_sort_key)
