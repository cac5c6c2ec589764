# src/transformers/order_details.py
"""Projects one Shopify order into the detailed view used by the order page."""
import re
from typing import Any, Dict, Iterable, List, Optional

from src.models.models import (
    Address,
    AliExpressInfo,
    CrossReference,
    OrderDetail,
    RawOrder,
)
from src.transformers.dates import isoformat
from src.transformers.timeline import build_timeline
from src.transformers.tracking import aggregate_tracking

ALIEXPRESS_ORDER_URL = "https://www.aliexpress.com/p/order/detail.html?orderId={}"

# Marker, then up to 20 non-digit characters on the same line ("Number: #"), then the id
ALIEXPRESS_ORDER_RE = re.compile(r"aliexpress\s*order\b[^\d\n]{0,20}?(\d+)", re.IGNORECASE)
ACCOUNT_ID_RE = re.compile(r"\b(br\d+)\b", re.IGNORECASE)

ALIEXPRESS_ATTRIBUTE_NAMES = ("aliexpress_order", "aliexpress order")
ACCOUNT_ATTRIBUTE_NAMES = ("account_id", "account id")


def _num(x) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return 0.0


def _unique(values: Iterable[str]) -> List[str]:
    seen = []
    for v in values:
        if v and v not in seen:
            seen.append(v)
    return seen


def parse_aliexpress_info(
    note: str, note_attributes: Iterable[Dict[str, Any]]
) -> AliExpressInfo:
    """
    Find AliExpress order ids and the buyer account id.

    Named note attributes are read first, then the free-text note and every
    attribute value are scanned for the "AliExpress Order <digits>" and
    "br<digits>" markers.
    """
    order_ids: List[str] = []
    account_ids: List[str] = []
    texts = [note or ""]

    for attr in note_attributes:
        name = str(attr.get("name") or "").strip().lower()
        value = str(attr.get("value") or "").strip()
        if not value:
            continue
        if name in ALIEXPRESS_ATTRIBUTE_NAMES:
            order_ids.extend(re.findall(r"\d+", value))
        elif name in ACCOUNT_ATTRIBUTE_NAMES:
            account_ids.append(value)
        texts.append(f"{attr.get('name') or ''}: {value}")

    for text in texts:
        order_ids.extend(ALIEXPRESS_ORDER_RE.findall(text))
        account_ids.extend(ACCOUNT_ID_RE.findall(text))

    return AliExpressInfo(
        orders=[
            CrossReference(aliexpress_order=oid, tracking_url=ALIEXPRESS_ORDER_URL.format(oid))
            for oid in _unique(order_ids)
        ],
        account_id=(_unique(account_ids) or [None])[0],
    )


def _address_dict(data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    address = Address.from_dict(data)
    return vars(address).copy() if address else None


def _line_item(item: Dict[str, Any]) -> Dict[str, Any]:
    quantity = int(_num(item.get("quantity")))
    price = _num(item.get("price"))
    return {
        "id": item.get("id"),
        "product_id": item.get("product_id"),
        "variant_id": item.get("variant_id"),
        "title": item.get("title") or "",
        "variant_title": item.get("variant_title") or "",
        "sku": item.get("sku") or "",
        "vendor": item.get("vendor") or "",
        "quantity": quantity,
        "price": item.get("price"),
        "total": round(price * quantity, 2),
        "total_discount": item.get("total_discount"),
        "fulfillment_status": item.get("fulfillment_status"),
        "properties": item.get("properties") or [],
    }


def _customer(data: Optional[Dict[str, Any]], orders_count: int) -> Optional[Dict[str, Any]]:
    if not data:
        return None

    return {
        "id": data.get("id"),
        "email": data.get("email") or "",
        "first_name": data.get("first_name") or "",
        "last_name": data.get("last_name") or "",
        "phone": data.get("phone") or "",
        "total_spent": data.get("total_spent"),
        "orders_count": orders_count,
        "tags": data.get("tags") or "",
        "note": data.get("note") or "",
    }


def _shipping_line(line: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: line.get(key)
        for key in (
            "id",
            "title",
            "price",
            "code",
            "source",
            "carrier_identifier",
            "requested_fulfillment_service_id",
        )
    }


def project_order_detail(order: RawOrder, customer_orders_count: int = 1) -> OrderDetail:
    """
    Assemble the full detail view for one order.

    Args:
        order: Parsed upstream order
        customer_orders_count: Result of the customer history sub-call (or its default)

    Returns:
        OrderDetail with timeline, tracking and AliExpress cross-reference
    """
    raw = order.raw

    projected = {
        # Identification
        "id": order.id,
        "order_number": order.order_number,
        "name": order.name,
        "created_at": isoformat(order.created_at),
        "updated_at": isoformat(order.updated_at),
        "processed_at": isoformat(order.processed_at),
        # Status
        "financial_status": order.financial_status,
        "fulfillment_status": order.fulfillment_status or "unfulfilled",
        "cancelled_at": isoformat(order.cancelled_at),
        "cancel_reason": order.cancel_reason or None,
        # Amounts
        "currency": order.currency,
        "subtotal_price": raw.get("subtotal_price"),
        "total_discounts": raw.get("total_discounts"),
        "total_line_items_price": raw.get("total_line_items_price"),
        "total_price": raw.get("total_price"),
        "total_tax": raw.get("total_tax"),
        "total_shipping_price_set": raw.get("total_shipping_price_set"),
        # Payment
        "payment_gateway_names": raw.get("payment_gateway_names") or [],
        "gateway": raw.get("gateway"),
        # Customer and addresses
        "customer": _customer(order.customer, customer_orders_count),
        "shipping_address": _address_dict(order.shipping_address),
        "billing_address": _address_dict(order.billing_address),
        # Products and shipments
        "line_items": [_line_item(item) for item in order.line_items],
        "fulfillments": [f.to_dict() for f in order.fulfillments],
        # Discounts and shipping
        "discount_codes": list(order.discount_codes),
        "discount_applications": raw.get("discount_applications") or [],
        "shipping_lines": [_shipping_line(line) for line in order.shipping_lines],
        # Tags and notes
        "tags": order.tags,
        "note": order.note,
        "note_attributes": list(order.note_attributes),
        # Source
        "cart_token": raw.get("cart_token"),
        "checkout_token": raw.get("checkout_token"),
        "source_name": raw.get("source_name"),
        "source_identifier": raw.get("source_identifier"),
        "source_url": raw.get("source_url"),
        "landing_site": raw.get("landing_site"),
        "referring_site": raw.get("referring_site"),
    }

    return OrderDetail(
        order=projected,
        timeline=build_timeline(order),
        tracking=aggregate_tracking(order),
        aliexpress=parse_aliexpress_info(order.note, order.note_attributes),
    )
