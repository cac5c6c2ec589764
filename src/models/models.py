# models/models.py
"""
Typed views over the Shopify order payload and the records derived from it.

Upstream entities are parsed once, in ``from_dict``, where every optional field
gets its default. Classifiers and projections read these objects and never touch
the raw payload for fields modelled here. The raw dict is kept only for
pass-through projection and is never mutated.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from src.transformers.dates import isoformat, parse_shopify_datetime


def _num(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _strings(value: Any) -> Tuple[str, ...]:
    """Coerce a scalar-or-sequence field into a tuple of non-empty strings."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if v not in (None, ""))
    return (str(value),) if str(value) else ()


def _dicts(value: Any) -> Tuple[Dict[str, Any], ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(v for v in value if isinstance(v, dict))


class UrgencyLevel(str, Enum):
    NORMAL = "normal"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    DELIVERED = "delivered"


class PrazoStatus(str, Enum):
    """Delivery-timeliness state of an order."""

    DELIVERED = "delivered"
    AGUARDANDO = "aguardando"
    AGUARDANDO_URGENTE = "aguardando_urgente"
    NO_PRAZO = "no_prazo"
    ALERTA = "alerta"
    ATRASADO = "atrasado"
    CRITICO = "critico"


class EventType(str, Enum):
    ORDER_CREATED = "order_created"
    PAYMENT_CONFIRMED = "payment_confirmed"
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"


@dataclass(frozen=True)
class Fulfillment:
    """A shipment record covering some of the order's line items."""

    id: Optional[int] = None
    status: str = ""
    shipment_status: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tracking_company: str = ""
    tracking_number: str = ""
    tracking_url: str = ""
    tracking_numbers: Tuple[str, ...] = ()
    tracking_urls: Tuple[str, ...] = ()
    tracking_companies: Tuple[str, ...] = ()
    line_items: Tuple[Dict[str, Any], ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Fulfillment":
        return cls(
            id=data.get("id"),
            status=_text(data.get("status")),
            shipment_status=_text(data.get("shipment_status")),
            created_at=parse_shopify_datetime(data.get("created_at")),
            updated_at=parse_shopify_datetime(data.get("updated_at")),
            tracking_company=_text(data.get("tracking_company")),
            tracking_number=_text(data.get("tracking_number")),
            tracking_url=_text(data.get("tracking_url")),
            tracking_numbers=_strings(data.get("tracking_numbers")),
            # URLs and carriers stay index-aligned with tracking_numbers, so empties are kept
            tracking_urls=tuple(_text(u) for u in (data.get("tracking_urls") or [])),
            tracking_companies=tuple(
                _text(c) for c in (data.get("tracking_companies") or [])
            ),
            line_items=_dicts(data.get("line_items")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "shipment_status": self.shipment_status or None,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "tracking_company": self.tracking_company,
            "tracking_number": self.tracking_number,
            "tracking_numbers": list(self.tracking_numbers),
            "tracking_urls": list(self.tracking_urls),
            "tracking_companies": list(self.tracking_companies),
            "line_items": list(self.line_items),
        }


@dataclass(frozen=True)
class RawOrder:
    """The upstream order as received, with defaults applied in one place."""

    id: Optional[int]
    name: str = ""
    order_number: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: str = ""
    financial_status: str = ""
    fulfillment_status: str = ""
    currency: str = ""
    total_price: float = 0.0
    total_refunds: float = 0.0
    tags: str = ""
    note: str = ""
    note_attributes: Tuple[Dict[str, Any], ...] = ()
    tracking_numbers: Tuple[str, ...] = ()
    line_items: Tuple[Dict[str, Any], ...] = ()
    fulfillments: Tuple[Fulfillment, ...] = ()
    shipping_lines: Tuple[Dict[str, Any], ...] = ()
    discount_codes: Tuple[Dict[str, Any], ...] = ()
    customer: Optional[Dict[str, Any]] = None
    shipping_address: Optional[Dict[str, Any]] = None
    billing_address: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawOrder":
        tags = data.get("tags")
        if isinstance(tags, (list, tuple)):
            tags = ", ".join(str(t) for t in tags)

        return cls(
            id=data.get("id"),
            name=_text(data.get("name")),
            order_number=data.get("order_number"),
            created_at=parse_shopify_datetime(data.get("created_at")),
            updated_at=parse_shopify_datetime(data.get("updated_at")),
            processed_at=parse_shopify_datetime(data.get("processed_at")),
            cancelled_at=parse_shopify_datetime(data.get("cancelled_at")),
            cancel_reason=_text(data.get("cancel_reason")),
            financial_status=_text(data.get("financial_status")).lower(),
            fulfillment_status=_text(data.get("fulfillment_status")).lower(),
            currency=_text(data.get("currency")),
            total_price=_num(data.get("total_price")),
            total_refunds=_refunded_amount(data),
            tags=_text(tags),
            note=_text(data.get("note")),
            note_attributes=_dicts(data.get("note_attributes")),
            tracking_numbers=_strings(data.get("tracking_numbers")),
            line_items=_dicts(data.get("line_items")),
            fulfillments=tuple(
                Fulfillment.from_dict(f) for f in _dicts(data.get("fulfillments"))
            ),
            shipping_lines=_dicts(data.get("shipping_lines")),
            discount_codes=_dicts(data.get("discount_codes")),
            customer=data.get("customer") or None,
            shipping_address=data.get("shipping_address") or None,
            billing_address=data.get("billing_address") or None,
            raw=data,
        )


def _refunded_amount(data: Dict[str, Any]) -> float:
    """Refunded total, from ``total_refunds`` or summed from refund transactions."""
    if data.get("total_refunds") is not None:
        return _num(data.get("total_refunds"))

    total = 0.0
    for refund in _dicts(data.get("refunds")):
        for txn in _dicts(refund.get("transactions")):
            if txn.get("kind") == "refund" and txn.get("status", "success") == "success":
                total += _num(txn.get("amount"))
    return round(total, 2)


@dataclass(frozen=True)
class TrackingEntry:
    number: str
    carrier: str
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"number": self.number, "carrier": self.carrier, "url": self.url}


@dataclass
class TrackingInfo:
    """Deduplicated tracking numbers for one order, in first-seen order."""

    entries: List[TrackingEntry] = field(default_factory=list)

    @property
    def numbers(self) -> List[str]:
        return [e.number for e in self.entries]

    @property
    def has_tracking(self) -> bool:
        return len(self.entries) > 0

    def lookup(self, number: str) -> Optional[TrackingEntry]:
        for entry in self.entries:
            if entry.number == number:
                return entry
        return None


@dataclass(frozen=True)
class Urgency:
    level: UrgencyLevel
    prazo_status: PrazoStatus


@dataclass
class ClassifiedOrder:
    order: RawOrder
    days_since_order: int
    is_delivered: bool
    tracking: TrackingInfo
    urgency_level: UrgencyLevel
    prazo_status: PrazoStatus
    is_late: bool
    created_at_local: Optional[datetime] = None

    @property
    def has_tracking(self) -> bool:
        return self.tracking.has_tracking

    @property
    def tracking_numbers(self) -> List[str]:
        return self.tracking.numbers

    def to_dict(self) -> Dict[str, Any]:
        """Raw order fields plus the derived ones, ready for JSON."""
        data = dict(self.order.raw)
        data.update(
            {
                "daysSinceOrder": self.days_since_order,
                "isDelivered": self.is_delivered,
                "hasTracking": self.has_tracking,
                "trackingNumbers": self.tracking_numbers,
                "trackingDetails": [e.to_dict() for e in self.tracking.entries],
                "urgencyLevel": self.urgency_level.value,
                "prazoStatus": self.prazo_status.value,
                "isLate": self.is_late,
                "createdAtLocal": isoformat(self.created_at_local),
            }
        )
        return data


@dataclass
class Event:
    """One step of an order's lifecycle timeline."""

    type: EventType
    title: str
    description: str
    date: Optional[datetime]
    completed: bool = True
    tracking_number: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "date": isoformat(self.date),
            "completed": self.completed,
        }
        if self.tracking_number:
            data["tracking_number"] = self.tracking_number
        return data


@dataclass
class Stats:
    total_fetched: int = 0
    valid: int = 0
    delivered_filtered: int = 0
    active: int = 0
    by_urgency: Dict[str, int] = field(default_factory=dict)
    with_tracking: int = 0
    without_tracking: int = 0
    by_age: Dict[str, int] = field(default_factory=dict)
    late: int = 0
    late_percentage: float = 0.0
    tracking_percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFetched": self.total_fetched,
            "valid": self.valid,
            "deliveredFiltered": self.delivered_filtered,
            "active": self.active,
            "byUrgency": dict(self.by_urgency),
            "withTracking": self.with_tracking,
            "withoutTracking": self.without_tracking,
            "byAge": dict(self.by_age),
            "late": self.late,
            "latePercentage": self.late_percentage,
            "trackingPercentage": self.tracking_percentage,
        }


@dataclass
class Address:
    """Normalised address block; text fields default to empty string."""

    first_name: str = ""
    last_name: str = ""
    company: str = ""  # CPF/CNPJ in Brazilian stores
    address1: str = ""
    address2: str = ""
    city: str = ""
    province: str = ""
    province_code: str = ""
    country: str = ""
    country_code: str = ""
    zip: str = ""
    phone: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Address"]:
        if not data:
            return None

        def coord(key: str) -> Optional[float]:
            value = data.get(key)
            if value in (None, ""):
                return None
            try:
                return float(value)
            except (TypeError, ValueError):
                return None

        text_fields = {
            name: _text(data.get(name))
            for name in (
                "first_name",
                "last_name",
                "company",
                "address1",
                "address2",
                "city",
                "province",
                "province_code",
                "country",
                "country_code",
                "zip",
                "phone",
            )
        }
        return cls(latitude=coord("latitude"), longitude=coord("longitude"), **text_fields)


@dataclass(frozen=True)
class CrossReference:
    aliexpress_order: str
    tracking_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"aliexpress_order": self.aliexpress_order, "tracking_url": self.tracking_url}


@dataclass
class AliExpressInfo:
    orders: List[CrossReference] = field(default_factory=list)
    account_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orders": [ref.to_dict() for ref in self.orders],
            "account_id": self.account_id,
        }


@dataclass
class OrderDetail:
    order: Dict[str, Any]
    timeline: List[Event]
    tracking: TrackingInfo
    aliexpress: AliExpressInfo
    customer_orders_degraded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.order)
        data["timeline"] = [event.to_dict() for event in self.timeline]
        data["trackingNumbers"] = self.tracking.numbers
        data["trackingDetails"] = [e.to_dict() for e in self.tracking.entries]
        data["hasTracking"] = self.tracking.has_tracking
        data["aliexpress"] = self.aliexpress.to_dict()
        # Single-value shortcuts kept for consumers of the older payload
        data["aliexpress_order"] = (
            self.aliexpress.orders[0].aliexpress_order if self.aliexpress.orders else None
        )
        data["account_id"] = self.aliexpress.account_id
        return data


@dataclass(frozen=True)
class Ok:
    """Successful best-effort sub-call."""

    value: Any
    degraded = False


@dataclass(frozen=True)
class Degraded:
    """Failed best-effort sub-call replaced by a default value."""

    value: Any
    cause: BaseException
    degraded = True
