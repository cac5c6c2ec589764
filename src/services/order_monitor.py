# src/services/order_monitor.py
"""
Entry points used by the outer HTTP/CLI layer.

Each call builds its own client and works on its own data; nothing is shared
between calls.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from config.config import Config
from src.errors import MalformedInputError, UpstreamFetchError
from src.extractors.orders_extractor import OnError, extract_orders
from src.extractors.shopify_client import ShopifyClient, create_client
from src.models.models import ClassifiedOrder, Degraded, Ok, OrderDetail, RawOrder, Stats
from src.transformers.dates import utc_now
from src.transformers.order_details import project_order_detail
from src.transformers.order_enricher import enrich_orders
from src.transformers.stats import summarize

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_CUSTOMER_ORDERS = 1


@dataclass
class ActiveOrdersResult:
    orders: List[ClassifiedOrder] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)
    pages_processed: int = 0
    reached_page_limit: bool = False
    error: Optional[UpstreamFetchError] = None

    @property
    def partial(self) -> bool:
        return self.reached_page_limit or self.error is not None


def list_active_orders(
    config: Config,
    lookback_days: Optional[int] = None,
    max_pages: Optional[int] = None,
    *,
    on_error: Optional[Union[OnError, str]] = None,
    client: Optional[ShopifyClient] = None,
    cancel: Optional[threading.Event] = None,
    now: Optional[datetime] = None,
) -> ActiveOrdersResult:
    """
    Fetch, filter and classify the orders still awaiting delivery.

    Arguments left as None fall back to the configuration. Raises
    ConfigurationError without a token and UpstreamFetchError when a page
    fails under the ABORT policy.
    """
    client = client or create_client(config)
    lookback_days = config.lookback_days if lookback_days is None else lookback_days
    max_pages = config.max_pages if max_pages is None else max_pages
    policy = OnError(on_error or config.on_error)

    fetched = extract_orders(
        client,
        lookback_days,
        max_pages,
        on_error=policy,
        cancel=cancel,
        page_size=config.page_size,
    )

    enriched = enrich_orders(fetched.orders, now or utc_now(), config.store_timezone)
    stats = summarize(
        enriched.active,
        total_fetched=enriched.total_fetched,
        valid=enriched.valid,
        delivered_filtered=enriched.delivered,
    )
    logger.info(
        "Active orders: %d (late %.1f%%, with tracking %.1f%%)",
        stats.active,
        stats.late_percentage,
        stats.tracking_percentage,
    )

    return ActiveOrdersResult(
        orders=enriched.active,
        stats=stats,
        pages_processed=fetched.pages_processed,
        reached_page_limit=fetched.reached_page_limit,
        error=fetched.error,
    )


def fetch_customer_orders_count(client: ShopifyClient, customer_id) -> Union[Ok, Degraded]:
    """Best-effort lookup; a failure yields the default count, never an error."""
    try:
        return Ok(client.get_customer_orders_count(customer_id))
    except UpstreamFetchError as e:
        logger.warning(
            "Customer %s order history unavailable, using %d: %s",
            customer_id,
            DEFAULT_CUSTOMER_ORDERS,
            e,
        )
        return Degraded(DEFAULT_CUSTOMER_ORDERS, e)


def validate_order_id(order_id: Any) -> str:
    value = str(order_id if order_id is not None else "").strip()
    if not value:
        raise MalformedInputError("Order id is required")
    if not value.isdigit():
        raise MalformedInputError(f"Order id must be numeric, got {value!r}")
    return value


def get_order_detail(
    config: Config, order_id: Any, *, client: Optional[ShopifyClient] = None
) -> OrderDetail:
    order_id = validate_order_id(order_id)
    client = client or create_client(config)

    logger.info("Fetching details for order %s", order_id)
    order = RawOrder.from_dict(client.get_order(order_id))

    customer_orders: Union[Ok, Degraded] = Ok(DEFAULT_CUSTOMER_ORDERS)
    if order.customer and order.customer.get("id"):
        customer_orders = fetch_customer_orders_count(client, order.customer["id"])

    detail = project_order_detail(order, customer_orders.value)
    detail.customer_orders_degraded = customer_orders.degraded
    return detail


def health_check() -> Dict[str, Any]:
    return {
        "success": True,
        "message": "Orders monitor API is up",
        "timestamp": utc_now().isoformat(),
    }
