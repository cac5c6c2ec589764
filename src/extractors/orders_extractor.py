#!/usr/bin/env python3
# src/extractors/orders_extractor.py

import logging
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from src.errors import FetchCancelledError, UpstreamFetchError
from src.transformers.dates import utc_now

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class OnError(str, Enum):
    """What to do when a page fails after earlier pages succeeded."""

    ABORT = "abort"
    RETURN_PARTIAL = "return_partial"


@dataclass
class FetchResult:
    orders: List[Dict[str, Any]] = field(default_factory=list)
    pages_processed: int = 0
    reached_page_limit: bool = False
    error: Optional[UpstreamFetchError] = None

    @property
    def partial(self) -> bool:
        return self.reached_page_limit or self.error is not None


def extract_orders(
    client,
    lookback_days: int = 90,
    max_pages: int = 10,
    *,
    on_error: OnError = OnError.ABORT,
    cancel: Optional[threading.Event] = None,
    page_size: Optional[int] = None,
) -> FetchResult:
    """
    Extracts orders created in the last ``lookback_days`` days, following the
    ``page_info`` cursor until the last page, an empty page or ``max_pages``.

    Args:
        client: A ShopifyClient (anything with ``get_orders_page``).
        lookback_days: Size of the creation-time window.
        max_pages: Safety ceiling on upstream calls; hitting it is not an error.
        on_error: ABORT re-raises a failed page; RETURN_PARTIAL keeps the pages
            fetched so far and records the error on the result.
        cancel: Optional event checked before every upstream call.
        page_size: Override of the client's page size.

    Returns:
        A FetchResult with the orders in page order and the page count.
    """
    on_error = OnError(on_error)
    created_at_min = (utc_now() - timedelta(days=lookback_days)).isoformat()
    result = FetchResult()
    page_info: Optional[str] = None

    logger.info(
        "Starting extraction of orders created since %s (max %d pages)",
        created_at_min,
        max_pages,
    )

    while result.pages_processed < max_pages:
        if cancel is not None and cancel.is_set():
            logger.warning("Order extraction cancelled after %d pages", result.pages_processed)
            raise FetchCancelledError(
                f"Fetch cancelled after {result.pages_processed} pages"
            )

        try:
            batch, next_page_info = client.get_orders_page(
                created_at_min=created_at_min, page_info=page_info, limit=page_size
            )
        except UpstreamFetchError as e:
            if on_error is OnError.ABORT:
                raise
            logger.warning(
                "Page %d failed, returning %d orders from earlier pages: %s",
                result.pages_processed + 1,
                len(result.orders),
                e,
            )
            result.error = e
            break

        result.pages_processed += 1

        if not batch:
            logger.debug("Page %d returned no orders", result.pages_processed)
            break

        result.orders.extend(batch)
        logger.info(
            "Page %d: %d orders (total so far %d)",
            result.pages_processed,
            len(batch),
            len(result.orders),
        )

        if not next_page_info:
            break
        page_info = next_page_info
    else:
        result.reached_page_limit = True
        logger.info("Reached max_pages limit of %d", max_pages)

    logger.info(
        "Completed extraction: total orders fetched = %d in %d pages",
        len(result.orders),
        result.pages_processed,
    )
    return result


__all__ = ["OnError", "FetchResult", "extract_orders"]
