#!/usr/bin/env python3
# src/extractors/shopify_client.py
"""Shopify Admin REST client with cursor pagination support."""
import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import requests

from config.config import Config
from src.errors import OrderNotFoundError, RateLimitExceeded, UpstreamFetchError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_PAGE_INFO_RE = re.compile(r"page_info=([^&>]+)")


def parse_next_page_info(link_header: Optional[str]) -> Optional[str]:
    """
    Extract the continuation cursor from a ``Link`` header.

    Only the segment carrying ``rel="next"`` is considered, so the ``previous``
    link Shopify sends from the second page on is never followed.
    """
    if not link_header:
        return None

    for segment in link_header.split(","):
        if 'rel="next"' not in segment:
            continue
        match = _PAGE_INFO_RE.search(segment)
        if match:
            return match.group(1)
    return None


class ShopifyClient:
    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": "OrdersMonitor/1.0",
                "X-Shopify-Access-Token": config.require_token(),
            }
        )
        self._rate = {"calls": 0, "reset": datetime.now()}

    def _check_rate(self):
        now = datetime.now()
        if now - self._rate["reset"] > timedelta(minutes=1):
            self._rate = {"calls": 0, "reset": now}
        if self._rate["calls"] >= self.config.rate_limit:
            raise RateLimitExceeded("Client-side rate limit exceeded")
        self._rate["calls"] += 1

    def _req(self, method, endpoint, **kwargs) -> requests.Response:
        self._check_rate()
        url = f"{self.config.api_url}{endpoint}"

        kwargs.setdefault("headers", {}).update({"X-Request-ID": secrets.token_hex(8)})

        try:
            resp = self.session.request(
                method, url, timeout=self.config.timeout, **kwargs
            )
        except requests.exceptions.Timeout as e:
            raise UpstreamFetchError(f"Request timeout: {endpoint}") from e
        except requests.exceptions.RequestException as e:
            raise UpstreamFetchError(f"Request failed: {e}") from e

        if resp.status_code == 429:
            raise RateLimitExceeded(body=resp.text)
        if not 200 <= resp.status_code < 300:
            logger.error("Shopify API error %s on %s", resp.status_code, endpoint)
            logger.debug("Error body: %s", resp.text)
            raise UpstreamFetchError(
                f"Shopify API error on {endpoint}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp

    @staticmethod
    def _json(resp: requests.Response) -> Dict[str, Any]:
        if resp.status_code == 204:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamFetchError(
                "Invalid JSON from Shopify", status_code=resp.status_code, body=resp.text
            ) from e

    # Core API methods
    def get_orders_page(
        self,
        *,
        created_at_min: Optional[str] = None,
        page_info: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """
        Fetch one page of ``/orders.json``.

        The first page is filtered by creation time; continuation pages send only
        the cursor, since Shopify rejects other filters alongside ``page_info``.

        Returns:
            The page's orders and the cursor for the next page (None when last).
        """
        params: Dict[str, Any] = {"limit": limit or self.config.page_size}
        if page_info:
            params["page_info"] = page_info
        else:
            params["status"] = "any"
            params["order"] = "created_at desc"
            if created_at_min:
                params["created_at_min"] = created_at_min

        resp = self._req("GET", "/orders.json", params=params)
        data = self._json(resp)
        return data.get("orders") or [], parse_next_page_info(resp.headers.get("Link"))

    def get_order(self, order_id: str) -> Dict[str, Any]:
        try:
            resp = self._req("GET", f"/orders/{order_id}.json")
        except UpstreamFetchError as e:
            if e.status_code == 404:
                raise OrderNotFoundError(order_id, body=e.body) from e
            raise
        return self._json(resp).get("order") or {}

    def get_customer_orders_count(self, customer_id) -> int:
        resp = self._req("GET", f"/customers/{customer_id}/orders/count.json")
        return int(self._json(resp).get("count") or 0)


def create_client(config: Config, session: Optional[requests.Session] = None) -> ShopifyClient:
    """Build a client, failing with ConfigurationError when no token is set."""
    return ShopifyClient(config, session=session)
