#!/usr/bin/env python3
## config/config.py
"""Handles project configuration and environment variables."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from src.errors import ConfigurationError


def _as_bool(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    shop_domain: str = "orne-decor-studio.myshopify.com"
    access_token: Optional[str] = None
    api_version: str = "2024-01"
    timeout: int = 30
    rate_limit: int = 120

    # Orders listing
    lookback_days: int = 90
    max_pages: int = 10
    page_size: int = 250  # Shopify maximum
    on_error: str = "abort"

    # Presentation
    store_timezone: str = "America/Sao_Paulo"

    # Diagnostics
    debug: bool = False
    log_level: str = "INFO"

    @property
    def api_url(self) -> str:
        return f"https://{self.shop_domain}/admin/api/{self.api_version}"

    def require_token(self) -> str:
        """Return the access token or fail before any upstream call is made."""
        if not self.access_token:
            raise ConfigurationError("SHOPIFY_ACCESS_TOKEN is not configured")
        return self.access_token

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True
    ) -> "Config":
        """Build the configuration once, at process start."""
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        defaults = cls()
        return cls(
            shop_domain=environ.get("SHOPIFY_DOMAIN") or defaults.shop_domain,
            access_token=environ.get("SHOPIFY_ACCESS_TOKEN") or None,
            api_version=environ.get("SHOPIFY_API_VERSION") or defaults.api_version,
            timeout=int(environ.get("API_TIMEOUT", defaults.timeout)),
            rate_limit=int(environ.get("RATE_LIMIT", defaults.rate_limit)),
            lookback_days=int(
                environ.get("ORDERS_LOOKBACK_DAYS", defaults.lookback_days)
            ),
            max_pages=int(environ.get("ORDERS_MAX_PAGES", defaults.max_pages)),
            page_size=int(environ.get("ORDERS_PAGE_SIZE", defaults.page_size)),
            on_error=environ.get("ORDERS_ON_ERROR") or defaults.on_error,
            store_timezone=environ.get("STORE_TIMEZONE") or defaults.store_timezone,
            debug=_as_bool(environ.get("APP_DEBUG")),
            log_level=environ.get("LOG_LEVEL") or defaults.log_level,
        )
