# src/errors.py
"""
Error taxonomy for the orders monitor.

Every error that reaches the outer layer carries a machine readable ``kind``
and a human readable message, so it can be rendered into the JSON envelope
without leaking raw exceptions.
"""
from typing import Any, Dict, Optional


class OrdersMonitorError(Exception):
    """Base exception for all orders monitor errors."""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class ConfigurationError(OrdersMonitorError):
    """Raised when a required setting (the access token) is missing."""

    kind = "configuration"


class MalformedInputError(OrdersMonitorError):
    """Raised when caller input fails validation before any upstream call."""

    kind = "malformed_input"


class UpstreamFetchError(OrdersMonitorError):
    """Raised on a non-2xx response, a timeout or a connection failure."""

    kind = "fetch_failed"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class OrderNotFoundError(UpstreamFetchError):
    """The single-order endpoint answered 404."""

    kind = "not_found"

    def __init__(self, order_id: str, body: Optional[str] = None):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found", status_code=404, body=body)


class RateLimitExceeded(UpstreamFetchError):
    kind = "rate_limited"

    def __init__(self, message: str = "Rate limit exceeded", body: Optional[str] = None):
        super().__init__(message, status_code=429, body=body)


class FetchCancelledError(OrdersMonitorError):
    """The caller cancelled the fetch before it completed."""

    kind = "cancelled"
