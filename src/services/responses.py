# src/services/responses.py
"""JSON envelopes returned to the dashboard."""
import logging
import traceback
from typing import Any, Dict

from src.errors import OrdersMonitorError
from src.models.models import OrderDetail
from src.services.order_monitor import ActiveOrdersResult

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

INTERNAL_ERROR_MESSAGE = "Internal server error"


def orders_envelope(result: ActiveOrdersResult) -> Dict[str, Any]:
    envelope = {
        "success": True,
        "orders": [o.to_dict() for o in result.orders],
        "stats": result.stats.to_dict(),
        "total": len(result.orders),
        "pagesProcessed": result.pages_processed,
        "partial": result.partial,
        "message": f"{len(result.orders)} active orders",
    }
    if result.error is not None:
        envelope["error"] = result.error.message
    return envelope


def order_envelope(detail: OrderDetail) -> Dict[str, Any]:
    return {"success": True, "order": detail.to_dict()}


def error_envelope(error: BaseException, debug: bool = False) -> Dict[str, Any]:
    """
    Structured failure payload; never exposes a raw exception unless ``debug``.
    """
    if isinstance(error, OrdersMonitorError):
        envelope = {"success": False, "error": error.kind, "message": error.message}
    else:
        logger.exception("Unexpected error", exc_info=error)
        envelope = {"success": False, "error": "internal", "message": INTERNAL_ERROR_MESSAGE}

    if debug:
        envelope["trace"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    return envelope
