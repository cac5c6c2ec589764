#!/usr/bin/env python3
# main.py
"""

Command-line entry point for the Shopify orders monitor.
Prints the same JSON envelopes the dashboard API serves.

🚀 Usage Examples

Active orders from the configured window (default 90 days):

python main.py orders

Last 30 days, at most 3 pages, keep pages fetched before a failure:

python main.py orders --days 30 --max-pages 3 --on-error return_partial

Full details for one order:

python main.py order 5123456789012

Health check:

python main.py health

"""

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from config.config import Config
from src.services.order_monitor import get_order_detail, health_check, list_active_orders
from src.services.responses import error_envelope, order_envelope, orders_envelope


class MonitorLogger:
    """Console and optional file logging for CLI runs."""

    def __init__(self, level: str = "INFO", log_to_file: bool = False):
        self.level = level
        self.log_to_file = log_to_file
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        # Library modules log under "src"; the CLI owns the handlers
        logger = logging.getLogger("src")
        logger.setLevel(getattr(logging, self.level.upper(), logging.INFO))
        logger.handlers.clear()

        detailed_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        simple_formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
        )

        # stdout carries the JSON envelope, logs go to stderr
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

        if self.log_to_file:
            log_dir = "logs/monitor_logs"
            os.makedirs(log_dir, exist_ok=True)

            log_file = f"monitor_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
            file_handler = logging.FileHandler(
                os.path.join(log_dir, log_file), encoding="utf-8"
            )
            file_handler.setFormatter(detailed_formatter)
            file_handler.setLevel(logging.DEBUG)
            logger.addHandler(file_handler)

        return logger

    def get_logger(self) -> logging.Logger:
        return self.logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Shopify active orders monitor")
    parser.add_argument("--log-file", action="store_true", help="Also log to logs/")
    parser.add_argument("--pretty", action="store_true", help="Indent JSON output")
    sub = parser.add_subparsers(dest="command", required=True)

    orders = sub.add_parser("orders", help="List active orders with stats")
    orders.add_argument("--days", type=int, default=None, help="Lookback window in days")
    orders.add_argument("--max-pages", type=int, default=None, help="Page ceiling")
    orders.add_argument(
        "--on-error",
        choices=["abort", "return_partial"],
        default=None,
        help="Policy when a page fails after earlier pages succeeded",
    )

    order = sub.add_parser("order", help="Full details for one order")
    order.add_argument("order_id")

    sub.add_parser("health", help="Check that the monitor is up")
    return parser


def run(args: argparse.Namespace, config: Config) -> Dict[str, Any]:
    """Execute one command and return its envelope; errors become envelopes too."""
    try:
        if args.command == "health":
            return health_check()
        if args.command == "order":
            return order_envelope(get_order_detail(config, args.order_id))
        return orders_envelope(
            list_active_orders(
                config,
                lookback_days=args.days,
                max_pages=args.max_pages,
                on_error=args.on_error,
            )
        )
    except Exception as e:
        return error_envelope(e, debug=config.debug)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config.from_env()
    MonitorLogger(config.log_level, args.log_file)

    envelope = run(args, config)
    print(json.dumps(envelope, indent=2 if args.pretty else None, default=str, ensure_ascii=False))
    return 0 if envelope.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
