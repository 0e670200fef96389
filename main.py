"""
Pancake Ledger Demo
===================
Runs one order through its whole lifecycle and prints the result.

    python main.py
"""

import logging
import sys

import structlog

from config import ConfigurationError, get_config
from ledger import OrderLedger, create_ledger
from menu import Ingredient
from pancake import PancakeBuilder


logger = logging.getLogger(__name__)


def resolve_log_level(log_level: str, debug_mode: bool = False) -> int:
    """Numeric log level; debug mode forces DEBUG."""
    if debug_mode:
        return logging.DEBUG
    return getattr(logging, log_level, logging.INFO)


def configure_logging(log_level: str, debug_mode: bool = False):
    """Configure stdlib logging and structlog to the same level."""
    level = resolve_log_level(log_level, debug_mode)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level)
    )


def print_order_details(ledger: OrderLedger, order_id):
    order = ledger.all_orders().get(order_id)
    if order is None:
        print(f"Order {order_id} was never placed")
        return

    print("\nFinal Order Details:")
    print(f"Order ID: {order.id}")
    print(f"Building: {order.building}")
    print(f"Room: {order.room}")
    print(f"Status: {order.status.name}")
    print(f"Total: ${order.total_price()}")
    print("Pancakes:")
    for pancake in order.pancakes:
        print(f"  - {pancake.describe()} (${pancake.price})")


def run_demo(ledger: OrderLedger):
    order = ledger.create_order(5, 101)

    pancake = (
        PancakeBuilder.standard()
        .add_custom_ingredient(Ingredient.DARK_CHOCOLATE)
        .build()
    )
    ledger.add_pancake_to_order(order.id, pancake)

    ledger.place_order(order.id)
    ledger.prepare_order()
    ledger.deliver_order()

    print_order_details(ledger, order.id)
    return order


def main() -> int:
    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration Error: {e}")
        return 1

    configure_logging(config.logging.log_level, config.logging.debug_mode)

    ledger = create_ledger(config)
    run_demo(ledger)

    render = getattr(ledger.audit_sink, "render", None)
    if render is not None:
        print("\nAudit Log:")
        print(render(), end="")

    return 0


if __name__ == "__main__":
    sys.exit(main())
