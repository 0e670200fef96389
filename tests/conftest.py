import pytest

from audit import InMemoryAuditSink
from ledger import OrderLedger
from menu import Ingredient, create_default_catalog
from pancake import PancakeBuilder


@pytest.fixture
def catalog():
    return create_default_catalog()


@pytest.fixture
def sink():
    return InMemoryAuditSink()


@pytest.fixture
def ledger(sink):
    return OrderLedger(audit_sink=sink)


@pytest.fixture
def pancake(catalog):
    return (
        PancakeBuilder(catalog)
        .add_base_ingredient(Ingredient.FLOUR)
        .add_base_ingredient(Ingredient.MILK)
        .build()
    )


@pytest.fixture
def placed_order(ledger, pancake):
    """An order that has been created, given one pancake and placed."""
    order = ledger.create_order(5, 101)
    ledger.add_pancake_to_order(order.id, pancake)
    ledger.place_order(order.id)
    return order
