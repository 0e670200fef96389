from decimal import Decimal

import pytest

from errors import InvalidArgumentError
from menu import Ingredient, IngredientCatalog, get_default_catalog


def test_default_prices(catalog):
    assert catalog.price_of(Ingredient.FLOUR) == Decimal("0.50")
    assert catalog.price_of(Ingredient.EGG) == Decimal("0.75")
    assert catalog.price_of(Ingredient.MILK) == Decimal("1.00")
    assert catalog.price_of(Ingredient.HAZELNUT) == Decimal("2.00")
    assert catalog.price_of(Ingredient.DARK_CHOCOLATE) == Decimal("1.50")
    assert catalog.price_of(Ingredient.WHIPPED_CREAM) == Decimal("0.25")
    assert len(catalog) == 8


def test_classification(catalog):
    for base in (Ingredient.MILK, Ingredient.FLOUR, Ingredient.EGG, Ingredient.SOY_MILK):
        assert catalog.is_base_ingredient(base)
    for custom in (Ingredient.HAZELNUT, Ingredient.DARK_CHOCOLATE,
                   Ingredient.MILK_CHOCOLATE, Ingredient.WHIPPED_CREAM):
        assert not catalog.is_base_ingredient(custom)


def test_lookup_accepts_names_in_any_case(catalog):
    assert catalog.is_valid("flour")
    assert catalog.is_valid(" Egg ")
    assert catalog.price_of("hazelnut") == Decimal("2.00")


def test_unknown_ingredient(catalog):
    assert not catalog.is_valid("MAPLE_SYRUP")
    assert not catalog.is_valid("")
    assert not catalog.is_valid(None)
    assert not catalog.is_base_ingredient("MAPLE_SYRUP")
    with pytest.raises(InvalidArgumentError):
        catalog.price_of("MAPLE_SYRUP")


def test_add_ingredient(catalog):
    entry = catalog.add_ingredient("maple_syrup", "1.2")
    assert entry.ingredient_id == "MAPLE_SYRUP"
    assert entry.price == Decimal("1.20")
    assert catalog.is_valid("MAPLE_SYRUP")
    assert not catalog.is_base_ingredient("MAPLE_SYRUP")


def test_add_ingredient_reprices(catalog):
    catalog.add_ingredient(Ingredient.FLOUR, 0.6, is_base=True)
    assert catalog.price_of(Ingredient.FLOUR) == Decimal("0.60")
    assert catalog.is_base_ingredient(Ingredient.FLOUR)


@pytest.mark.parametrize("price", [-1, "abc", None, float("nan"), True])
def test_add_ingredient_rejects_bad_price(catalog, price):
    with pytest.raises(InvalidArgumentError):
        catalog.add_ingredient("BAD", price)
    assert "BAD" not in catalog


def test_empty_catalog():
    catalog = IngredientCatalog()
    assert len(catalog) == 0
    assert not catalog.is_valid(Ingredient.FLOUR)


def test_default_catalog_is_shared():
    assert get_default_catalog() is get_default_catalog()


def test_entries_is_a_copy(catalog):
    entries = catalog.entries()
    entries.clear()
    assert len(catalog) == 8
