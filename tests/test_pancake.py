from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from errors import InvalidArgumentError, InvalidStateError
from menu import Ingredient, IngredientCatalog
from pancake import Pancake, PancakeBuilder


def test_standard_pancake_price(catalog):
    pancake = PancakeBuilder.standard(catalog).build()
    assert pancake.base_ingredients == ("FLOUR", "EGG", "MILK")
    assert pancake.custom_ingredients == ()
    assert pancake.price == Decimal("2.25")


def test_custom_ingredients_raise_price(catalog):
    pancake = (
        PancakeBuilder.standard(catalog)
        .add_custom_ingredient(Ingredient.HAZELNUT)
        .add_custom_ingredient(Ingredient.DARK_CHOCOLATE)
        .build()
    )
    assert pancake.price == Decimal("5.75")


def test_vegan_preset(catalog):
    pancake = PancakeBuilder.vegan(catalog).build()
    assert pancake.base_ingredients == ("FLOUR", "SOY_MILK")
    assert pancake.price == Decimal("1.50")


def test_custom_path_accepts_base_ingredients(catalog):
    pancake = (
        PancakeBuilder(catalog)
        .add_base_ingredient(Ingredient.FLOUR)
        .add_custom_ingredient(Ingredient.EGG)
        .build()
    )
    assert pancake.custom_ingredients == ("EGG",)


def test_base_path_rejects_custom_ingredient(catalog):
    builder = PancakeBuilder(catalog)
    with pytest.raises(InvalidArgumentError, match="Only base ingredients"):
        builder.add_base_ingredient(Ingredient.HAZELNUT)


def test_unknown_ingredient_rejected(catalog):
    builder = PancakeBuilder(catalog).add_base_ingredient(Ingredient.FLOUR)
    with pytest.raises(InvalidArgumentError):
        builder.add_custom_ingredient("MAPLE_SYRUP")
    with pytest.raises(InvalidArgumentError):
        builder.add_base_ingredient("MAPLE_SYRUP")


def test_build_requires_base_ingredient(catalog):
    builder = PancakeBuilder(catalog).add_custom_ingredient(Ingredient.HAZELNUT)
    with pytest.raises(InvalidStateError, match="at least one base ingredient"):
        builder.build()


def test_pancake_is_immutable(catalog):
    pancake = PancakeBuilder.standard(catalog).build()
    with pytest.raises(FrozenInstanceError):
        pancake.base_ingredients = ("EGG",)


def test_builder_reuse_does_not_change_built_pancake(catalog):
    builder = PancakeBuilder.standard(catalog)
    first = builder.build()
    builder.add_custom_ingredient(Ingredient.HAZELNUT)
    assert first.custom_ingredients == ()
    assert builder.build().custom_ingredients == ("HAZELNUT",)


def test_price_follows_catalog_repricing(catalog):
    pancake = PancakeBuilder.vegan(catalog).build()
    catalog.add_ingredient(Ingredient.SOY_MILK, "1.25", is_base=True)
    assert pancake.price == Decimal("1.75")


def test_describe(catalog):
    pancake = (
        PancakeBuilder.vegan(catalog)
        .add_custom_ingredient(Ingredient.WHIPPED_CREAM)
        .build()
    )
    assert pancake.describe() == "Pancake with flour, soy milk topped with whipped cream"
    assert str(pancake) == pancake.describe()


def test_equality_ignores_catalog(catalog):
    a = PancakeBuilder.standard(catalog).build()
    b = PancakeBuilder.standard().build()
    assert a == b


def test_direct_construction_coerces_lists_to_tuples(catalog):
    pancake = Pancake(
        base_ingredients=["flour", Ingredient.MILK],
        custom_ingredients=[Ingredient.HAZELNUT],
        catalog=catalog
    )
    assert pancake.base_ingredients == ("FLOUR", "MILK")
    assert pancake.custom_ingredients == ("HAZELNUT",)
    assert pancake.price == Decimal("3.50")


def test_direct_construction_requires_base_ingredient(catalog):
    with pytest.raises(InvalidStateError, match="at least one base ingredient"):
        Pancake(base_ingredients=(), catalog=catalog)


def test_direct_construction_rejects_unknown_ingredient(catalog):
    with pytest.raises(InvalidArgumentError, match="CHEESE"):
        Pancake(base_ingredients=("CHEESE",), catalog=catalog)
    with pytest.raises(InvalidArgumentError, match="Invalid ingredient: CHEESE"):
        Pancake(
            base_ingredients=("FLOUR",),
            custom_ingredients=("CHEESE",),
            catalog=catalog
        )


def test_direct_construction_rejects_custom_in_base(catalog):
    with pytest.raises(InvalidArgumentError, match="Only base ingredients"):
        Pancake(base_ingredients=("HAZELNUT",), catalog=catalog)


def test_invalid_pancake_never_reaches_ledger(ledger):
    order = ledger.create_order(1, 1)
    with pytest.raises(InvalidArgumentError):
        ledger.add_pancake_to_order(order.id, Pancake(base_ingredients=("CHEESE",)))
    assert order.pancake_count() == 0


def test_builder_keeps_injected_empty_catalog():
    catalog = IngredientCatalog()
    builder = PancakeBuilder(catalog)
    assert builder.catalog is catalog
    with pytest.raises(InvalidArgumentError):
        builder.add_base_ingredient(Ingredient.FLOUR)


def test_builder_sees_ingredients_added_to_empty_catalog():
    catalog = IngredientCatalog()
    builder = PancakeBuilder(catalog)
    catalog.add_ingredient(Ingredient.FLOUR, "0.75", is_base=True)

    pancake = builder.add_base_ingredient(Ingredient.FLOUR).build()
    assert pancake.catalog is catalog
    assert pancake.price == Decimal("0.75")
