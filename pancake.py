"""
Pancake Module
==============
Immutable pancake value and its builder.

A Pancake is built once through PancakeBuilder and never changes
afterwards. Its price is the sum of catalog prices over the base and
custom ingredients.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple

from errors import InvalidArgumentError, InvalidStateError
from menu import (
    Ingredient,
    IngredientCatalog,
    IngredientRef,
    get_default_catalog,
    normalize_ingredient_id,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pancake:
    """
    Immutable pancake.

    CRITICAL: frozen=True, and both ingredient sequences are tuples.
    Use PancakeBuilder to create one; direct construction is validated
    against the catalog with the same rules.
    """
    base_ingredients: Tuple[str, ...]
    custom_ingredients: Tuple[str, ...] = ()
    catalog: IngredientCatalog = field(
        default_factory=get_default_catalog,
        repr=False,
        compare=False
    )

    def __post_init__(self):
        """
        Normalize ingredient ids to tuples and validate them.

        Raises:
            InvalidStateError: If there is no base ingredient
            InvalidArgumentError: If an ingredient is unknown, or a base
                slot holds a custom-only ingredient
        """
        base = tuple(normalize_ingredient_id(i) for i in self.base_ingredients)
        custom = tuple(normalize_ingredient_id(i) for i in self.custom_ingredients)

        if not base:
            raise InvalidStateError(
                "A pancake must have at least one base ingredient."
            )

        for ingredient_id in base:
            if not (self.catalog.is_valid(ingredient_id)
                    and self.catalog.is_base_ingredient(ingredient_id)):
                raise InvalidArgumentError(
                    f"Only base ingredients can be added here: {ingredient_id}"
                )
        for ingredient_id in custom:
            if not self.catalog.is_valid(ingredient_id):
                raise InvalidArgumentError(f"Invalid ingredient: {ingredient_id}")

        # frozen: assign through object.__setattr__
        object.__setattr__(self, "base_ingredients", base)
        object.__setattr__(self, "custom_ingredients", custom)

    @property
    def price(self) -> Decimal:
        """Sum of catalog prices over base and custom ingredients."""
        return sum(
            (self.catalog.price_of(i) for i in self.ingredients),
            Decimal("0.00")
        )

    @property
    def ingredients(self) -> Tuple[str, ...]:
        """Base ingredients followed by custom ingredients."""
        return self.base_ingredients + self.custom_ingredients

    def describe(self) -> str:
        """Human-readable description used in audit messages."""
        base = ", ".join(i.lower().replace("_", " ") for i in self.base_ingredients)
        if not self.custom_ingredients:
            return f"Pancake with {base}"
        custom = ", ".join(i.lower().replace("_", " ") for i in self.custom_ingredients)
        return f"Pancake with {base} topped with {custom}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "base_ingredients": list(self.base_ingredients),
            "custom_ingredients": list(self.custom_ingredients),
            "price": str(self.price),
        }

    def __str__(self) -> str:
        return self.describe()


class PancakeBuilder:
    """
    Step-by-step pancake builder.

    Every ingredient is validated against the catalog when it is added,
    so build() never produces a pancake with an unknown ingredient.
    """

    def __init__(self, catalog: Optional[IngredientCatalog] = None):
        self.catalog = catalog if catalog is not None else get_default_catalog()
        self._base: List[str] = []
        self._custom: List[str] = []

    def add_base_ingredient(self, ingredient: IngredientRef) -> 'PancakeBuilder':
        """
        Add a base ingredient.

        Raises:
            InvalidArgumentError: If the ingredient is unknown or not a base ingredient
        """
        ingredient_id = normalize_ingredient_id(ingredient)

        if not (self.catalog.is_valid(ingredient_id)
                and self.catalog.is_base_ingredient(ingredient_id)):
            raise InvalidArgumentError(
                f"Only base ingredients can be added here: {ingredient_id}"
            )

        self._base.append(ingredient_id)
        return self

    def add_custom_ingredient(self, ingredient: IngredientRef) -> 'PancakeBuilder':
        """
        Add a custom ingredient (any valid catalog ingredient).

        Raises:
            InvalidArgumentError: If the ingredient is unknown
        """
        ingredient_id = normalize_ingredient_id(ingredient)

        if not self.catalog.is_valid(ingredient_id):
            raise InvalidArgumentError(f"Invalid ingredient: {ingredient_id}")

        self._custom.append(ingredient_id)
        return self

    def build(self) -> Pancake:
        """
        Build the pancake.

        Raises:
            InvalidStateError: If no base ingredient was added
        """
        if not self._base:
            raise InvalidStateError(
                "A pancake must have at least one base ingredient."
            )

        pancake = Pancake(
            base_ingredients=tuple(self._base),
            custom_ingredients=tuple(self._custom),
            catalog=self.catalog
        )

        logger.debug(f"Built pancake: {pancake.describe()}")

        return pancake

    # ========================================================================
    # PRESETS
    # ========================================================================

    @classmethod
    def standard(cls, catalog: Optional[IngredientCatalog] = None) -> 'PancakeBuilder':
        """Builder preloaded with flour, egg and milk."""
        return (
            cls(catalog)
            .add_base_ingredient(Ingredient.FLOUR)
            .add_base_ingredient(Ingredient.EGG)
            .add_base_ingredient(Ingredient.MILK)
        )

    @classmethod
    def vegan(cls, catalog: Optional[IngredientCatalog] = None) -> 'PancakeBuilder':
        """Builder preloaded with flour and soy milk."""
        return (
            cls(catalog)
            .add_base_ingredient(Ingredient.FLOUR)
            .add_base_ingredient(Ingredient.SOY_MILK)
        )
