"""
Ingredient Menu Module
======================
Static ingredient catalog: price lookup and base/custom classification.

Responsibilities:
- Hold the price of every known ingredient
- Classify ingredients as base (batter) or custom (topping)
- Validate ingredient references before a pancake is built
- Accept administrative additions at runtime

Does NOT:
- Build pancakes
- Know about orders or their lifecycle
"""

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Union

from prometheus_client import Counter

from errors import InvalidArgumentError


logger = logging.getLogger(__name__)


# ============================================================================
# METRICS
# ============================================================================

catalog_lookups = Counter(
    'pancake_catalog_lookups_total',
    'Ingredient catalog lookups',
    ['result']
)


# ============================================================================
# INGREDIENTS
# ============================================================================

class Ingredient(str, Enum):
    """Known ingredient identifiers."""
    DARK_CHOCOLATE = "DARK_CHOCOLATE"
    WHIPPED_CREAM = "WHIPPED_CREAM"
    HAZELNUT = "HAZELNUT"
    MILK_CHOCOLATE = "MILK_CHOCOLATE"
    MILK = "MILK"
    FLOUR = "FLOUR"
    EGG = "EGG"
    SOY_MILK = "SOY_MILK"


IngredientRef = Union[Ingredient, str]


@dataclass(frozen=True)
class CatalogEntry:
    """
    One priced ingredient.

    frozen=True: re-pricing replaces the entry, it never mutates it.
    """
    ingredient_id: str
    price: Decimal
    is_base: bool

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary."""
        return {
            "ingredient_id": self.ingredient_id,
            "price": str(self.price),
            "is_base": self.is_base,
        }


# (price, is_base)
DEFAULT_INGREDIENTS: Dict[Ingredient, tuple] = {
    Ingredient.DARK_CHOCOLATE: ("1.50", False),
    Ingredient.MILK_CHOCOLATE: ("1.00", False),
    Ingredient.HAZELNUT: ("2.00", False),
    Ingredient.WHIPPED_CREAM: ("0.25", False),
    Ingredient.MILK: ("1.00", True),
    Ingredient.SOY_MILK: ("1.00", True),
    Ingredient.FLOUR: ("0.50", True),
    Ingredient.EGG: ("0.75", True),
}


def normalize_ingredient_id(ingredient: IngredientRef) -> str:
    """
    Normalize an ingredient reference to its catalog key.

    Accepts an Ingredient member or its name in any case.

    Raises:
        InvalidArgumentError: If the reference is not a non-empty string
    """
    if isinstance(ingredient, Ingredient):
        return ingredient.value

    if not isinstance(ingredient, str) or not ingredient.strip():
        raise InvalidArgumentError(f"Invalid ingredient reference: {ingredient!r}")

    return ingredient.strip().upper()


# ============================================================================
# INGREDIENT CATALOG
# ============================================================================

class IngredientCatalog:
    """
    Thread-safe ingredient catalog.

    Read-only at runtime except for add_ingredient(). Lookups and
    additions share one lock so a reader never sees a half-applied
    re-pricing.
    """

    def __init__(self, entries: Optional[Dict[IngredientRef, tuple]] = None):
        self._entries: Dict[str, CatalogEntry] = {}
        self._lock = threading.RLock()

        for ingredient, (price, is_base) in (entries or {}).items():
            self.add_ingredient(ingredient, price, is_base=is_base)

    def add_ingredient(
        self,
        ingredient: IngredientRef,
        price: Union[Decimal, str, int, float],
        is_base: bool = False
    ) -> CatalogEntry:
        """
        Add or re-price an ingredient.

        Args:
            ingredient: Ingredient member or name
            price: Unit price (must be >= 0)
            is_base: True if usable as a batter ingredient

        Returns:
            The stored entry

        Raises:
            InvalidArgumentError: If the price is negative or not a number
        """
        ingredient_id = normalize_ingredient_id(ingredient)
        normalized_price = self._normalize_price(price)

        if normalized_price is None:
            raise InvalidArgumentError(
                f"Invalid price for {ingredient_id}: {price!r}"
            )

        entry = CatalogEntry(
            ingredient_id=ingredient_id,
            price=normalized_price,
            is_base=bool(is_base)
        )

        with self._lock:
            replaced = ingredient_id in self._entries
            self._entries[ingredient_id] = entry

        if replaced:
            logger.warning(
                f"Ingredient re-priced: {ingredient_id}",
                extra={"ingredient_id": ingredient_id, "price": str(normalized_price)}
            )
        else:
            logger.debug(f"Ingredient added: {ingredient_id} (${normalized_price})")

        return entry

    def is_valid(self, ingredient: IngredientRef) -> bool:
        """Check if the ingredient is present in the catalog."""
        try:
            ingredient_id = normalize_ingredient_id(ingredient)
        except InvalidArgumentError:
            catalog_lookups.labels(result='invalid').inc()
            return False

        with self._lock:
            found = ingredient_id in self._entries

        catalog_lookups.labels(result='hit' if found else 'miss').inc()
        return found

    def is_base_ingredient(self, ingredient: IngredientRef) -> bool:
        """Check if the ingredient may be used as a base ingredient."""
        entry = self._find(ingredient)
        return entry is not None and entry.is_base

    def price_of(self, ingredient: IngredientRef) -> Decimal:
        """
        Get ingredient price.

        Raises:
            InvalidArgumentError: If the ingredient is not in the catalog
        """
        entry = self._find(ingredient)
        if entry is None:
            raise InvalidArgumentError(f"Unknown ingredient: {ingredient}")
        return entry.price

    def get_entry(self, ingredient: IngredientRef) -> Optional[CatalogEntry]:
        """Get catalog entry, or None if unknown."""
        return self._find(ingredient)

    def entries(self) -> Dict[str, CatalogEntry]:
        """Get a copy of all entries."""
        with self._lock:
            return dict(self._entries)

    def _find(self, ingredient: IngredientRef) -> Optional[CatalogEntry]:
        try:
            ingredient_id = normalize_ingredient_id(ingredient)
        except InvalidArgumentError:
            return None

        with self._lock:
            return self._entries.get(ingredient_id)

    @staticmethod
    def _normalize_price(price) -> Optional[Decimal]:
        """Normalize price to a two-place Decimal."""
        if isinstance(price, bool):
            return None
        try:
            value = Decimal(str(price))
        except (ArithmeticError, ValueError, TypeError):
            return None

        if not value.is_finite() or value < 0:
            return None

        return value.quantize(Decimal("0.01"))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, ingredient) -> bool:
        return self._find(ingredient) is not None


# ============================================================================
# DEFAULT CATALOG
# ============================================================================

_default_catalog: Optional[IngredientCatalog] = None
_default_catalog_lock = threading.Lock()


def create_default_catalog() -> IngredientCatalog:
    """Create a new catalog seeded with the standard ingredients."""
    return IngredientCatalog(DEFAULT_INGREDIENTS)


def get_default_catalog() -> IngredientCatalog:
    """Get the shared default catalog (created on first call)."""
    global _default_catalog

    with _default_catalog_lock:
        if _default_catalog is None:
            _default_catalog = create_default_catalog()
        return _default_catalog
