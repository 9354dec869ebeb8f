"""Unit conversion for invoice quantities and inventory stock levels."""

from decimal import Decimal
from typing import NamedTuple, Optional, Union

from .models import MatchResult

Number = Union[Decimal, int, float]

# unit spelling -> (base unit, factor to base)
UNIT_CONVERSIONS = {
    "ml": ("ml", Decimal("1")),
    "milliliter": ("ml", Decimal("1")),
    "milliliters": ("ml", Decimal("1")),
    "l": ("ml", Decimal("1000")),
    "liter": ("ml", Decimal("1000")),
    "liters": ("ml", Decimal("1000")),
    "g": ("g", Decimal("1")),
    "gram": ("g", Decimal("1")),
    "grams": ("g", Decimal("1")),
    "kg": ("g", Decimal("1000")),
    "kilogram": ("g", Decimal("1000")),
    "kilograms": ("g", Decimal("1000")),
}


class BaseQuantity(NamedTuple):
    value: Decimal
    base_unit: str


class QuantityComparison(NamedTuple):
    has_enough: bool
    required_normalized: Decimal
    available_normalized: Decimal
    base_unit: str


def _decimal(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def normalize_to_base_unit(quantity: Number, unit: str) -> BaseQuantity:
    """
    Express a quantity in ml or g.

    Units outside the table (buc, bax, ...) are returned unchanged.

    Examples:
        >>> normalize_to_base_unit(2, "kg")
        BaseQuantity(value=Decimal('2000'), base_unit='g')
    """
    quantity = _decimal(quantity)
    conversion = UNIT_CONVERSIONS.get((unit or "").strip().lower())
    if conversion is None:
        return BaseQuantity(quantity, unit)
    base_unit, factor = conversion
    return BaseQuantity(quantity * factor, base_unit)


def compare_quantities(
    required: Number,
    required_unit: str,
    available: Number,
    available_unit: str,
) -> QuantityComparison:
    """
    Check whether the available stock covers a required amount.

    Incompatible units never have enough; the raw values are returned.
    """
    req = normalize_to_base_unit(required, required_unit)
    avail = normalize_to_base_unit(available, available_unit)

    if req.base_unit.lower() != avail.base_unit.lower():
        return QuantityComparison(False, _decimal(required), _decimal(available), required_unit)

    return QuantityComparison(
        has_enough=avail.value >= req.value,
        required_normalized=req.value,
        available_normalized=avail.value,
        base_unit=req.base_unit,
    )


def convert_quantity(quantity: Number, from_unit: str, to_unit: str) -> Optional[Decimal]:
    """Convert between units sharing a base unit, None if they don't."""
    source = normalize_to_base_unit(quantity, from_unit)
    target = normalize_to_base_unit(Decimal("1"), to_unit)
    if source.base_unit.lower() != target.base_unit.lower():
        return None
    return source.value / target.value


def stock_adjustment(result: MatchResult) -> Optional[Decimal]:
    """
    Invoice quantity expressed in the matched inventory item's unit.

    None for new ingredients or when the units cannot be converted
    (e.g. "buc" on the invoice, "kg" in inventory).
    """
    if result.matched_item is None:
        return None
    return convert_quantity(result.quantity, result.unit, result.matched_item.unit)


def format_quantity(value: Number, unit: str) -> str:
    """Format a base-unit quantity, switching to L / kg from 1000 up."""
    value = _decimal(value)
    lower_unit = (unit or "").lower()

    if lower_unit == "ml":
        if value >= 1000:
            return f"{value / 1000:.2f} L"
        return f"{value} ml"

    if lower_unit == "g":
        if value >= 1000:
            return f"{value / 1000:.2f} kg"
        return f"{value} g"

    return f"{value} {unit}"
