"""Price calculations - effective price, unit price and display formatting"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, Overflow, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Any, Optional, Union

HUNDRED = Decimal("100")
NO_UNIT_PRICE = "--"


class UnitKind(str, Enum):
    """Basis a package quantity is measured in (wire values from the vision model)"""
    GRAMS = "g"
    MILLILITERS = "ml"
    PIECES = "pcs"


_UNIT_ALIASES = {
    "g": UnitKind.GRAMS,
    "grams": UnitKind.GRAMS,
    "ml": UnitKind.MILLILITERS,
    "milliliters": UnitKind.MILLILITERS,
    "pcs": UnitKind.PIECES,
    "pieces": UnitKind.PIECES,
}


def parse_unit_kind(value: Any) -> Optional[UnitKind]:
    """Normalize a unit label to UnitKind, or None when unrecognized."""
    if isinstance(value, UnitKind):
        return value
    if not isinstance(value, str):
        return None
    return _UNIT_ALIASES.get(value.strip().lower())


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a price or quantity.

    Accepts ints, floats, Decimals and numeric strings. Returns None for
    anything that is not a finite number (None, bools, blanks, NaN, inf).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        # str() keeps the shortest repr, so 12.345 stays 12.345
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite():
        return None
    return number


def resolve_effective_price(original_price: Any, special_price: Any) -> Decimal:
    """
    Price actually paid: the special price wins over the original price.

    Returns 0 when neither parses; callers treat 0 as "no valid price".
    A special price of 0 counts as absent.
    """
    special = to_decimal(special_price)
    if special:
        return special

    original = to_decimal(original_price)
    if original:
        return original

    return Decimal("0")


def calculate_unit_price(price: Any, quantity: Any, unit_kind: Any) -> Optional[Decimal]:
    """
    Normalize a price to per-100 g, per-100 ml, or per piece.

    Returns None when price or quantity is not a finite number or quantity
    is not positive. Unrecognized unit kinds are priced per piece. No
    rounding is applied.
    """
    p = to_decimal(price)
    q = to_decimal(quantity)
    if p is None or q is None or q <= 0:
        return None

    kind = parse_unit_kind(unit_kind)
    try:
        if kind in (UnitKind.GRAMS, UnitKind.MILLILITERS):
            return (p / q) * HUNDRED
        return p / q
    except (InvalidOperation, Overflow):
        # Exponent out of range for the decimal context
        return None


def format_unit_price(value: Any) -> str:
    """Two-decimal display string, or "--" for missing, invalid or zero values."""
    number = to_decimal(value)
    if number is None or number == 0:
        return NO_UNIT_PRICE

    with localcontext() as ctx:
        if number.adjusted() > ctx.Emax:
            return NO_UNIT_PRICE
        # Fixed-point formatting is not bounded by the context precision
        ctx.rounding = ROUND_HALF_UP
        return f"{number:.2f}"


@dataclass(frozen=True)
class UnitPriceOk:
    value: Decimal

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class UnitPriceInvalid:
    reason: str  # 'invalid_price', 'invalid_quantity', 'non_positive_quantity'

    @property
    def ok(self) -> bool:
        return False


UnitPriceOutcome = Union[UnitPriceOk, UnitPriceInvalid]


def unit_price_result(price: Any, quantity: Any, unit_kind: Any) -> UnitPriceOutcome:
    """
    Tagged variant of calculate_unit_price for use at the API boundary.

    Keeps "no data" distinct from a genuine price so callers never
    confuse the two.
    """
    if to_decimal(price) is None:
        return UnitPriceInvalid("invalid_price")

    q = to_decimal(quantity)
    if q is None:
        return UnitPriceInvalid("invalid_quantity")
    if q <= 0:
        return UnitPriceInvalid("non_positive_quantity")

    value = calculate_unit_price(price, quantity, unit_kind)
    if value is None:
        return UnitPriceInvalid("invalid_price")
    return UnitPriceOk(value)
