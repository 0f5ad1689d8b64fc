from decimal import Decimal

import pytest

from pricecheck.services.price_calculations import (
    UnitKind,
    UnitPriceInvalid,
    UnitPriceOk,
    calculate_unit_price,
    format_unit_price,
    parse_unit_kind,
    resolve_effective_price,
    to_decimal,
    unit_price_result,
)


class TestResolveEffectivePrice:
    def test_special_price_wins(self):
        assert resolve_effective_price(10, 7) == 7

    def test_falls_back_to_original(self):
        assert resolve_effective_price(10, None) == 10

    def test_nothing_valid_is_zero(self):
        assert resolve_effective_price(None, None) == 0

    def test_numeric_strings(self):
        assert resolve_effective_price("59", "39.5") == Decimal("39.5")

    def test_unparseable_special_uses_original(self):
        assert resolve_effective_price("59", "abc") == Decimal("59")

    def test_zero_special_counts_as_absent(self):
        assert resolve_effective_price(59, 0) == Decimal("59")

    def test_never_raises_on_garbage(self):
        assert resolve_effective_price({"a": 1}, [1]) == 0


class TestCalculateUnitPrice:
    @pytest.mark.parametrize("unit", ["g", "ml", UnitKind.GRAMS, UnitKind.MILLILITERS])
    @pytest.mark.parametrize("price,quantity", [
        (Decimal("59"), Decimal("180")),
        (Decimal("120.5"), Decimal("2000")),
        (Decimal("1"), Decimal("3")),
    ])
    def test_mass_and_volume_per_hundred(self, price, quantity, unit):
        assert calculate_unit_price(price, quantity, unit) == (price / quantity) * 100

    @pytest.mark.parametrize("price,quantity", [
        (Decimal("59"), Decimal("10")),
        (Decimal("10"), Decimal("3")),
    ])
    def test_pieces_per_piece(self, price, quantity):
        assert calculate_unit_price(price, quantity, "pcs") == price / quantity

    def test_unknown_unit_priced_per_piece(self):
        assert calculate_unit_price(50, 5, "boxes") == Decimal("10")

    @pytest.mark.parametrize("quantity", [0, -1, "0", Decimal("-0.5")])
    def test_non_positive_quantity_is_none(self, quantity):
        assert calculate_unit_price(50, quantity, "g") is None

    @pytest.mark.parametrize("price,quantity", [
        ("abc", 100),
        (50, "abc"),
        (None, 100),
        (50, None),
        (float("nan"), 100),
        (50, float("inf")),
        ("", 100),
    ])
    def test_non_numeric_is_none(self, price, quantity):
        assert calculate_unit_price(price, quantity, "g") is None

    def test_no_rounding(self):
        assert calculate_unit_price(10, 3, "pcs") == Decimal(10) / Decimal(3)

    def test_exponent_overflow_is_none(self):
        assert calculate_unit_price("1e999999", "1e-999999", "pcs") is None
        assert calculate_unit_price("1e999999", "1e-999990", "g") is None

    def test_zero_price_chain_yields_zero_unit_price(self):
        # No valid price resolves to 0, which still produces a unit price
        price = resolve_effective_price(None, None)
        assert calculate_unit_price(price, 500, "g") == 0


class TestFormatUnitPrice:
    @pytest.mark.parametrize("value", [None, 0, "0", Decimal("0.00"), "abc", float("nan")])
    def test_placeholder(self, value):
        assert format_unit_price(value) == "--"

    def test_rounds_half_up(self):
        assert format_unit_price(12.345) == "12.35"

    def test_pads_to_two_places(self):
        assert format_unit_price(5) == "5.00"
        assert format_unit_price(Decimal("32.7777")) == "32.78"

    def test_huge_values_do_not_raise(self):
        assert format_unit_price(1e30) == "1" + "0" * 30 + ".00"
        assert format_unit_price(Decimal("123456789012345678901234567890.125")) == "123456789012345678901234567890.13"
        assert format_unit_price("1e9999999") == "--"


class TestParsing:
    def test_to_decimal_rejects_bool(self):
        assert to_decimal(True) is None

    def test_to_decimal_strips(self):
        assert to_decimal(" 12.5 ") == Decimal("12.5")

    @pytest.mark.parametrize("label,expected", [
        ("g", UnitKind.GRAMS),
        ("ML", UnitKind.MILLILITERS),
        ("pieces", UnitKind.PIECES),
        ("kg", None),
        (None, None),
    ])
    def test_parse_unit_kind(self, label, expected):
        assert parse_unit_kind(label) is expected


class TestUnitPriceResult:
    def test_ok(self):
        result = unit_price_result(59, 180, "g")
        assert isinstance(result, UnitPriceOk)
        assert result.ok
        assert result.value == calculate_unit_price(59, 180, "g")

    @pytest.mark.parametrize("price,quantity,reason", [
        ("abc", 100, "invalid_price"),
        (50, None, "invalid_quantity"),
        (50, 0, "non_positive_quantity"),
        ("1e999999", "1e-999999", "invalid_price"),
    ])
    def test_invalid_reasons(self, price, quantity, reason):
        result = unit_price_result(price, quantity, "g")
        assert isinstance(result, UnitPriceInvalid)
        assert not result.ok
        assert result.reason == reason
