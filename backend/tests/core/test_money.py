"""
Tests pour le type valeur Money.
"""
from decimal import Decimal

import pytest

from storefront.core.exceptions import CurrencyMismatch, InvalidMoney, NegativeResult
from storefront.core.money import Money, round_half_away_from_zero


def test_money_of_normalizes_to_two_decimals():
    assert Money.of("80").amount == Decimal("80.00")
    assert Money.of(500).amount == Decimal("500.00")
    assert str(Money.of("1000")) == "1000.00 INR"


def test_money_rejects_more_than_two_decimals():
    with pytest.raises(InvalidMoney):
        Money.of("10.005")


def test_money_rejects_negative_amount():
    with pytest.raises(InvalidMoney):
        Money.of("-1.00")


def test_money_rejects_floats():
    with pytest.raises(InvalidMoney):
        Money.of(0.1)


def test_money_rejects_invalid_currency():
    with pytest.raises(InvalidMoney):
        Money.of("1.00", "RUPEES")


def test_currency_is_upper_cased():
    assert Money.of("1.00", "inr").currency == "INR"


def test_minor_units_round_trip():
    money = Money.from_minor_units(17550)
    assert money.amount == Decimal("175.50")
    assert money.minor_units == 17550


def test_addition_requires_same_currency():
    with pytest.raises(CurrencyMismatch):
        Money.of("1.00", "INR") + Money.of("1.00", "USD")


def test_subtraction_below_zero_raises():
    with pytest.raises(NegativeResult):
        Money.of("1.00") - Money.of("1.01")


def test_times_is_exact():
    assert Money.of("175.50").times(3) == Money.of("526.50")


def test_scale_rounds_half_away_from_zero():
    # 0.05 * 0.10 = 0.005 -> 0.01
    assert Money.of("0.05").scale(Decimal("0.10")) == Money.of("0.01")
    # 0.04 * 0.10 = 0.004 -> 0.00
    assert Money.of("0.04").scale(Decimal("0.10")) == Money.zero()


def test_round_half_away_from_zero_helper():
    assert round_half_away_from_zero(Decimal("2.345")) == Decimal("2.35")
    assert round_half_away_from_zero(Decimal("2.344")) == Decimal("2.34")


def test_split_in_two_gives_odd_unit_to_first_half():
    first, second = Money.of("0.03").split_in_two()
    assert first == Money.of("0.02")
    assert second == Money.of("0.01")
    first, second = Money.of("180.00").split_in_two()
    assert first == second == Money.of("90.00")


def test_comparisons_check_currency():
    assert Money.of("1.00") < Money.of("2.00")
    with pytest.raises(CurrencyMismatch):
        Money.of("1.00", "INR") < Money.of("2.00", "USD")
    with pytest.raises(CurrencyMismatch):
        Money.of("1.00", "INR") == Money.of("1.00", "USD")
    with pytest.raises(CurrencyMismatch):
        Money.of("1.00", "INR") != Money.of("2.00", "USD")


def test_equality_compares_amounts_of_same_currency():
    assert Money.of("80") == Money.of("80.00")
    assert Money.of("80") != Money.of("80.01")
    assert Money.of("80") != None  # noqa: E711
    assert len({Money.of("80"), Money.of("80.00")}) == 1


def test_amount_beyond_decimal_precision_is_invalid():
    with pytest.raises(InvalidMoney):
        Money.of("500.00").times(10**30)
    with pytest.raises(InvalidMoney):
        Money.of(Decimal("1E+40"))
