from decimal import Decimal

import pytest

from app.kwanza.core.money import (
    ZERO,
    currency_info,
    format_for_report,
    format_money,
    format_money_with_code,
    is_valid_money,
    parse_money,
    percentage_of,
    percentage_value,
    round_money,
    try_parse_money,
)


def test_round_money_is_half_away_from_zero():
    assert round_money(Decimal("2.345")) == Decimal("2.35")
    assert round_money(Decimal("-2.345")) == Decimal("-2.35")
    assert round_money(0.1 + 0.2) == Decimal("0.30")
    assert round_money(7) == Decimal("7.00")


def test_format_money_uses_local_separators():
    assert format_money(Decimal("1234.56")) == "1.234,56 Kz"
    assert format_money(Decimal("1234567.5")) == "1.234.567,50 Kz"
    assert format_money(Decimal("12"), include_symbol=False) == "12,00"
    assert format_money(Decimal("-1500")) == "-1.500,00 Kz"


def test_format_with_code_and_report():
    assert format_money_with_code(Decimal("1000")) == "1.000,00 AOA"
    assert format_for_report(Decimal("1000")) == "1.000,00 Kz"
    assert format_for_report(Decimal("1000"), include_code=True) == "1.000,00 AOA"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1.234,56", Decimal("1234.56")),
        ("1.234,56 Kz", Decimal("1234.56")),
        ("AOA 2.500", Decimal("2500")),
        ("1,234.56", Decimal("1234.56")),
        ("12.50", Decimal("12.50")),
        ("750", Decimal("750")),
        ("-10,5", Decimal("-10.5")),
    ],
)
def test_try_parse_money_accepts_local_and_invariant_formats(text, expected):
    assert try_parse_money(text) == expected


@pytest.mark.parametrize("text", [None, "", "   ", "Kz", "abc", "1,2,3.4.5"])
def test_try_parse_money_rejects_garbage(text):
    assert try_parse_money(text) is None
    assert not is_valid_money(text)


def test_parse_money_raises_on_invalid_text():
    assert parse_money("3.000,00 Kz") == Decimal("3000.00")
    with pytest.raises(ValueError):
        parse_money("dez mil")


def test_percentages():
    assert percentage_of(Decimal("25"), Decimal("200")) == Decimal("12.50")
    assert percentage_of(Decimal("25"), ZERO) == ZERO
    assert percentage_value(Decimal("2000"), Decimal("15")) == Decimal("300.00")
    assert percentage_value(Decimal("99.99"), Decimal("33.333")) == Decimal("33.33")


def test_currency_info():
    info = currency_info()
    assert info.code == "AOA"
    assert info.symbol == "Kz"
    assert info.name == "Kwanza Angolano"
    assert info.decimal_places == 2
    assert info.decimal_separator == ","
    assert info.thousands_separator == "."
