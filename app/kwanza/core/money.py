"""Kwanza (AOA) money helpers.

Amounts are always ``Decimal`` with two places, rounded half away from zero.
Display uses ``.`` for thousands and ``,`` for decimals, e.g. ``1.234,56 Kz``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CURRENCY_CODE = "AOA"
CURRENCY_SYMBOL = "Kz"
CURRENCY_NAME = "Kwanza Angolano"
DECIMAL_PLACES = 2
DECIMAL_SEPARATOR = ","
THOUSANDS_SEPARATOR = "."

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")

_LOCAL_NUMBER = re.compile(r"^-?\d{1,3}(\.\d{3})*(,\d+)?$|^-?\d+(,\d+)?$")
_INVARIANT_NUMBER = re.compile(r"^-?\d{1,3}(,\d{3})*(\.\d+)?$|^-?\d+(\.\d+)?$")


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    symbol: str
    name: str
    decimal_places: int
    decimal_separator: str
    thousands_separator: str


def to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: object) -> Decimal:
    """Round to two places, half away from zero (``2.345`` -> ``2.35``, ``-2.345`` -> ``-2.35``)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _group(value: Decimal) -> str:
    rounded = round_money(value)
    sign = "-" if rounded < 0 else ""
    integer_part, fraction = f"{abs(rounded):.2f}".split(".")
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    return f"{sign}{THOUSANDS_SEPARATOR.join(groups)}{DECIMAL_SEPARATOR}{fraction}"


def format_money(value: object, include_symbol: bool = True) -> str:
    text = _group(to_decimal(value))
    if include_symbol:
        return f"{text} {CURRENCY_SYMBOL}"
    return text


def format_money_with_code(value: object) -> str:
    return f"{_group(to_decimal(value))} {CURRENCY_CODE}"


def format_for_report(value: object, include_code: bool = False) -> str:
    if include_code:
        return format_money_with_code(value)
    return format_money(value)


def try_parse_money(text: str | None) -> Decimal | None:
    """Parse a user-typed amount; ``None`` when it is not a money value.

    The local format (``1.234,56``) wins; the invariant format (``1,234.56``)
    is the fallback, so ``"12.50"`` reads as twelve and a half.
    """
    if text is None or not text.strip():
        return None
    cleaned = text.replace(CURRENCY_SYMBOL, "").replace(CURRENCY_CODE, "").strip().replace(" ", "")
    if not cleaned:
        return None
    candidate = None
    if _LOCAL_NUMBER.match(cleaned):
        candidate = cleaned.replace(THOUSANDS_SEPARATOR, "").replace(DECIMAL_SEPARATOR, ".")
    elif _INVARIANT_NUMBER.match(cleaned):
        candidate = cleaned.replace(",", "")
    if candidate is None:
        return None
    try:
        return Decimal(candidate)
    except InvalidOperation:
        return None


def parse_money(text: str | None) -> Decimal:
    value = try_parse_money(text)
    if value is None:
        raise ValueError(f"Could not convert '{text}' to a valid money value")
    return value


def is_valid_money(text: str | None) -> bool:
    return try_parse_money(text) is not None


def percentage_of(value: object, total: object) -> Decimal:
    """Share of ``value`` in ``total`` as a percentage; 0 when total is 0."""
    total_dec = to_decimal(total)
    if total_dec == 0:
        return ZERO
    return round_money(to_decimal(value) / total_dec * HUNDRED)


def percentage_value(amount: object, percentage: object) -> Decimal:
    return round_money(to_decimal(amount) * to_decimal(percentage) / HUNDRED)


def currency_info() -> CurrencyInfo:
    return CurrencyInfo(
        code=CURRENCY_CODE,
        symbol=CURRENCY_SYMBOL,
        name=CURRENCY_NAME,
        decimal_places=DECIMAL_PLACES,
        decimal_separator=DECIMAL_SEPARATOR,
        thousands_separator=THOUSANDS_SEPARATOR,
    )
