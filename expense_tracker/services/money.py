"""Money / rounding helpers.

Centralized so aggregation, budget enforcement and the SQLite store use
identical rounding and storage semantics. Amounts are kept as ``Decimal``
everywhere and stored as integer cents.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Union[Decimal, int, str, float]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their shortest repr instead of binary noise
    return Decimal(str(value))


def round2(value: Union[Decimal, int, str, float]) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Union[Decimal, int, str]) -> int:
    cents = to_decimal(value) * 100
    if cents != cents.to_integral_value():
        raise ValueError(f"amount {value} has more than 2 fractional digits")
    return int(cents)


def from_cents(cents: int) -> Decimal:
    return (Decimal(int(cents)) / 100).quantize(CENT)
