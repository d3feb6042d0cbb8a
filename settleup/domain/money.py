"""Fixed-point helpers shared by the calculators, the combiner and the reducer.

Amounts are held as integer cents while they are being combined or settled and
leave the domain as `Decimal` values quantized to the cent.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import TypeVar

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

K = TypeVar("K", bound=Hashable)


def as_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr keeps 0.1 as 0.1 instead of its binary expansion
        return Decimal(repr(value))
    return Decimal(value)


def round_cents(value: Decimal | int | float | str) -> Decimal:
    return as_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Decimal | int | float | str) -> int:
    return int((as_decimal(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / Decimal(100)).quantize(CENT)


def to_cents_map(net: Mapping[K, Decimal | int | float | str]) -> dict[K, int]:
    return {key: to_cents(value) for key, value in net.items()}


def from_cents_map(net: Mapping[K, int]) -> dict[K, Decimal]:
    return {key: from_cents(value) for key, value in net.items()}


def reconcile_pennies(amounts: Mapping[K, int], target: K, expected_total: int = 0) -> dict[K, int]:
    """Return a copy of `amounts` whose values sum to `expected_total`.

    The whole residual lands on `target`. Callers bound the residual before
    calling; this helper only moves it.
    """
    reconciled = dict(amounts)
    residual = expected_total - sum(reconciled.values())
    if residual:
        reconciled[target] = reconciled[target] + residual
    return reconciled
