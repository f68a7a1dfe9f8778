"""Monetary value helpers.

Amounts are ``Decimal`` values quantized to cents with ``ROUND_HALF_UP``.
Running sums go through :class:`RunningTotal`, which rounds the total after
every accumulation step so that partial sums reported to callers are always
cent-exact and reproducible.
"""
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyInput = Union[Decimal, int, float, str]

_BRL_NOISE = re.compile(r"[R$\s]")


def to_decimal(value: MoneyInput | None) -> Decimal:
    """Convert ``value`` to an unrounded ``Decimal``.

    Floats go through ``str`` so ``10.005`` stays ``10.005`` instead of its
    binary approximation. ``None`` is treated as zero.
    """
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("booleans are not monetary values")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"invalid monetary value: {value!r}") from exc


def quantize(value: MoneyInput | None) -> Decimal:
    """Return ``value`` rounded half-up to two decimal places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_brl(raw: str | MoneyInput | None) -> Decimal:
    """Parse user input such as ``"R$ 1.234,56"``, ``"1234,56"`` or ``"1234.56"``."""
    if raw is None:
        return ZERO
    if not isinstance(raw, str):
        return quantize(raw)

    cleaned = _BRL_NOISE.sub("", raw)
    if not cleaned:
        return ZERO
    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(".", "")
    cleaned = cleaned.replace(",", ".")
    return quantize(cleaned)


def signed_amount(amount: MoneyInput, transaction_type: str) -> Decimal:
    """Return ``amount`` with the sign implied by the transaction type."""
    value = to_decimal(amount)
    return -value if str(transaction_type) == "expense" else value


def divide(value: MoneyInput, divisor: int | Decimal) -> Decimal:
    if not divisor:
        raise ZeroDivisionError("cannot divide a monetary value by zero")
    return quantize(to_decimal(value) / Decimal(divisor))


def percentage(numerator: MoneyInput, denominator: MoneyInput) -> Decimal | None:
    """Return ``numerator / denominator * 100`` rounded to 2 places, or ``None`` for a zero base."""
    base = to_decimal(denominator)
    if base == 0:
        return None
    return quantize(to_decimal(numerator) / base * 100)


class RunningTotal:
    """Accumulator applying the add-then-round policy.

    The exact sum is tracked alongside the rounded one so that the value
    reported after each step is the cent rounding of everything added so
    far. For ``[10.005, 10.005, -5.00]`` the reported steps are
    ``10.01, 20.01, 15.01``.
    """

    __slots__ = ("_exact", "_value")

    def __init__(self, start: MoneyInput | None = None) -> None:
        self._exact = to_decimal(start)
        self._value = quantize(self._exact)

    def add(self, amount: MoneyInput) -> Decimal:
        self._exact += to_decimal(amount)
        self._value = quantize(self._exact)
        return self._value

    def subtract(self, amount: MoneyInput) -> Decimal:
        return self.add(-to_decimal(amount))

    @property
    def value(self) -> Decimal:
        return self._value

    def __repr__(self) -> str:
        return f"RunningTotal({self._value})"


def running_totals(amounts: Iterable[MoneyInput], start: MoneyInput | None = None) -> list[Decimal]:
    """Return the rounded running total after each amount."""
    total = RunningTotal(start)
    return [total.add(amount) for amount in amounts]


def money_sum(amounts: Iterable[MoneyInput]) -> Decimal:
    total = RunningTotal()
    for amount in amounts:
        total.add(amount)
    return total.value


__all__ = [
    "CENT",
    "MoneyInput",
    "RunningTotal",
    "ZERO",
    "divide",
    "money_sum",
    "parse_brl",
    "percentage",
    "quantize",
    "running_totals",
    "signed_amount",
    "to_decimal",
]
