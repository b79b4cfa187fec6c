"""
Atomic-unit helpers.

Balances are held as integer atomic units; the node reports and accepts
decimal amounts::

    display amount = atomic units / 10 ** decimals

With the default 4 decimals, ``12.345 EOS`` is ``123450`` atomic units.
Conversions go through ``decimal.Decimal`` so no float rounding leaks in.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Union

DEFAULT_DECIMALS: int = 4

Number = Union[int, float, str, Decimal]


def unit_to_atom(value: Number, decimals: int = DEFAULT_DECIMALS) -> int:
    """Convert a display amount to atomic units (truncating extra digits).

    >>> unit_to_atom(12.345, 4)
    123450
    """
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return int(amount.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))


def atom_to_unit(value: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Fixed-decimal text for an atomic amount.

    >>> atom_to_unit(123450, 4)
    '12.3450'
    """
    return f"{Decimal(int(value)).scaleb(-decimals):.{decimals}f}"


def format_quantity(value: int, decimals: int, symbol: str) -> str:
    """Token quantity string as the chain expects it, e.g. ``"1.2345 EOS"``."""
    return f"{atom_to_unit(value, decimals)} {symbol}"
