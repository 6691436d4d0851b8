"""
Money helpers — peso rounding and display formatting.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP

CENTAVO = Decimal("0.01")
_DISPLAY = Decimal("0.001")


def to_centavos(amount: Decimal) -> Decimal:
    """Round to whole centavos, half-even."""
    return amount.quantize(CENTAVO, rounding=ROUND_HALF_EVEN)


def format_amount(amount: Decimal | int) -> str:
    """
    Thousands-grouped amount without a trailing zero fraction.

    >>> format_amount(Decimal("4150.00"))
    '4,150'
    >>> format_amount(Decimal("1234.5"))
    '1,234.5'
    """
    q = Decimal(amount).quantize(_DISPLAY, rounding=ROUND_HALF_UP)
    text = f"{q:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_peso(amount: Decimal | int) -> str:
    return f"₱{format_amount(amount)}"


__all__ = ("CENTAVO", "to_centavos", "format_amount", "format_peso")
