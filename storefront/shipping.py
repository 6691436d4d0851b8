"""
Shipping — flat fee per delivery region.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from enum import Enum

from storefront.settings import Settings


class ShippingLocation(Enum):
    NCR = "NCR"
    LUZON = "LUZON"
    VISAYAS_MINDANAO = "VISAYAS_MINDANAO"

    @property
    def label(self) -> str:
        """Display label: the first underscore reads as ' & '."""
        return self.value.replace("_", " & ", 1)


class ShippingFeeTable:
    """
    Fee lookup for every ShippingLocation.

    The table must price every location; a partial table is a configuration
    error and fails at construction.
    """

    def __init__(self, fees: Mapping[ShippingLocation | str, Decimal | int]) -> None:
        resolved = {ShippingLocation(k) if isinstance(k, str) else k: Decimal(v) for k, v in fees.items()}
        missing = [loc.value for loc in ShippingLocation if loc not in resolved]
        if missing:
            raise ValueError(f"Shipping fee missing for: {', '.join(missing)}")
        if any(fee < 0 for fee in resolved.values()):
            raise ValueError("Shipping fees must not be negative")
        self._fees = resolved

    @classmethod
    def from_settings(cls, settings: Settings) -> ShippingFeeTable:
        return cls(settings.shipping_fees)

    def fee(self, location: ShippingLocation | None) -> Decimal:
        """Fee for ``location``; zero while no location is chosen."""
        if location is None:
            return Decimal("0")
        return self._fees[location]

    def items(self) -> list[tuple[ShippingLocation, Decimal]]:
        return [(loc, self._fees[loc]) for loc in ShippingLocation]


__all__ = ("ShippingLocation", "ShippingFeeTable")
