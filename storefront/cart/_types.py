"""
Cart types.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from storefront.catalog import Product, ProductVariation
from storefront.errors import StockClamped

type LineKey = tuple[str, str | None, bool]
"""(product id, variation id, complete set): one cart line per key."""


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One cart line.

    ``unit_price`` is frozen when the line is created and is never
    re-derived from the live catalog, so a later catalog price change does
    not reprice lines already in the cart.
    """

    product: Product
    quantity: int
    unit_price: Decimal
    variation: ProductVariation | None = None
    is_complete_set: bool = False

    @property
    def key(self) -> LineKey:
        variation_id = self.variation.id if self.variation is not None else None
        return (self.product.id, variation_id, self.is_complete_set)

    @property
    def total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class CartChange:
    """Outcome of a successful add or quantity update."""

    index: int
    line: CartLine
    clamped: StockClamped | None = None


__all__ = ("LineKey", "CartLine", "CartChange")
