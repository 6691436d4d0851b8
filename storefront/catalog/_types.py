"""
Catalog types — read-only product data consumed by the cart.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

# ═══════════════════════════════════════════════════════════════════════════════
# Product / Variation
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductVariation:
    """
    A selectable size/strength of a product with its own price and stock.

    The base product discount never applies to a variation.
    """

    id: str
    product_id: str
    name: str
    price: Decimal
    stock_quantity: int = 0
    quantity_mg: Decimal = Decimal("0")


@dataclass(frozen=True, slots=True)
class Product:
    """
    Catalog product.

    ``stock_quantity`` only matters when no variation is selected.
    ``purity_percentage`` is display data and never affects price.
    """

    id: str
    name: str
    base_price: Decimal
    description: str = ""
    category: str = ""
    discount_price: Decimal | None = None
    discount_active: bool = False
    discount_start_date: datetime | None = None
    discount_end_date: datetime | None = None
    purity_percentage: Decimal = Decimal("0")
    is_complete_set: bool = False
    complete_set_price: Decimal | None = None
    complete_set_description: str | None = None
    stock_quantity: int = 0
    available: bool = True
    inclusions: tuple[str, ...] = ()
    variations: tuple[ProductVariation, ...] = field(default=())


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Method
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentMethod:
    id: str
    name: str
    account_number: str = ""
    account_name: str = ""
    qr_code_url: str | None = None
    active: bool = True
    sort_order: int = 0


__all__ = ("ProductVariation", "Product", "PaymentMethod")
