"""
Pricing — unit-price resolution and stock lookups.

All price and stock rules live here; the cart, the product views and the
checkout read them from this module only.

    from storefront.catalog import pricing as P

    P.resolve_price(product, variation, is_complete_set=True)
    P.available_stock(product, variation)
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from storefront.catalog._types import Product, ProductVariation

LOW_STOCK_THRESHOLD = 10


def _is_set(price: Decimal | None) -> bool:
    return price is not None and price != 0


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Price Resolver
# ═══════════════════════════════════════════════════════════════════════════════


def discount_applies(product: Product, at: datetime | None = None) -> bool:
    """
    True when the product-level discount price is in effect.

    The discount window is only enforced for the bound that is present.
    """
    if not (product.discount_active and _is_set(product.discount_price)):
        return False

    if product.discount_start_date is None and product.discount_end_date is None:
        return True

    now = _aware(at or datetime.now(timezone.utc))
    if product.discount_start_date is not None and now < _aware(product.discount_start_date):
        return False
    if product.discount_end_date is not None and now > _aware(product.discount_end_date):
        return False
    return True


def resolve_price(
    product: Product,
    variation: ProductVariation | None = None,
    is_complete_set: bool = False,
    *,
    at: datetime | None = None,
) -> Decimal:
    """
    Unit price for a product selection. First matching rule wins:

    1. complete set requested, product sells as one, bundle price set
    2. variation selected: its own price
    3. active product discount
    4. base price
    """
    if is_complete_set and product.is_complete_set and _is_set(product.complete_set_price):
        return product.complete_set_price  # type: ignore[return-value]
    if variation is not None:
        return variation.price
    if discount_applies(product, at):
        return product.discount_price  # type: ignore[return-value]
    return product.base_price


def discount_percent(product: Product, price: Decimal) -> int:
    """Whole-percent saving of ``price`` against the base price (0 if none)."""
    if product.base_price <= 0 or price >= product.base_price:
        return 0
    saving = (1 - price / product.base_price) * 100
    return int(saving.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ═══════════════════════════════════════════════════════════════════════════════
# Stock Gate
# ═══════════════════════════════════════════════════════════════════════════════


def available_stock(product: Product, variation: ProductVariation | None = None) -> int:
    """Stock for the selection. Complete sets share this counter."""
    stock = variation.stock_quantity if variation is not None else product.stock_quantity
    return max(stock, 0)


def has_any_stock(product: Product) -> bool:
    if product.variations:
        return any(v.stock_quantity > 0 for v in product.variations)
    return product.stock_quantity > 0


def total_stock(product: Product) -> int:
    if product.variations:
        return sum(max(v.stock_quantity, 0) for v in product.variations)
    return max(product.stock_quantity, 0)


def is_low_stock(product: Product, threshold: int = LOW_STOCK_THRESHOLD) -> bool:
    stock = total_stock(product)
    return 0 < stock < threshold


def first_available_variation(product: Product) -> ProductVariation | None:
    """Default variation for a product view: first in stock, else first."""
    for v in product.variations:
        if v.stock_quantity > 0:
            return v
    return product.variations[0] if product.variations else None


__all__ = (
    "LOW_STOCK_THRESHOLD",
    "discount_applies",
    "resolve_price",
    "discount_percent",
    "available_stock",
    "has_any_stock",
    "total_stock",
    "is_low_stock",
    "first_available_variation",
)
