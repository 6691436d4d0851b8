"""
Catalog — products, variations, payment methods and pricing rules.

    from storefront.catalog import pricing as P
"""

from __future__ import annotations

from storefront.catalog._types import Product, ProductVariation, PaymentMethod
from storefront.catalog import pricing

__all__ = ("Product", "ProductVariation", "PaymentMethod", "pricing")
