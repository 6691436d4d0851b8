"""
Orders — order snapshot types, numbering and persistence.

    from storefront import orders as O

    numbers = O.OrderNumberGenerator(repo, prefix="TPL")
"""

from __future__ import annotations

from storefront.orders._types import (
    OrderStatus,
    PaymentStatus,
    OrderItem,
    Customer,
    ShippingAddress,
    OrderDraft,
    Order,
    OrderRepository,
)
from storefront.orders._number import MIN_DIGITS, FALLBACK_DIGITS, OrderNumberGenerator
from storefront.orders._sqlalchemy import SqlOrderRepository

__all__ = (
    "OrderStatus",
    "PaymentStatus",
    "OrderItem",
    "Customer",
    "ShippingAddress",
    "OrderDraft",
    "Order",
    "OrderRepository",
    "MIN_DIGITS",
    "FALLBACK_DIGITS",
    "OrderNumberGenerator",
    "SqlOrderRepository",
)
