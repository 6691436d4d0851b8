"""
Order types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Protocol

from kungfu import Result
from pydantic import PlainSerializer

from storefront.errors import PersistenceError
from storefront.shipping import ShippingLocation


class OrderStatus(Enum):
    NEW = "new"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"


# ═══════════════════════════════════════════════════════════════════════════════
# Order snapshot
# ═══════════════════════════════════════════════════════════════════════════════


def _as_number(value: Decimal) -> int | float:
    return int(value) if value == value.to_integral_value() else float(value)


# Stored order_items carry amounts as JSON numbers, not strings.
Number = Annotated[Decimal, PlainSerializer(_as_number, when_used="json")]


@dataclass(frozen=True, slots=True)
class OrderItem:
    product_id: str
    product_name: str
    quantity: int
    price: Number
    total: Number
    variation_id: str | None = None
    variation_name: str | None = None
    purity_percentage: Number | None = None
    is_complete_set: bool = False


@dataclass(frozen=True, slots=True)
class Customer:
    name: str
    email: str
    phone: str


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    address: str
    barangay: str
    city: str
    state: str
    zip_code: str


@dataclass(frozen=True, slots=True)
class OrderDraft:
    """
    Everything an order needs before it gets an id and number.

    ``total_price`` is the product subtotal before discount; shipping fee
    and discount are stored beside it.
    """

    customer: Customer
    shipping: ShippingAddress
    shipping_location: ShippingLocation
    shipping_fee: Decimal
    items: tuple[OrderItem, ...]
    total_price: Decimal
    discount_amount: Decimal = Decimal("0")
    voucher_code: str | None = None
    payment_method_id: str | None = None
    payment_method_name: str | None = None
    contact_method: str | None = None
    notes: str | None = None

    @property
    def final_total(self) -> Decimal:
        return max(Decimal("0"), self.total_price - self.discount_amount) + self.shipping_fee


@dataclass(frozen=True, slots=True)
class Order:
    id: str
    order_number: str
    draft: OrderDraft
    order_status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime
    updated_at: datetime
    payment_proof_url: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# OrderRepository Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class OrderRepository(Protocol):
    async def latest_order_number(self) -> Result[str | None, PersistenceError]:
        """Number of the most recently created order, Ok(None) when there is none."""
        ...

    async def insert(self, draft: OrderDraft, order_number: str) -> Result[Order, PersistenceError]:
        """Store a new order. CONFLICT when ``order_number`` is taken."""
        ...

    async def attach_proof_url(self, order_id: str, url: str) -> Result[Order, PersistenceError]:
        ...

    async def get(self, order_id: str) -> Result[Order, PersistenceError]:
        ...

    async def update_order_status(
        self, order_id: str, status: OrderStatus
    ) -> Result[Order, PersistenceError]:
        ...

    async def update_payment_status(
        self, order_id: str, status: PaymentStatus
    ) -> Result[Order, PersistenceError]:
        ...


__all__ = (
    "OrderStatus",
    "PaymentStatus",
    "OrderItem",
    "Customer",
    "ShippingAddress",
    "OrderDraft",
    "Order",
    "OrderRepository",
)
