"""
Checkout types.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from storefront.errors import UploadError
from storefront.orders import Order


class CheckoutStep(Enum):
    DETAILS = "details"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"


class ContactMethod(Enum):
    TELEGRAM = "telegram"


@dataclass(frozen=True, slots=True)
class CheckoutDetails:
    """Customer and address form. All fields but ``notes`` are required."""

    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    barangay: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    notes: str = ""


REQUIRED_DETAILS: tuple[tuple[str, str], ...] = (
    ("name", "Full name"),
    ("email", "Email"),
    ("phone", "Phone number"),
    ("address", "Address"),
    ("barangay", "Barangay"),
    ("city", "City"),
    ("state", "State/Province"),
    ("zip_code", "ZIP code"),
)


@dataclass(frozen=True, slots=True)
class CheckoutQuote:
    subtotal: Decimal
    discount: Decimal
    shipping_fee: Decimal
    total: Decimal


@dataclass(frozen=True, slots=True)
class Confirmation:
    """What the customer sees after a successful submission."""

    order: Order
    message: str
    copied: bool
    contact_opened: bool
    upload_error: UploadError | None = None
    contact_channel: str = "Telegram"

    @property
    def notice(self) -> str | None:
        if self.upload_error is None:
            return None
        return (
            "Order placed, but failed to upload payment proof. "
            f"Please send it via {self.contact_channel}."
        )


__all__ = (
    "CheckoutStep",
    "ContactMethod",
    "CheckoutDetails",
    "REQUIRED_DETAILS",
    "CheckoutQuote",
    "Confirmation",
)
