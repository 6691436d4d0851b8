"""
Order message — the plain-text summary handed to the contact channel.

The store's staff read these messages by eye, so the layout (headings,
emoji markers, blank lines) is kept stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from storefront.catalog import PaymentMethod
from storefront.orders import Order, OrderItem
from storefront.money import format_amount
from storefront.voucher import AppliedVoucher

_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_timestamp(moment: datetime, timezone: str) -> str:
    """'Saturday, October 17, 2026 at 2:14 PM' in the given zone."""
    local = moment.astimezone(ZoneInfo(timezone))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{_DAYS[local.weekday()]}, {_MONTHS[local.month - 1]} {local.day}, {local.year}"
        f" at {hour}:{local.minute:02d} {meridiem}"
    )


def _plain(value: Decimal) -> str:
    return format(value.normalize(), "f")


def format_item(item: OrderItem) -> str:
    line = f"• {item.product_name}"
    if item.variation_name:
        line += f" ({item.variation_name})"
    line += f" x{item.quantity} - ₱{format_amount(item.total)}"
    if item.purity_percentage is not None and item.purity_percentage > 0:
        line += f"\n  Purity: {_plain(item.purity_percentage)}%"
    return line


@dataclass(frozen=True, slots=True)
class MessageContext:
    store_name: str
    timezone: str
    contact_channel: str
    contact_url: str


def format_order_message(
    order: Order,
    *,
    context: MessageContext,
    payment_method: PaymentMethod | None,
    voucher: AppliedVoucher | None,
    placed_at: datetime,
) -> str:
    draft = order.draft
    details = "\n\n".join(format_item(item) for item in draft.items)
    discount_line = (
        f"Discount ({voucher.code}): -₱{format_amount(voucher.discount_amount)}"
        if voucher is not None
        else ""
    )
    account_line = (
        f"Account: {payment_method.account_number}" if payment_method is not None else ""
    )

    message = f"""
✨{context.store_name} - NEW ORDER

📅 ORDER DATE & TIME
{format_timestamp(placed_at, context.timezone)}

🔖 ORDER NUMBER
{order.order_number}

👤 CUSTOMER INFORMATION
Name: {draft.customer.name}
Email: {draft.customer.email}
Phone: {draft.customer.phone}

📦 SHIPPING ADDRESS
{draft.shipping.address}
{draft.shipping.barangay}
{draft.shipping.city}, {draft.shipping.state} {draft.shipping.zip_code}

🛒 ORDER DETAILS
{details}

💰 PRICING
Product Total: ₱{format_amount(draft.total_price)}
{discount_line}
Shipping Fee: ₱{format_amount(draft.shipping_fee)} ({draft.shipping_location.label})
Grand Total: ₱{format_amount(draft.final_total)}

💳 PAYMENT METHOD
{payment_method.name if payment_method is not None else "N/A"}
{account_line}

📸 PROOF OF PAYMENT
Please attach your payment screenshot when sending this message.

📱 CONTACT METHOD
{context.contact_channel}: {context.contact_url}

📋 ORDER NUMBER: #{order.order_number or order.id}

Please confirm this order. Thank you!
"""
    return message.strip()


__all__ = ("MessageContext", "format_timestamp", "format_item", "format_order_message")
