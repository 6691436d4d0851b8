"""
Checkout — the three-step wizard that turns a cart into an order.

    from storefront import checkout as CO

    session = CO.CheckoutSession(cart, vouchers=..., shipping=..., ...)
"""

from __future__ import annotations

from storefront.checkout._types import (
    CheckoutStep,
    ContactMethod,
    CheckoutDetails,
    CheckoutQuote,
    Confirmation,
)
from storefront.checkout._collaborators import (
    PaymentProof,
    ProofStorage,
    MemoryProofStorage,
    DirectoryProofStorage,
    Clipboard,
    MemoryClipboard,
    ContactLauncher,
    BrowserLauncher,
    RecordingLauncher,
)
from storefront.checkout._message import MessageContext, format_timestamp, format_order_message
from storefront.checkout._session import CheckoutSession
from storefront.checkout import pipeline

__all__ = (
    "CheckoutStep",
    "ContactMethod",
    "CheckoutDetails",
    "CheckoutQuote",
    "Confirmation",
    "PaymentProof",
    "ProofStorage",
    "MemoryProofStorage",
    "DirectoryProofStorage",
    "Clipboard",
    "MemoryClipboard",
    "ContactLauncher",
    "BrowserLauncher",
    "RecordingLauncher",
    "MessageContext",
    "format_timestamp",
    "format_order_message",
    "CheckoutSession",
    "pipeline",
)
