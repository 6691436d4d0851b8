"""
Voucher types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol

from kungfu import Result

from storefront.errors import PersistenceError


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True, slots=True)
class Voucher:
    id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    min_spend: Decimal = Decimal("0")
    usage_limit: int | None = None
    times_used: int = 0
    is_active: bool = True
    expires_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class AppliedVoucher:
    """
    A voucher accepted for one checkout session.

    ``discount_amount`` is the discount for the subtotal it was validated
    against; keep ``voucher`` to recompute it when the cart changes.
    """

    voucher_id: str
    code: str
    discount_amount: Decimal
    voucher: Voucher | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# VoucherRepository Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class VoucherRepository(Protocol):
    async def get_by_code(self, code: str) -> Result[Voucher | None, PersistenceError]:
        """Look up by exact code. Ok(None) when there is no such voucher."""
        ...

    async def increment_usage(self, code: str) -> Result[bool, PersistenceError]:
        """
        Atomically count one use.

        Ok(False) when the voucher is missing or already at its usage limit.
        """
        ...


__all__ = ("DiscountType", "Voucher", "AppliedVoucher", "VoucherRepository")
