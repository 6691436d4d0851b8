"""
Error taxonomy.

Expected failures are values carried in ``kungfu.Error``; nothing here is
raised. Programming mistakes (bad index, non-positive quantity) raise the
usual builtin exceptions instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


# ═══════════════════════════════════════════════════════════════════════════════
# Input validation
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class ValidationError:
    """Missing or malformed user input. ``field`` names the offending input."""

    field: str
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Stock
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class OutOfStock:
    """Add rejected: the selected product/variation has no stock."""

    product_id: str
    variation_id: str | None = None

    @property
    def message(self) -> str:
        return "Sorry, this item is currently out of stock."


@dataclass(frozen=True, slots=True)
class StockClamped:
    """
    Notice (not a failure): a quantity was reduced to the available stock.

    ``current`` is the quantity the line held before an add; ``granted`` is
    the quantity the line holds afterwards. Explicit quantity updates leave
    ``adding`` false.
    """

    requested: int
    granted: int
    available: int
    current: int = 0
    adding: bool = True

    @property
    def message(self) -> str:
        if not self.adding:
            return f"Only {self.available} item(s) available in stock."
        if self.current >= self.available:
            return (
                "Sorry, you already have the maximum available quantity "
                f"({self.current}) in your cart."
            )
        remaining = self.granted - self.current
        return (
            f"Only {remaining} item(s) available in stock. "
            f"Added {remaining} to your cart."
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Vouchers
# ═══════════════════════════════════════════════════════════════════════════════

class VoucherErrorKind(Enum):
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    USAGE_EXCEEDED = "usage_exceeded"
    BELOW_MIN_SPEND = "below_min_spend"


@dataclass(frozen=True, slots=True)
class VoucherError:
    kind: VoucherErrorKind
    code: str
    message: str
    min_spend: Decimal | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Persistence / upload
# ═══════════════════════════════════════════════════════════════════════════════

class PersistenceErrorKind(Enum):
    CONFLICT = "conflict"
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class PersistenceError:
    """Remote store failure with optional underlying exception."""

    kind: PersistenceErrorKind
    message: str
    cause: Exception | None = None


@dataclass(frozen=True, slots=True)
class UploadError:
    message: str
    cause: Exception | None = None


__all__ = (
    "ValidationError",
    "OutOfStock",
    "StockClamped",
    "VoucherErrorKind",
    "VoucherError",
    "PersistenceErrorKind",
    "PersistenceError",
    "UploadError",
)
