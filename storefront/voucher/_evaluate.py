"""
Voucher evaluation — eligibility checks and discount computation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from kungfu import Result, Ok, Error

from storefront._types import Clock
from storefront.errors import PersistenceError, VoucherError, VoucherErrorKind
from storefront.money import format_peso, to_centavos
from storefront.voucher._types import AppliedVoucher, DiscountType, Voucher, VoucherRepository

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Pure rules
# ═══════════════════════════════════════════════════════════════════════════════


def check_voucher(
    voucher: Voucher,
    subtotal: Decimal,
    now: datetime,
) -> Result[Voucher, VoucherError]:
    """Eligibility checks, in order: active, not expired, under limit, min spend."""
    code = voucher.code
    if not voucher.is_active:
        return Error(VoucherError(
            VoucherErrorKind.INACTIVE, code, "This voucher is no longer active",
        ))
    if voucher.expires_at is not None and _utc(now) > _utc(voucher.expires_at):
        return Error(VoucherError(
            VoucherErrorKind.EXPIRED, code, "This voucher has expired",
        ))
    if voucher.usage_limit is not None and voucher.times_used >= voucher.usage_limit:
        return Error(VoucherError(
            VoucherErrorKind.USAGE_EXCEEDED, code, "This voucher has reached its usage limit",
        ))
    if subtotal < voucher.min_spend:
        return Error(VoucherError(
            VoucherErrorKind.BELOW_MIN_SPEND,
            code,
            f"Minimum spend of {format_peso(voucher.min_spend)} required for this voucher",
            min_spend=voucher.min_spend,
        ))
    return Ok(voucher)


def compute_discount(voucher: Voucher, subtotal: Decimal) -> Decimal:
    """Discount for ``subtotal``, never more than the subtotal itself."""
    match voucher.discount_type:
        case DiscountType.PERCENTAGE:
            discount = subtotal * voucher.discount_value / 100
        case DiscountType.FIXED:
            discount = voucher.discount_value
    return to_centavos(max(min(discount, subtotal), Decimal("0")))


# ═══════════════════════════════════════════════════════════════════════════════
# VoucherEvaluator
# ═══════════════════════════════════════════════════════════════════════════════


class VoucherEvaluator:
    """
    Validates entered codes against the voucher repository.

    Example:
        evaluator = VoucherEvaluator(SqlVoucherRepository(session_factory))

        match await evaluator.validate(" save20 ", Decimal("5000")):
            case Ok(applied):
                applied.discount_amount   # Decimal("1000.00")
            case Error(err):
                show(err.message)
    """

    def __init__(
        self,
        repository: VoucherRepository,
        *,
        clock: Clock = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._repository = repository
        self._clock = clock

    async def validate(
        self,
        code: str,
        subtotal: Decimal,
    ) -> Result[AppliedVoucher, VoucherError | PersistenceError]:
        normalized = normalize_code(code)

        match await self._repository.get_by_code(normalized):
            case Error(e):
                return Error(e)
            case Ok(None):
                return Error(VoucherError(
                    VoucherErrorKind.NOT_FOUND, normalized, "Invalid voucher code",
                ))
            case Ok(voucher):
                pass

        match check_voucher(voucher, subtotal, self._clock()):
            case Error(e):
                logger.info("Voucher %s rejected: %s", normalized, e.kind.value)
                return Error(e)
            case Ok(_):
                return Ok(AppliedVoucher(
                    voucher_id=voucher.id,
                    code=voucher.code,
                    discount_amount=compute_discount(voucher, subtotal),
                    voucher=voucher,
                ))

    async def record_usage(self, code: str) -> Result[bool, PersistenceError]:
        """Count one use of ``code``. Callers treat failure as non-fatal."""
        result = await self._repository.increment_usage(normalize_code(code))
        match result:
            case Ok(False):
                logger.warning("Voucher %s usage not recorded: missing or at limit", code)
            case Error(e):
                logger.warning("Voucher %s usage update failed: %s", code, e.message)
            case _:
                pass
        return result


__all__ = ("normalize_code", "check_voucher", "compute_discount", "VoucherEvaluator")
