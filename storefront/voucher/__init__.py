"""
Voucher — code validation and discount computation.

    from storefront import voucher as V

    evaluator = V.VoucherEvaluator(V.SqlVoucherRepository(session_factory))
    result = await evaluator.validate("SAVE20", subtotal)
"""

from __future__ import annotations

from storefront.voucher._types import DiscountType, Voucher, AppliedVoucher, VoucherRepository
from storefront.voucher._evaluate import (
    normalize_code,
    check_voucher,
    compute_discount,
    VoucherEvaluator,
)
from storefront.voucher._sqlalchemy import SqlVoucherRepository

__all__ = (
    "DiscountType",
    "Voucher",
    "AppliedVoucher",
    "VoucherRepository",
    "normalize_code",
    "check_voucher",
    "compute_discount",
    "VoucherEvaluator",
    "SqlVoucherRepository",
)
