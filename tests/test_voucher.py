"""Tests for voucher rules, the evaluator and the voucher repository."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from kungfu import Error, Ok

from storefront.errors import PersistenceError, PersistenceErrorKind, VoucherErrorKind
from storefront.voucher import (
    DiscountType,
    Voucher,
    VoucherEvaluator,
    check_voucher,
    compute_discount,
    normalize_code,
)

NOW = datetime(2026, 10, 17, tzinfo=timezone.utc)


def make_voucher(**overrides):
    fields = dict(
        id="v1",
        code="SAVE20",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("20"),
    )
    fields.update(overrides)
    return Voucher(**fields)


class TestComputeDiscount:
    def test_percentage(self):
        assert compute_discount(make_voucher(), Decimal("5000")) == Decimal("1000.00")

    def test_fixed(self):
        voucher = make_voucher(discount_type=DiscountType.FIXED, discount_value=Decimal("300"))
        assert compute_discount(voucher, Decimal("5000")) == Decimal("300")

    def test_fixed_clamped_to_subtotal(self):
        voucher = make_voucher(discount_type=DiscountType.FIXED, discount_value=Decimal("800"))
        assert compute_discount(voucher, Decimal("500")) == Decimal("500")

    def test_percentage_over_hundred_clamped(self):
        voucher = make_voucher(discount_value=Decimal("150"))
        assert compute_discount(voucher, Decimal("400")) == Decimal("400")

    def test_rounded_to_centavos(self):
        voucher = make_voucher(discount_value=Decimal("15"))
        assert compute_discount(voucher, Decimal("333.33")) == Decimal("50.00")


class TestCheckVoucher:
    @pytest.mark.parametrize(
        ("overrides", "subtotal", "kind"),
        [
            ({"is_active": False}, Decimal("5000"), VoucherErrorKind.INACTIVE),
            ({"expires_at": NOW - timedelta(days=1)}, Decimal("5000"), VoucherErrorKind.EXPIRED),
            ({"usage_limit": 3, "times_used": 3}, Decimal("5000"), VoucherErrorKind.USAGE_EXCEEDED),
            ({"min_spend": Decimal("6000")}, Decimal("5000"), VoucherErrorKind.BELOW_MIN_SPEND),
        ],
    )
    def test_rejections(self, overrides, subtotal, kind):
        match check_voucher(make_voucher(**overrides), subtotal, NOW):
            case Error(e):
                assert e.kind is kind
                assert e.code == "SAVE20"
            case Ok(_):
                pytest.fail("voucher should be rejected")

    def test_inactive_reported_before_expired(self):
        voucher = make_voucher(is_active=False, expires_at=NOW - timedelta(days=1))
        match check_voucher(voucher, Decimal("1"), NOW):
            case Error(e):
                assert e.kind is VoucherErrorKind.INACTIVE

    def test_min_spend_message(self):
        match check_voucher(make_voucher(min_spend=Decimal("1500")), Decimal("100"), NOW):
            case Error(e):
                assert e.message == "Minimum spend of ₱1,500 required for this voucher"

    def test_accepts_at_min_spend_and_before_expiry(self):
        voucher = make_voucher(min_spend=Decimal("5000"), expires_at=NOW + timedelta(hours=1))
        assert check_voucher(voucher, Decimal("5000"), NOW) == Ok(voucher)

    def test_naive_expiry_treated_as_utc(self):
        voucher = make_voucher(expires_at=datetime(2026, 10, 16))
        assert isinstance(check_voucher(voucher, Decimal("5000"), NOW), Error)


class TestNormalize:
    def test_trims_and_uppercases(self):
        assert normalize_code("  save20 ") == "SAVE20"


class FailingRepository:
    async def get_by_code(self, code):
        return Error(PersistenceError(PersistenceErrorKind.UNAVAILABLE, "down"))

    async def increment_usage(self, code):
        return Error(PersistenceError(PersistenceErrorKind.UNAVAILABLE, "down"))


class TestVoucherEvaluator:
    async def test_valid_code(self, voucher_repo, save20):
        evaluator = VoucherEvaluator(voucher_repo, clock=lambda: NOW)
        result = await evaluator.validate(" save20 ", Decimal("5000"))
        match result:
            case Ok(applied):
                assert (applied.voucher_id, applied.code) == ("vch-1", "SAVE20")
                assert applied.discount_amount == Decimal("1000.00")
                assert applied.voucher is not None
                assert applied.voucher.discount_value == Decimal("20")
            case _:
                pytest.fail(f"expected Ok, got {result}")

    async def test_unknown_code(self, voucher_repo, save20):
        evaluator = VoucherEvaluator(voucher_repo, clock=lambda: NOW)
        match await evaluator.validate("NOPE", Decimal("5000")):
            case Error(e):
                assert e.kind is VoucherErrorKind.NOT_FOUND
                assert e.message == "Invalid voucher code"
            case Ok(_):
                pytest.fail("unknown code accepted")

    async def test_below_min_spend(self, voucher_repo, save20):
        evaluator = VoucherEvaluator(voucher_repo, clock=lambda: NOW)
        match await evaluator.validate("SAVE20", Decimal("999")):
            case Error(e):
                assert e.kind is VoucherErrorKind.BELOW_MIN_SPEND

    async def test_repository_failure_passed_through(self):
        evaluator = VoucherEvaluator(FailingRepository(), clock=lambda: NOW)
        match await evaluator.validate("SAVE20", Decimal("5000")):
            case Error(e):
                assert isinstance(e, PersistenceError)

    async def test_record_usage_respects_limit(self, voucher_repo, save20):
        evaluator = VoucherEvaluator(voucher_repo, clock=lambda: NOW)

        assert await evaluator.record_usage("save20") == Ok(True)
        assert await evaluator.record_usage("SAVE20") == Ok(True)
        assert await evaluator.record_usage("SAVE20") == Ok(False)

        match await voucher_repo.get_by_code("SAVE20"):
            case Ok(voucher):
                assert voucher.times_used == 2

        match await evaluator.validate("SAVE20", Decimal("5000")):
            case Error(e):
                assert e.kind is VoucherErrorKind.USAGE_EXCEEDED

    async def test_record_usage_failure_logged(self, caplog):
        evaluator = VoucherEvaluator(FailingRepository(), clock=lambda: NOW)
        with caplog.at_level("WARNING"):
            result = await evaluator.record_usage("SAVE20")
        assert isinstance(result, Error)
        assert "usage update failed" in caplog.text
