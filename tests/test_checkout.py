"""Tests for the checkout wizard."""

import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest
from kungfu import Error, Ok

from storefront.checkout import CheckoutStep, ContactMethod, PaymentProof
from storefront.errors import PersistenceError, PersistenceErrorKind, ValidationError, VoucherErrorKind
from storefront.orders import Order
from storefront.shipping import ShippingLocation

DETAILS = dict(
    name="Juan Dela Cruz",
    email="juan@example.ph",
    phone="09170000000",
    address="12 Mabini St",
    barangay="San Antonio",
    city="Makati",
    state="Metro Manila",
    zip_code="1203",
)

PROOF = PaymentProof("gcash-receipt.png", b"\x89PNG fake", "image/png")


def ok(result):
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"unexpected error: {e}")


@pytest.fixture
def filled_cart(cart, set_product, variation):
    """Two 2500-peso sets: subtotal 5000."""
    product = replace(set_product, complete_set_price=Decimal("2500"))
    ok(cart.add(product, variation, quantity=2, is_complete_set=True))
    return cart


@pytest.fixture
def at_payment(session, filled_cart):
    session.update_details(**DETAILS)
    session.select_location(ShippingLocation.NCR)
    ok(session.proceed_to_payment())
    ok(session.attach_proof(PROOF))
    return session


class TestDetailsStep:
    async def test_starts_on_details_with_defaults(self, session):
        assert session.step is CheckoutStep.DETAILS
        assert session.contact_method is ContactMethod.TELEGRAM
        assert session.payment_method.id == "gcash"
        assert [m.id for m in session.payment_methods] == ["gcash", "bank"]

    async def test_missing_field_blocks(self, session, filled_cart):
        session.update_details(**{**DETAILS, "barangay": "   "})
        session.select_location("NCR")

        assert session.proceed_to_payment() == Error(ValidationError("barangay", "Barangay is required"))
        assert session.step is CheckoutStep.DETAILS

    async def test_location_required(self, session, filled_cart):
        session.update_details(**DETAILS)
        match session.proceed_to_payment():
            case Error(e):
                assert e.field == "shipping_location"

    async def test_empty_cart_blocks(self, session):
        session.update_details(**DETAILS)
        session.select_location(ShippingLocation.LUZON)
        match session.proceed_to_payment():
            case Error(e):
                assert e.field == "cart"

    async def test_unknown_field_raises(self, session):
        with pytest.raises(TypeError):
            session.update_details(nickname="JD")

    async def test_back_and_forth(self, at_payment):
        assert at_payment.back_to_details() == Ok(CheckoutStep.DETAILS)
        assert at_payment.proceed_to_payment() == Ok(CheckoutStep.PAYMENT)

    async def test_back_only_from_payment(self, session):
        assert isinstance(session.back_to_details(), Error)


class TestPaymentStep:
    async def test_proof_size_cap(self, at_payment, settings):
        big = PaymentProof("huge.png", b"x" * (settings.max_proof_bytes + 1), "image/png")
        match at_payment.attach_proof(big):
            case Error(e):
                assert e.message == "File size too large. Please upload an image smaller than 5MB."
        assert at_payment.proof == PROOF

    async def test_can_submit_needs_proof(self, at_payment):
        assert at_payment.can_submit
        at_payment.remove_proof()
        assert not at_payment.can_submit

    async def test_select_payment_method(self, at_payment):
        assert ok(at_payment.select_payment_method("bank")).name == "BPI"
        assert isinstance(at_payment.select_payment_method("old"), Error)

    async def test_quote_without_voucher(self, at_payment):
        quote = at_payment.quote()
        assert (quote.subtotal, quote.discount, quote.shipping_fee, quote.total) == (
            Decimal("5000"), Decimal("0"), Decimal("150"), Decimal("5150"),
        )

    async def test_quote_without_location(self, session, filled_cart):
        assert session.quote().shipping_fee == Decimal("0")


class TestVouchers:
    async def test_apply(self, at_payment, save20):
        applied = ok(await at_payment.apply_voucher(" save20"))
        assert applied.discount_amount == Decimal("1000")
        assert at_payment.quote().total == Decimal("4150")

    async def test_empty_code(self, at_payment):
        assert await at_payment.apply_voucher("  ") == Error(
            ValidationError("voucher_code", "Please enter a voucher code")
        )

    async def test_rejected_code_clears_applied(self, at_payment, save20):
        ok(await at_payment.apply_voucher("SAVE20"))
        match await at_payment.apply_voucher("BOGUS"):
            case Error(e):
                assert e.kind is VoucherErrorKind.NOT_FOUND
        assert at_payment.voucher is None
        assert at_payment.quote().total == Decimal("5150")

    async def test_remove(self, at_payment, save20):
        ok(await at_payment.apply_voucher("SAVE20"))
        at_payment.remove_voucher()
        assert at_payment.quote().discount == Decimal("0")

    async def test_discount_follows_cart_changes(self, at_payment, filled_cart, save20):
        ok(await at_payment.apply_voucher("SAVE20"))
        filled_cart.update_quantity(0, 1)

        quote = at_payment.quote()
        assert (quote.subtotal, quote.discount, quote.total) == (
            Decimal("2500"), Decimal("500"), Decimal("2150"),
        )
        assert at_payment.voucher.discount_amount == Decimal("500")

        order = ok(await at_payment.submit()).order
        assert order.draft.total_price == Decimal("2500")
        assert order.draft.discount_amount == Decimal("500")
        assert order.draft.final_total == Decimal("2150")

    async def test_cart_below_min_spend_drops_voucher_at_submit(
        self, at_payment, filled_cart, simple_product, save20, order_repo
    ):
        ok(await at_payment.apply_voucher("SAVE20"))
        filled_cart.remove(0)
        ok(filled_cart.add(replace(simple_product, base_price=Decimal("800"))))

        match await at_payment.submit():
            case Error(e):
                assert e.kind is VoucherErrorKind.BELOW_MIN_SPEND
                assert e.min_spend == Decimal("1000")
            case Ok(_):
                pytest.fail("voucher applied below its minimum spend")

        assert at_payment.voucher is None
        assert at_payment.step is CheckoutStep.PAYMENT
        assert await order_repo.latest_order_number() == Ok(None)

        order = ok(await at_payment.submit()).order
        assert order.draft.discount_amount == Decimal("0")
        assert order.draft.voucher_code is None


class TestSubmit:
    async def test_happy_path(self, at_payment, save20, voucher_repo, clipboard, launcher, proofs, order_repo):
        ok(await at_payment.apply_voucher("SAVE20"))

        confirmation = ok(await at_payment.submit())

        order = confirmation.order
        assert at_payment.step is CheckoutStep.CONFIRMATION
        assert order.order_number.startswith("TPL#")
        assert order.draft.total_price == Decimal("5000")
        assert order.draft.discount_amount == Decimal("1000")
        assert order.draft.shipping_fee == Decimal("150")
        assert order.draft.final_total == Decimal("4150")
        assert order.draft.items[0].is_complete_set
        assert order.draft.payment_method_name == "GCash"
        assert order.draft.contact_method == "telegram"

        assert order.payment_proof_url == f"memory://payment-proofs/{order.id}.png"
        assert f"{order.id}.png" in proofs.objects
        assert confirmation.upload_error is None
        assert confirmation.notice is None

        assert clipboard.text == confirmation.message
        assert confirmation.copied
        assert launcher.opened == ["https://t.me/anntpl"]
        assert "Grand Total: ₱4,150" in confirmation.message

        match await voucher_repo.get_by_code("SAVE20"):
            case Ok(voucher):
                assert voucher.times_used == 1

    async def test_next_order_follows_previous(self, at_payment, filled_cart, set_product, variation):
        first = ok(await at_payment.submit()).order

        at_payment.continue_shopping()
        assert at_payment.step is CheckoutStep.DETAILS
        assert at_payment.confirmation is None

        ok(filled_cart.add(set_product, variation))
        at_payment.update_details(**DETAILS)
        at_payment.select_location(ShippingLocation.LUZON)
        ok(at_payment.proceed_to_payment())
        ok(at_payment.attach_proof(PROOF))
        second = ok(await at_payment.submit()).order

        number = int(first.order_number.removeprefix("TPL#"))
        assert second.order_number == f"TPL#{number + 1:03d}"
        assert second.draft.shipping_fee == Decimal("200")

    async def test_requires_payment_step(self, session):
        match await session.submit():
            case Error(e):
                assert e.field == "step"

    async def test_missing_proof(self, at_payment):
        at_payment.remove_proof()
        match await at_payment.submit():
            case Error(e):
                assert e.field == "payment_proof"
        assert at_payment.step is CheckoutStep.PAYMENT

    async def test_persistence_failure_stays_on_payment(self, at_payment, clipboard):
        class DownRepository:
            async def latest_order_number(self):
                return Ok(None)

            async def insert(self, draft, order_number):
                return Error(PersistenceError(PersistenceErrorKind.UNAVAILABLE, "db down"))

        at_payment._orders = DownRepository()

        match await at_payment.submit():
            case Error(e):
                assert e.kind is PersistenceErrorKind.UNAVAILABLE
            case Ok(_):
                pytest.fail("order placed without storage")

        assert at_payment.step is CheckoutStep.PAYMENT
        assert clipboard.text is None
        assert not at_payment.is_submitting
        assert at_payment.can_submit

    async def test_conflict_regenerates_number(self, at_payment, order_repo):
        attempts = []
        real_insert = order_repo.insert

        async def racing_insert(draft, order_number):
            attempts.append(order_number)
            if len(attempts) == 1:
                return Error(PersistenceError(PersistenceErrorKind.CONFLICT, "taken"))
            return await real_insert(draft, order_number)

        at_payment._orders.insert = racing_insert

        confirmation = ok(await at_payment.submit())

        assert len(attempts) == 2
        assert attempts[0] != attempts[1]
        assert confirmation.order.order_number == attempts[1]

    async def test_upload_failure_still_confirms(self, at_payment):
        class BrokenStorage:
            async def upload(self, path, content, content_type):
                raise OSError("bucket unavailable")

        at_payment._proofs = BrokenStorage()

        confirmation = ok(await at_payment.submit())

        assert at_payment.step is CheckoutStep.CONFIRMATION
        assert confirmation.order.payment_proof_url is None
        assert confirmation.upload_error is not None
        assert confirmation.notice == (
            "Order placed, but failed to upload payment proof. Please send it via Telegram."
        )

    async def test_clipboard_failure_is_logged(self, at_payment, launcher, caplog):
        class DeniedClipboard:
            async def copy(self, text):
                raise PermissionError("clipboard denied")

        at_payment._clipboard = DeniedClipboard()

        with caplog.at_level("WARNING"):
            confirmation = ok(await at_payment.submit())

        assert not confirmation.copied
        assert launcher.opened == ["https://t.me/anntpl"]
        assert "copy_message" in caplog.text

    async def test_message_failure_still_confirms(self, at_payment, settings, clipboard, launcher, order_repo, caplog):
        at_payment._settings = settings.model_copy(update={"timezone": "Nowhere/Zone"})

        with caplog.at_level("WARNING"):
            confirmation = ok(await at_payment.submit())

        assert at_payment.step is CheckoutStep.CONFIRMATION
        assert confirmation.message == ""
        assert not confirmation.copied
        assert clipboard.text is None
        assert launcher.opened == ["https://t.me/anntpl"]
        assert "compose_message" in caplog.text
        assert await order_repo.latest_order_number() == Ok(confirmation.order.order_number)
        assert isinstance(await at_payment.copy_message(), Error)

    async def test_reentrant_submit_rejected(self, at_payment):
        gate = asyncio.Event()
        real_next = at_payment._numbers.next

        async def slow_next():
            await gate.wait()
            return await real_next()

        at_payment._numbers.next = slow_next

        first = asyncio.create_task(at_payment.submit())
        await asyncio.sleep(0)
        assert at_payment.is_submitting
        assert not at_payment.can_submit

        second = await at_payment.submit()
        gate.set()
        confirmation = ok(await first)

        match second:
            case Error(e):
                assert e.field == "submit"
        assert isinstance(confirmation.order, Order)


class TestConfirmation:
    async def test_copy_message_repeatable(self, at_payment, clipboard):
        confirmation = ok(await at_payment.submit())

        assert ok(await at_payment.copy_message()) == confirmation.message
        assert ok(await at_payment.copy_message()) == confirmation.message
        assert clipboard.copies == 3

    async def test_copy_before_order(self, session):
        assert isinstance(await session.copy_message(), Error)

    async def test_open_contact_again(self, at_payment, launcher):
        ok(await at_payment.submit())
        assert at_payment.open_contact()
        assert launcher.opened == ["https://t.me/anntpl", "https://t.me/anntpl"]

    async def test_continue_shopping_clears_cart(self, at_payment, filled_cart, storage):
        ok(await at_payment.submit())
        at_payment.continue_shopping()

        assert filled_cart.is_empty
        assert "peptide_cart" not in storage
        assert at_payment.step is CheckoutStep.DETAILS
        assert at_payment.voucher is None

    async def test_terminal_state(self, at_payment):
        ok(await at_payment.submit())
        assert isinstance(at_payment.back_to_details(), Error)
        assert isinstance(await at_payment.submit(), Error)
