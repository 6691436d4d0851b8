"""
Checkout session — the DETAILS → PAYMENT → CONFIRMATION wizard.

    session = CheckoutSession(
        cart,
        vouchers=VoucherEvaluator(voucher_repo),
        shipping=ShippingFeeTable.from_settings(settings),
        orders=order_repo,
        numbers=OrderNumberGenerator(order_repo),
        proofs=MemoryProofStorage(),
        clipboard=MemoryClipboard(),
        launcher=BrowserLauncher(),
        payment_methods=methods,
    )

    session.update_details(name="Juan", email="j@x.ph", ...)
    session.select_location(ShippingLocation.NCR)
    session.proceed_to_payment()
    session.attach_proof(PaymentProof("gcash.png", data, "image/png"))

    match await session.submit():
        case Ok(confirmation): ...
        case Error(e): ...

Submission is a pipeline: storing the order is required, everything after
it is best-effort.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal

from combinators import lift as L
from kungfu import Result, Ok, Error, LazyCoroResult

from storefront import lift
from storefront._types import Clock
from storefront.cart import CartLedger
from storefront.catalog import PaymentMethod
from storefront.checkout import pipeline as PL
from storefront.checkout._collaborators import (
    Clipboard,
    ContactLauncher,
    PaymentProof,
    ProofStorage,
)
from storefront.checkout._message import MessageContext, format_order_message
from storefront.checkout._types import (
    REQUIRED_DETAILS,
    CheckoutDetails,
    CheckoutQuote,
    CheckoutStep,
    Confirmation,
    ContactMethod,
)
from storefront.errors import (
    PersistenceError,
    PersistenceErrorKind,
    UploadError,
    ValidationError,
    VoucherError,
)
from storefront.orders import (
    Customer,
    Order,
    OrderDraft,
    OrderItem,
    OrderNumberGenerator,
    OrderRepository,
    ShippingAddress,
)
from storefront.settings import Settings, get_settings
from storefront.shipping import ShippingFeeTable, ShippingLocation
from storefront.voucher import AppliedVoucher, VoucherEvaluator, check_voucher, compute_discount

logger = logging.getLogger(__name__)

type SubmitError = PersistenceError | ValidationError | VoucherError
type StepError = PersistenceError | UploadError | Exception


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Submission context — value threaded through the pipeline
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class _Submission:
    draft: OrderDraft
    proof: PaymentProof
    payment_method: PaymentMethod | None
    voucher: AppliedVoucher | None
    contact_url: str
    order: Order | None = None
    message: str = ""
    copied: bool = False
    contact_opened: bool = False

    @property
    def stored(self) -> Order:
        assert self.order is not None, "order is set by the persist step"
        return self.order


class CheckoutSession:
    def __init__(
        self,
        cart: CartLedger,
        *,
        vouchers: VoucherEvaluator,
        shipping: ShippingFeeTable,
        orders: OrderRepository,
        numbers: OrderNumberGenerator,
        proofs: ProofStorage,
        clipboard: Clipboard,
        launcher: ContactLauncher,
        payment_methods: Sequence[PaymentMethod] = (),
        settings: Settings | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._cart = cart
        self._vouchers = vouchers
        self._shipping = shipping
        self._orders = orders
        self._numbers = numbers
        self._proofs = proofs
        self._clipboard = clipboard
        self._launcher = launcher
        self._settings = settings or get_settings()
        self._clock = clock
        self._payment_methods = tuple(
            sorted((m for m in payment_methods if m.active), key=lambda m: m.sort_order)
        )
        self._reset()

    def _reset(self) -> None:
        self._step = CheckoutStep.DETAILS
        self._details = CheckoutDetails()
        self._location: ShippingLocation | None = None
        self._payment_method: PaymentMethod | None = (
            self._payment_methods[0] if self._payment_methods else None
        )
        self._contact_method: ContactMethod | None = ContactMethod.TELEGRAM
        self._proof: PaymentProof | None = None
        self._voucher: AppliedVoucher | None = None
        self._submitting = False
        self._confirmation: Confirmation | None = None

    # ═══════════════════════════════════════════════════════════════════════════
    # State
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def step(self) -> CheckoutStep:
        return self._step

    @property
    def details(self) -> CheckoutDetails:
        return self._details

    @property
    def location(self) -> ShippingLocation | None:
        return self._location

    @property
    def payment_methods(self) -> tuple[PaymentMethod, ...]:
        return self._payment_methods

    @property
    def payment_method(self) -> PaymentMethod | None:
        return self._payment_method

    @property
    def contact_method(self) -> ContactMethod | None:
        return self._contact_method

    @property
    def proof(self) -> PaymentProof | None:
        return self._proof

    @property
    def voucher(self) -> AppliedVoucher | None:
        """The applied voucher, its discount priced against the current cart."""
        applied = self._voucher
        if applied is None or applied.voucher is None:
            return applied
        return replace(
            applied,
            discount_amount=compute_discount(applied.voucher, self._cart.total_price()),
        )

    @property
    def confirmation(self) -> Confirmation | None:
        return self._confirmation

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def _require(self, step: CheckoutStep, action: str) -> Result[None, ValidationError]:
        if self._step is not step:
            return Error(ValidationError(
                "step", f"Cannot {action} during the {self._step.value} step",
            ))
        return Ok(None)

    # ═══════════════════════════════════════════════════════════════════════════
    # DETAILS
    # ═══════════════════════════════════════════════════════════════════════════

    def update_details(self, **fields: str) -> CheckoutDetails:
        """Replace some form fields; unknown names raise TypeError."""
        self._details = replace(self._details, **fields)
        return self._details

    def select_location(self, location: ShippingLocation | str) -> ShippingLocation:
        self._location = ShippingLocation(location)
        return self._location

    def validate_details(self) -> Result[CheckoutDetails, ValidationError]:
        """First missing required field, in form order, else the details."""
        for field, label in REQUIRED_DETAILS:
            if not getattr(self._details, field).strip():
                return Error(ValidationError(field, f"{label} is required"))
        if self._location is None:
            return Error(ValidationError("shipping_location", "Please select your shipping location."))
        return Ok(self._details)

    def proceed_to_payment(self) -> Result[CheckoutStep, ValidationError]:
        match self._require(CheckoutStep.DETAILS, "proceed to payment"):
            case Error(e):
                return Error(e)
            case _:
                pass
        if self._cart.is_empty:
            return Error(ValidationError("cart", "Your cart is empty"))
        match self.validate_details():
            case Error(e):
                return Error(e)
            case _:
                self._step = CheckoutStep.PAYMENT
                return Ok(self._step)

    def back_to_details(self) -> Result[CheckoutStep, ValidationError]:
        match self._require(CheckoutStep.PAYMENT, "go back"):
            case Error(e):
                return Error(e)
            case _:
                self._step = CheckoutStep.DETAILS
                return Ok(self._step)

    # ═══════════════════════════════════════════════════════════════════════════
    # PAYMENT
    # ═══════════════════════════════════════════════════════════════════════════

    def select_payment_method(self, method_id: str) -> Result[PaymentMethod, ValidationError]:
        for method in self._payment_methods:
            if method.id == method_id:
                self._payment_method = method
                return Ok(method)
        return Error(ValidationError("payment_method", f"Unknown payment method: {method_id}"))

    def select_contact_method(self, method: ContactMethod | str) -> ContactMethod:
        self._contact_method = ContactMethod(method)
        return self._contact_method

    def attach_proof(self, proof: PaymentProof) -> Result[PaymentProof, ValidationError]:
        if proof.size > self._settings.max_proof_bytes:
            limit_mb = self._settings.max_proof_bytes // (1024 * 1024)
            return Error(ValidationError(
                "payment_proof",
                f"File size too large. Please upload an image smaller than {limit_mb}MB.",
            ))
        self._proof = proof
        return Ok(proof)

    def remove_proof(self) -> None:
        self._proof = None

    # ═══════════════════════════════════════════════════════════════════════════
    # Vouchers / totals
    # ═══════════════════════════════════════════════════════════════════════════

    async def apply_voucher(
        self, code: str
    ) -> Result[AppliedVoucher, VoucherError | PersistenceError | ValidationError]:
        """
        Validate ``code`` against the current subtotal and apply it.

        Replaces any applied voucher; a rejected code leaves none applied.
        """
        if not code.strip():
            return Error(ValidationError("voucher_code", "Please enter a voucher code"))

        result = await self._vouchers.validate(code, self._cart.total_price())
        match result:
            case Ok(applied):
                self._voucher = applied
                return Ok(applied)
            case Error(e):
                self._voucher = None
                return Error(e)

    def remove_voucher(self) -> None:
        self._voucher = None

    def quote(self) -> CheckoutQuote:
        subtotal = self._cart.total_price()
        applied = self.voucher
        discount = applied.discount_amount if applied is not None else Decimal("0")
        fee = self._shipping.fee(self._location)
        return CheckoutQuote(
            subtotal=subtotal,
            discount=discount,
            shipping_fee=fee,
            total=max(Decimal("0"), subtotal - discount) + fee,
        )

    @property
    def can_submit(self) -> bool:
        return (
            self._step is CheckoutStep.PAYMENT
            and not self._submitting
            and not self._cart.is_empty
            and self._location is not None
            and self._payment_method is not None
            and self._contact_method is not None
            and self._proof is not None
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Submission
    # ═══════════════════════════════════════════════════════════════════════════

    def _check_submittable(self) -> Result[None, ValidationError | VoucherError]:
        match self._require(CheckoutStep.PAYMENT, "place an order"):
            case Error(e):
                return Error(e)
            case _:
                pass
        if self._submitting:
            return Error(ValidationError("submit", "Your order is already being placed"))
        if self._cart.is_empty:
            return Error(ValidationError("cart", "Your cart is empty"))
        if self._proof is None:
            return Error(ValidationError(
                "payment_proof", "Please upload your proof of payment before proceeding.",
            ))
        if self._contact_method is None:
            return Error(ValidationError(
                "contact_method", "Please select your preferred contact method.",
            ))
        if self._location is None:
            return Error(ValidationError("shipping_location", "Please select your shipping location."))
        if self._payment_method is None:
            return Error(ValidationError("payment_method", "Please select a payment method."))
        if self._voucher is not None and self._voucher.voucher is not None:
            match check_voucher(self._voucher.voucher, self._cart.total_price(), self._clock()):
                case Error(e):
                    logger.info("Voucher %s dropped at submit: %s", e.code, e.kind.value)
                    self._voucher = None
                    return Error(e)
                case _:
                    pass
        return Ok(None)

    def _draft(self, location: ShippingLocation) -> OrderDraft:
        d = self._details
        quote = self.quote()
        items = tuple(
            OrderItem(
                product_id=line.product.id,
                product_name=line.product.name,
                variation_id=line.variation.id if line.variation is not None else None,
                variation_name=line.variation.name if line.variation is not None else None,
                quantity=line.quantity,
                price=line.unit_price,
                total=line.total,
                purity_percentage=line.product.purity_percentage,
                is_complete_set=line.is_complete_set,
            )
            for line in self._cart
        )
        return OrderDraft(
            customer=Customer(name=d.name.strip(), email=d.email.strip(), phone=d.phone.strip()),
            shipping=ShippingAddress(
                address=d.address.strip(),
                barangay=d.barangay.strip(),
                city=d.city.strip(),
                state=d.state.strip(),
                zip_code=d.zip_code.strip(),
            ),
            shipping_location=location,
            shipping_fee=quote.shipping_fee,
            items=items,
            total_price=quote.subtotal,
            discount_amount=quote.discount,
            voucher_code=self._voucher.code if self._voucher is not None else None,
            payment_method_id=self._payment_method.id if self._payment_method else None,
            payment_method_name=self._payment_method.name if self._payment_method else None,
            contact_method=self._contact_method.value if self._contact_method else None,
            notes=d.notes.strip() or None,
        )

    def _contact_url(self) -> str:
        match self._contact_method:
            case ContactMethod.TELEGRAM:
                return self._settings.contact_url
            case _:
                return ""

    # ── pipeline steps ─────────────────────────────────────────────────────────

    async def _store(self, draft: OrderDraft) -> Result[Order, PersistenceError]:
        """Insert under a fresh number, asking again when the number is taken."""
        tried: list[str] = []
        last: PersistenceError | None = None

        for _ in range(self._settings.order_number_attempts):
            number = await self._numbers.next()
            if number in tried:
                number = self._numbers.following(tried[-1])
            tried.append(number)

            match await self._orders.insert(draft, number):
                case Ok(order):
                    return Ok(order)
                case Error(e) if e.kind is PersistenceErrorKind.CONFLICT:
                    logger.warning("Order number %s already taken, retrying", number)
                    last = e
                case Error(e):
                    return Error(e)

        assert last is not None
        return Error(last)

    def _persist(self, ctx: _Submission) -> LazyCoroResult[_Submission, StepError]:
        async def _run() -> Result[_Submission, StepError]:
            match await self._store(ctx.draft):
                case Ok(order):
                    return Ok(replace(ctx, order=order))
                case Error(e):
                    return Error(e)
        return lift.from_result_async(_run)

    def _upload_proof(self, ctx: _Submission) -> LazyCoroResult[_Submission, StepError]:
        async def _run() -> Result[_Submission, StepError]:
            order = ctx.stored
            path = f"{order.id}.{ctx.proof.extension}"
            uploaded = await L.catching_async(
                lambda: self._proofs.upload(path, ctx.proof.content, ctx.proof.content_type),
                on_error=lambda e: UploadError(f"Failed to upload payment proof: {e}", e),
            )
            match uploaded:
                case Error(e):
                    return Error(e)
                case Ok(url):
                    pass

            match await self._orders.attach_proof_url(order.id, url):
                case Ok(updated):
                    return Ok(replace(ctx, order=updated))
                case Error(e):
                    return Error(UploadError(f"Failed to save payment proof URL: {e.message}", e.cause))
        return lift.from_result_async(_run)

    def _record_voucher(self, ctx: _Submission) -> LazyCoroResult[_Submission, StepError]:
        if ctx.voucher is None:
            return lift.from_result(Ok(ctx))

        code = ctx.voucher.code

        async def _run() -> Result[_Submission, StepError]:
            match await self._vouchers.record_usage(code):
                case Error(e):
                    return Error(e)
                case _:
                    return Ok(ctx)
        return lift.from_result_async(_run)

    def _compose(self, ctx: _Submission) -> LazyCoroResult[_Submission, StepError]:
        async def _run() -> _Submission:
            message = format_order_message(
                ctx.stored,
                context=MessageContext(
                    store_name=self._settings.store_name,
                    timezone=self._settings.timezone,
                    contact_channel=self._settings.contact_channel,
                    contact_url=self._settings.contact_url,
                ),
                payment_method=ctx.payment_method,
                voucher=ctx.voucher,
                placed_at=self._clock(),
            )
            return replace(ctx, message=message)
        return lift.from_awaitable(_run, on_error=lambda e: e)

    def _copy(self, ctx: _Submission) -> LazyCoroResult[_Submission, StepError]:
        if not ctx.message:
            return lift.from_result(Ok(ctx))

        async def _run() -> _Submission:
            await self._clipboard.copy(ctx.message)
            return replace(ctx, copied=True)
        return lift.from_awaitable(_run, on_error=lambda e: e)

    def _open_contact(self, ctx: _Submission) -> LazyCoroResult[_Submission, StepError]:
        if not ctx.contact_url:
            return lift.from_result(Ok(ctx))

        async def _run() -> _Submission:
            return replace(ctx, contact_opened=self._launcher.open(ctx.contact_url))
        return L.catching_async(_run, on_error=lambda e: e)

    async def submit(self) -> Result[Confirmation, SubmitError]:
        """
        Place the order.

        Only a failure to store the order is returned as an error; the
        session then stays on PAYMENT and the customer may retry. Once the
        order is stored the confirmation is always produced: a failed proof
        upload is reported on it, and a message that could not be composed
        leaves it empty. A voucher the cart no longer qualifies for is
        removed and returned as a VoucherError before anything is stored.
        """
        match self._check_submittable():
            case Error(e):
                return Error(e)
            case _:
                pass

        assert self._proof is not None and self._location is not None
        self._submitting = True
        try:
            ctx = _Submission(
                draft=self._draft(self._location),
                proof=self._proof,
                payment_method=self._payment_method,
                voucher=self.voucher,
                contact_url=self._contact_url(),
            )
            result = await PL.run(
                [
                    PL.step("persist", self._persist),
                    PL.best_effort("upload_proof", self._upload_proof),
                    PL.best_effort("record_voucher_usage", self._record_voucher),
                    PL.best_effort("compose_message", self._compose),
                    PL.best_effort("copy_message", self._copy),
                    PL.best_effort("open_contact", self._open_contact),
                ],
                ctx,
            )
        finally:
            self._submitting = False

        match result:
            case Error(failure):
                logger.error("Order submission failed at %s", failure.step_failed)
                error = failure.error
                if isinstance(error, PersistenceError):
                    return Error(error)
                return Error(PersistenceError(
                    PersistenceErrorKind.UNAVAILABLE, f"Failed to place order: {error}",
                ))
            case Ok(done):
                pass

        upload_failure = done.failed("upload_proof")
        upload_error = upload_failure.error if upload_failure is not None else None
        confirmation = Confirmation(
            order=done.value.stored,
            message=done.value.message,
            copied=done.value.copied,
            contact_opened=done.value.contact_opened,
            upload_error=upload_error if isinstance(upload_error, UploadError) else None,
            contact_channel=self._settings.contact_channel,
        )
        self._confirmation = confirmation
        self._step = CheckoutStep.CONFIRMATION
        logger.info("Order %s placed", confirmation.order.order_number)
        return Ok(confirmation)

    # ═══════════════════════════════════════════════════════════════════════════
    # CONFIRMATION
    # ═══════════════════════════════════════════════════════════════════════════

    async def copy_message(self) -> Result[str, ValidationError]:
        """Copy the order message again. Safe to repeat."""
        if self._confirmation is None:
            return Error(ValidationError("step", "No order has been placed yet"))
        message = self._confirmation.message
        if not message:
            return Error(ValidationError("message", "The order message is unavailable"))
        copied = await L.catching_async(
            lambda: self._clipboard.copy(message),
            on_error=lambda e: e,
        )
        match copied:
            case Ok(_):
                self._confirmation = replace(self._confirmation, copied=True)
                return Ok(message)
            case Error(e):
                logger.warning("Copying order message failed: %s", e)
                return Error(ValidationError("clipboard", f"Could not copy the message: {e}"))

    def open_contact(self) -> bool:
        """Re-open the contact deep link after confirmation."""
        if self._confirmation is None:
            return False
        url = self._contact_url()
        return bool(url) and self._launcher.open(url)

    def continue_shopping(self) -> None:
        """Leave the confirmation: empty the cart and start a fresh checkout."""
        self._cart.clear()
        self._reset()


__all__ = ("CheckoutSession",)
