"""Shared fixtures: catalog data, settings, in-memory database, checkout wiring."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.cart import CartLedger, MemoryStorage
from storefront.catalog import PaymentMethod, Product, ProductVariation
from storefront.checkout import (
    CheckoutSession,
    MemoryClipboard,
    MemoryProofStorage,
    RecordingLauncher,
)
from storefront.db import create_database
from storefront.orders import OrderNumberGenerator, SqlOrderRepository
from storefront.settings import Settings
from storefront.shipping import ShippingFeeTable
from storefront.voucher import DiscountType, SqlVoucherRepository, Voucher, VoucherEvaluator

NOW = datetime(2026, 10, 17, 6, 14, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def simple_product():
    """Product sold by its own stock, no variations."""
    return Product(
        id="p-bpc",
        name="BPC-157",
        base_price=Decimal("1200"),
        stock_quantity=5,
        purity_percentage=Decimal("99"),
    )


@pytest.fixture
def variation():
    return ProductVariation(
        id="v-10mg",
        product_id="p-tirz",
        name="10mg",
        price=Decimal("1500"),
        stock_quantity=4,
        quantity_mg=Decimal("10"),
    )


@pytest.fixture
def set_product(variation):
    """Product with a variation and a complete-set bundle price."""
    return Product(
        id="p-tirz",
        name="Tirzepatide",
        base_price=Decimal("1800"),
        is_complete_set=True,
        complete_set_price=Decimal("2200"),
        complete_set_description="Vial, bac water and syringes",
        variations=(variation,),
    )


@pytest.fixture
def payment_methods():
    return [
        PaymentMethod(id="bank", name="BPI", account_number="1234-5678", account_name="TPL", sort_order=2),
        PaymentMethod(id="gcash", name="GCash", account_number="0917 000 0000", account_name="TPL", sort_order=1),
        PaymentMethod(id="old", name="PayMaya", active=False, sort_order=0),
    ]


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cart(storage):
    return CartLedger(storage)


@pytest.fixture
async def db():
    session_factory, engine = await create_database("sqlite+aiosqlite:///:memory:")
    yield session_factory
    await engine.dispose()


@pytest.fixture
def order_repo(db, now):
    return SqlOrderRepository(db, clock=lambda: now)


@pytest.fixture
def voucher_repo(db):
    return SqlVoucherRepository(db)


@pytest.fixture
async def save20(voucher_repo):
    voucher = Voucher(
        id="vch-1",
        code="SAVE20",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("20"),
        min_spend=Decimal("1000"),
        usage_limit=2,
    )
    await voucher_repo.add(voucher)
    return voucher


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def launcher():
    return RecordingLauncher()


@pytest.fixture
def proofs():
    return MemoryProofStorage()


@pytest.fixture
def session(cart, settings, order_repo, voucher_repo, proofs, clipboard, launcher, payment_methods, now):
    return CheckoutSession(
        cart,
        vouchers=VoucherEvaluator(voucher_repo, clock=lambda: now),
        shipping=ShippingFeeTable.from_settings(settings),
        orders=order_repo,
        numbers=OrderNumberGenerator(order_repo, prefix=settings.order_number_prefix, clock=lambda: now),
        proofs=proofs,
        clipboard=clipboard,
        launcher=launcher,
        payment_methods=payment_methods,
        settings=settings,
        clock=lambda: now,
    )
