"""
Database layer — SQLAlchemy models for orders and vouchers.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


def _money() -> Numeric:
    return Numeric(12, 2, asdecimal=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Orders Table
# ═══════════════════════════════════════════════════════════════════════════════


class OrderTable(Base):
    """
    One submitted order.

    ``order_number`` is unique: two concurrent checkouts that derive the
    same number cannot both be stored.
    """

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)

    # Customer
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(50), nullable=False)

    # Shipping
    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)
    shipping_barangay: Mapped[str] = mapped_column(String(200), nullable=False)
    shipping_city: Mapped[str] = mapped_column(String(200), nullable=False)
    shipping_state: Mapped[str] = mapped_column(String(200), nullable=False)
    shipping_zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    shipping_location: Mapped[str] = mapped_column(String(32), nullable=False)
    shipping_fee: Mapped[Decimal] = mapped_column(_money(), nullable=False)

    # Items and pricing
    order_items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(_money(), nullable=False)
    voucher_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    discount_amount: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=Decimal("0"))

    # Payment / contact
    payment_method_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    payment_method_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    payment_proof_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_method: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Status
    order_status: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Vouchers Table
# ═══════════════════════════════════════════════════════════════════════════════


class VoucherTable(Base):
    __tablename__ = "vouchers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(_money(), nullable=False)
    min_spend: Mapped[Decimal] = mapped_column(_money(), nullable=False, default=Decimal("0"))
    usage_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    times_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create the schema and return (session_factory, engine)."""
    if url.endswith(":memory:"):
        # All sessions must share the single in-memory connection.
        engine = create_async_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = ("Base", "OrderTable", "VoucherTable", "create_database")
