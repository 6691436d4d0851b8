"""
SQLAlchemy order repository.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pydantic
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import Clock
from storefront.db import OrderTable
from storefront.errors import PersistenceError, PersistenceErrorKind
from storefront.orders._types import (
    Customer,
    Order,
    OrderDraft,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    ShippingAddress,
)
from storefront.shipping import ShippingLocation

logger = logging.getLogger(__name__)

_ITEMS = pydantic.TypeAdapter(list[OrderItem])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ═══════════════════════════════════════════════════════════════════════════════
# Row <-> Order
# ═══════════════════════════════════════════════════════════════════════════════


def _to_row(order_id: str, order_number: str, draft: OrderDraft, now: datetime) -> OrderTable:
    return OrderTable(
        id=order_id,
        order_number=order_number,
        customer_name=draft.customer.name,
        customer_email=draft.customer.email,
        customer_phone=draft.customer.phone,
        shipping_address=draft.shipping.address,
        shipping_barangay=draft.shipping.barangay,
        shipping_city=draft.shipping.city,
        shipping_state=draft.shipping.state,
        shipping_zip_code=draft.shipping.zip_code,
        shipping_location=draft.shipping_location.value,
        shipping_fee=draft.shipping_fee,
        order_items=_ITEMS.dump_python(list(draft.items), mode="json"),
        total_price=draft.total_price,
        voucher_code=draft.voucher_code,
        discount_amount=draft.discount_amount,
        payment_method_id=draft.payment_method_id,
        payment_method_name=draft.payment_method_name,
        payment_proof_url=None,
        contact_method=draft.contact_method,
        notes=draft.notes,
        order_status=OrderStatus.NEW.value,
        payment_status=PaymentStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )


def _to_order(row: OrderTable) -> Order:
    draft = OrderDraft(
        customer=Customer(row.customer_name, row.customer_email, row.customer_phone),
        shipping=ShippingAddress(
            address=row.shipping_address,
            barangay=row.shipping_barangay,
            city=row.shipping_city,
            state=row.shipping_state,
            zip_code=row.shipping_zip_code,
        ),
        shipping_location=ShippingLocation(row.shipping_location),
        shipping_fee=Decimal(row.shipping_fee),
        items=tuple(_ITEMS.validate_python(row.order_items)),
        total_price=Decimal(row.total_price),
        discount_amount=Decimal(row.discount_amount),
        voucher_code=row.voucher_code,
        payment_method_id=row.payment_method_id,
        payment_method_name=row.payment_method_name,
        contact_method=row.contact_method,
        notes=row.notes,
    )
    return Order(
        id=row.id,
        order_number=row.order_number,
        draft=draft,
        order_status=OrderStatus(row.order_status),
        payment_status=PaymentStatus(row.payment_status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        payment_proof_url=row.payment_proof_url,
    )


def _unavailable(what: str, e: Exception) -> Error[PersistenceError]:
    return Error(PersistenceError(PersistenceErrorKind.UNAVAILABLE, f"Failed to {what}: {e}", e))


def _not_found(order_id: str) -> Error[PersistenceError]:
    return Error(PersistenceError(PersistenceErrorKind.NOT_FOUND, f"Order not found: {order_id}"))


# ═══════════════════════════════════════════════════════════════════════════════
# SqlOrderRepository
# ═══════════════════════════════════════════════════════════════════════════════


class SqlOrderRepository:
    """
    Orders stored through SQLAlchemy.

    Example:
        session_factory, engine = await create_database()
        orders = SqlOrderRepository(session_factory)

        match await orders.insert(draft, "TPL#001"):
            case Ok(order): ...
            case Error(e) if e.kind is PersistenceErrorKind.CONFLICT: ...
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Clock = _utcnow,
        new_id: Callable[[], str] = _new_id,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._new_id = new_id

    async def latest_order_number(self) -> Result[str | None, PersistenceError]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(OrderTable.order_number)
                    .order_by(OrderTable.created_at.desc())
                    .limit(1)
                )
                return Ok((await session.execute(stmt)).scalar_one_or_none())

        except Exception as e:
            return _unavailable("fetch latest order", e)

    async def insert(self, draft: OrderDraft, order_number: str) -> Result[Order, PersistenceError]:
        row = _to_row(self._new_id(), order_number, draft, self._clock())
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
                logger.info("Order %s stored as %s", order_number, row.id)
                return Ok(_to_order(row))

        except IntegrityError as e:
            return Error(PersistenceError(
                PersistenceErrorKind.CONFLICT,
                f"Order number already taken: {order_number}",
                e,
            ))
        except Exception as e:
            return _unavailable("save order", e)

    async def get(self, order_id: str) -> Result[Order, PersistenceError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                if row is None:
                    return _not_found(order_id)
                return Ok(_to_order(row))

        except Exception as e:
            return _unavailable("load order", e)

    async def _patch(self, order_id: str, **values: Any) -> Result[Order, PersistenceError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                if row is None:
                    return _not_found(order_id)
                for name, value in values.items():
                    setattr(row, name, value)
                row.updated_at = self._clock()
                await session.commit()
                return Ok(_to_order(row))

        except Exception as e:
            return _unavailable("update order", e)

    async def attach_proof_url(self, order_id: str, url: str) -> Result[Order, PersistenceError]:
        return await self._patch(order_id, payment_proof_url=url)

    async def update_order_status(
        self, order_id: str, status: OrderStatus
    ) -> Result[Order, PersistenceError]:
        return await self._patch(order_id, order_status=status.value)

    async def update_payment_status(
        self, order_id: str, status: PaymentStatus
    ) -> Result[Order, PersistenceError]:
        return await self._patch(order_id, payment_status=status.value)


__all__ = ("SqlOrderRepository",)
