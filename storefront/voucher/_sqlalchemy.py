"""
SQLAlchemy voucher repository.
"""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import or_, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront.db import VoucherTable
from storefront.errors import PersistenceError, PersistenceErrorKind
from storefront.voucher._types import DiscountType, Voucher


def _to_voucher(row: VoucherTable) -> Voucher:
    return Voucher(
        id=row.id,
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=row.discount_value,
        min_spend=row.min_spend,
        usage_limit=row.usage_limit,
        times_used=row.times_used,
        is_active=row.is_active,
        expires_at=row.expires_at,
    )


class SqlVoucherRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_code(self, code: str) -> Result[Voucher | None, PersistenceError]:
        try:
            async with self._session_factory() as session:
                stmt = select(VoucherTable).where(VoucherTable.code == code)
                row = (await session.execute(stmt)).scalar_one_or_none()
                return Ok(_to_voucher(row) if row is not None else None)

        except Exception as e:
            return Error(PersistenceError(
                PersistenceErrorKind.UNAVAILABLE, f"Failed to load voucher: {e}", e,
            ))

    async def increment_usage(self, code: str) -> Result[bool, PersistenceError]:
        """Single guarded UPDATE, so concurrent checkouts cannot overshoot the limit."""
        try:
            async with self._session_factory() as session:
                stmt = (
                    update(VoucherTable)
                    .where(VoucherTable.code == code)
                    .where(or_(
                        VoucherTable.usage_limit.is_(None),
                        VoucherTable.times_used < VoucherTable.usage_limit,
                    ))
                    .values(times_used=VoucherTable.times_used + 1)
                )
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()
                return Ok(cursor.rowcount > 0)

        except Exception as e:
            return Error(PersistenceError(
                PersistenceErrorKind.UNAVAILABLE, f"Failed to record voucher usage: {e}", e,
            ))

    async def add(self, voucher: Voucher) -> Result[Voucher, PersistenceError]:
        """Store a new voucher (admin seeding)."""
        try:
            async with self._session_factory() as session:
                session.add(VoucherTable(
                    id=voucher.id,
                    code=voucher.code.strip().upper(),
                    discount_type=voucher.discount_type.value,
                    discount_value=voucher.discount_value,
                    min_spend=voucher.min_spend,
                    usage_limit=voucher.usage_limit,
                    times_used=voucher.times_used,
                    is_active=voucher.is_active,
                    expires_at=voucher.expires_at,
                ))
                await session.commit()
                return Ok(voucher)

        except Exception as e:
            return Error(PersistenceError(
                PersistenceErrorKind.CONFLICT, f"Failed to add voucher: {e}", e,
            ))


__all__ = ("SqlVoucherRepository",)
