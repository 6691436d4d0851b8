"""
Cart Ledger — the ordered list of cart lines and its totals.

    from storefront.cart import CartLedger, MemoryStorage

    cart = CartLedger(MemoryStorage())
    match cart.add(product, variation, quantity=2):
        case Ok(change) if change.clamped:
            notify(change.clamped.message)
        case Error(out_of_stock):
            notify(out_of_stock.message)

Every mutation writes the whole ledger back to storage; construction
restores it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pydantic
from kungfu import Result, Ok, Error

from storefront.cart._storage import KeyValueStorage
from storefront.cart._types import CartLine, CartChange, LineKey
from storefront.catalog import Product, ProductVariation
from storefront.catalog import pricing as P
from storefront.errors import OutOfStock, StockClamped

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "peptide_cart"

_LINES = pydantic.TypeAdapter(list[CartLine])


class CartLedger:
    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._key = key
        self._lines: list[CartLine] = self._restore()

    # ═══════════════════════════════════════════════════════════════════════════
    # Persistence
    # ═══════════════════════════════════════════════════════════════════════════

    def _restore(self) -> list[CartLine]:
        raw = self._storage.get(self._key)
        if raw is None:
            return []
        try:
            return _LINES.validate_json(raw)
        except pydantic.ValidationError as e:
            logger.warning(
                "Discarding unreadable cart state under %r (%d errors)",
                self._key,
                e.error_count(),
            )
            return []

    def _persist(self) -> None:
        self._storage.set(self._key, _LINES.dump_json(self._lines).decode())

    # ═══════════════════════════════════════════════════════════════════════════
    # Queries
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def lines(self) -> Sequence[CartLine]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(tuple(self._lines))

    def __getitem__(self, index: int) -> CartLine:
        return self._lines[index]

    def find(self, key: LineKey) -> int | None:
        for i, line in enumerate(self._lines):
            if line.key == key:
                return i
        return None

    def total_price(self) -> Decimal:
        return sum((line.total for line in self._lines), Decimal("0"))

    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    # ═══════════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════════

    def add(
        self,
        product: Product,
        variation: ProductVariation | None = None,
        quantity: int = 1,
        is_complete_set: bool = False,
        *,
        at: datetime | None = None,
    ) -> Result[CartChange, OutOfStock]:
        """
        Add ``quantity`` of a selection, merging into an existing line.

        The resulting line quantity is clamped to available stock; the
        returned change carries a ``StockClamped`` notice when that happens.
        A line already at the stock limit is left untouched.
        """
        if quantity <= 0:
            raise ValueError(f"quantity must be positive, got {quantity}")

        available = P.available_stock(product, variation)
        if available == 0:
            return Error(OutOfStock(
                product_id=product.id,
                variation_id=variation.id if variation is not None else None,
            ))

        key: LineKey = (
            product.id,
            variation.id if variation is not None else None,
            is_complete_set,
        )
        index = self.find(key)

        if index is not None:
            line = self._lines[index]
            wanted = line.quantity + quantity
            granted = min(wanted, available)
            clamped = None
            if granted < wanted:
                clamped = StockClamped(
                    requested=wanted,
                    granted=max(granted, line.quantity),
                    available=available,
                    current=line.quantity,
                )
            if granted <= line.quantity:
                return Ok(CartChange(index=index, line=line, clamped=clamped))

            line = replace(line, quantity=granted)
            self._lines[index] = line
            logger.debug("Cart line %s now x%d", key, granted)
            self._persist()
            return Ok(CartChange(index=index, line=line, clamped=clamped))

        granted = min(quantity, available)
        clamped = None
        if granted < quantity:
            clamped = StockClamped(requested=quantity, granted=granted, available=available)

        line = CartLine(
            product=product,
            variation=variation,
            quantity=granted,
            unit_price=P.resolve_price(product, variation, is_complete_set, at=at),
            is_complete_set=is_complete_set,
        )
        self._lines.append(line)
        logger.debug("Cart line %s added x%d at %s", key, granted, line.unit_price)
        self._persist()
        return Ok(CartChange(index=len(self._lines) - 1, line=line, clamped=clamped))

    def update_quantity(self, index: int, quantity: int) -> CartChange | None:
        """
        Set a line's quantity. Zero or less removes the line (returns None).

        Quantities above stock are clamped; a line whose stock has dropped
        to zero is removed.
        """
        line = self._lines[index]
        if quantity <= 0:
            self.remove(index)
            return None

        available = P.available_stock(line.product, line.variation)
        clamped = None
        if quantity > available:
            clamped = StockClamped(
                requested=quantity,
                granted=available,
                available=available,
                current=line.quantity,
                adding=False,
            )
            quantity = available

        if quantity == 0:
            logger.info("Removing cart line %s: no stock left", line.key)
            self.remove(index)
            return None

        line = replace(line, quantity=quantity)
        self._lines[index] = line
        self._persist()
        return CartChange(index=index, line=line, clamped=clamped)

    def remove(self, index: int) -> CartLine:
        """Remove exactly the line at ``index``; the rest keep their order."""
        line = self._lines.pop(index)
        self._persist()
        return line

    def clear(self) -> None:
        """Empty the ledger and drop its stored state."""
        self._lines.clear()
        self._storage.delete(self._key)


__all__ = ("DEFAULT_STORAGE_KEY", "CartLedger")
