"""
Order number generation — ``PREFIX#NNN``, one higher than the latest order.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from kungfu import Ok, Error

from storefront._types import Clock
from storefront.orders._types import OrderRepository

logger = logging.getLogger(__name__)

MIN_DIGITS = 3
FALLBACK_DIGITS = 6


class OrderNumberGenerator:
    """
    Derives the next human-readable order number.

    Reads the most recent order's number and increments its numeric part.
    With no prior order, an unparseable number or a failed lookup it falls
    back to the last six digits of the current epoch milliseconds. The
    result is not reserved: the unique order_number column rejects a
    duplicate and the caller asks again.

    Example:
        numbers = OrderNumberGenerator(orders, prefix="TPL")
        await numbers.next()   # "TPL#008" after "TPL#007"
    """

    def __init__(
        self,
        repository: OrderRepository,
        *,
        prefix: str = "TPL",
        clock: Clock = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._repository = repository
        self._prefix = prefix
        self._clock = clock
        self._pattern = re.compile(rf"{re.escape(prefix)}#(\d+)")

    @property
    def prefix(self) -> str:
        return self._prefix

    def format(self, number: int) -> str:
        return f"{self._prefix}#{number:0{MIN_DIGITS}d}"

    def parse(self, order_number: str) -> int | None:
        match = self._pattern.search(order_number)
        return int(match.group(1)) if match else None

    def following(self, order_number: str) -> str:
        """The number after ``order_number``, or the fallback when it does not parse."""
        number = self.parse(order_number)
        return self.format(number + 1) if number is not None else self.fallback()

    def fallback(self) -> str:
        millis = int(self._clock().timestamp() * 1000)
        return f"{self._prefix}#{str(millis)[-FALLBACK_DIGITS:]}"

    async def next(self) -> str:
        match await self._repository.latest_order_number():
            case Error(e):
                logger.warning("Order number lookup failed, using fallback: %s", e.message)
                return self.fallback()
            case Ok(None):
                return self.fallback()
            case Ok(latest):
                if self.parse(latest) is None:
                    logger.warning("Unrecognized order number %r, using fallback", latest)
                return self.following(latest)


__all__ = ("MIN_DIGITS", "FALLBACK_DIGITS", "OrderNumberGenerator")
