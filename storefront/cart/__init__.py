"""
Cart — line ledger with stock clamping and persistence.
"""

from __future__ import annotations

from storefront.cart._types import LineKey, CartLine, CartChange
from storefront.cart._storage import KeyValueStorage, MemoryStorage, JsonFileStorage
from storefront.cart._ledger import DEFAULT_STORAGE_KEY, CartLedger

__all__ = (
    "LineKey",
    "CartLine",
    "CartChange",
    "KeyValueStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "DEFAULT_STORAGE_KEY",
    "CartLedger",
)
