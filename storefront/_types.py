"""
Core types for storefront.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

# ═══════════════════════════════════════════════════════════════════════════════
# Clock
# ═══════════════════════════════════════════════════════════════════════════════

type Clock = Callable[[], datetime]
"""Zero-arg callable returning the current aware datetime."""


__all__ = ("Clock",)
