"""
Lift — Helpers for lifting values into storefront computations.

Thin wrappers over combinators.lift for building step actions.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable

from kungfu import LazyCoroResult, Result

from combinators.lift import catching_async


# ═══════════════════════════════════════════════════════════════════════════════
# Storefront-specific helpers
# ═══════════════════════════════════════════════════════════════════════════════

def from_result[T, E](result: Result[T, E]) -> LazyCoroResult[T, E]:
    """Lift an already computed Result into LazyCoroResult."""
    async def _run() -> Result[T, E]:
        return result
    return LazyCoroResult(_run)


def from_result_async[T, E](
    fn: Callable[[], Awaitable[Result[T, E]]],
) -> LazyCoroResult[T, E]:
    """
    Wrap an async function that already returns a Result.

    Repository methods report failures as Error values, so they need no
    catching; this only defers the call until the computation is awaited.
    """
    return LazyCoroResult(fn)


def from_awaitable[T, E](
    awaitable_fn: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], E],
) -> LazyCoroResult[T, E]:
    """
    Create LazyCoroResult from async function that may raise.

    Alias for catching_async with clearer naming.
    """
    return catching_async(awaitable_fn, on_error=on_error)


__all__ = ("from_result", "from_result_async", "from_awaitable")
