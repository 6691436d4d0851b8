"""
Pipeline step creation.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from combinators import lift as L

from storefront.checkout.pipeline._types import (
    AbortPolicy,
    Action,
    ContinuePolicy,
    OnFailure,
    Step,
)

# ═══════════════════════════════════════════════════════════════════════════════
# step() — Primary Constructor
# ═══════════════════════════════════════════════════════════════════════════════


def step[C, E](
    name: str,
    action: Action[C, E],
    on_failure: OnFailure | None = None,
) -> Step[C, E]:
    """
    Create a required step (aborts the pipeline on failure by default).

    Example:
        from storefront.checkout import pipeline as PL

        persist = PL.step(
            "persist",
            lambda ctx: L.catching_async(
                lambda: save(ctx),
                on_error=lambda e: SaveError(str(e)),
            ),
        )
    """
    return Step(name=name, action=action, on_failure=on_failure or AbortPolicy())


def best_effort[C, E](name: str, action: Action[C, E]) -> Step[C, E]:
    """Create a step whose failure is recorded but never stops the pipeline."""
    return Step(name=name, action=action, on_failure=ContinuePolicy())


# ═══════════════════════════════════════════════════════════════════════════════
# from_async() — Create step from a raising async callable
# ═══════════════════════════════════════════════════════════════════════════════


def from_async[C, E](
    name: str,
    action: Callable[[C], Awaitable[C]],
    on_error: Callable[[Exception], E],
    on_failure: OnFailure | None = None,
) -> Step[C, E]:
    """
    Create step from an async callable that raises on failure.

    Example:
        PL.from_async(
            "notify",
            lambda ctx: notifier.send(ctx),
            on_error=lambda e: NotifyError(str(e)),
            on_failure=PL.ContinuePolicy(),
        )
    """
    return Step(
        name=name,
        action=lambda value: L.catching_async(lambda: action(value), on_error=on_error),
        on_failure=on_failure or AbortPolicy(),
    )


__all__ = ("step", "best_effort", "from_async")
