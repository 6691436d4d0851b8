"""
Pipeline types — core data structures.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from kungfu import LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Failure policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ContinuePolicy:
    """A failed step is recorded on the result; its input flows to the next step."""


@dataclass(frozen=True, slots=True)
class AbortPolicy:
    """A failed step ends the run with a PipelineError."""


type OnFailure = ContinuePolicy | AbortPolicy


# ═══════════════════════════════════════════════════════════════════════════════
# Step — one named stage over a threaded value
# ═══════════════════════════════════════════════════════════════════════════════

type Action[C, E] = Callable[[C], LazyCoroResult[C, E]]
"""Receives the current value and lazily produces the next one."""


@dataclass(frozen=True, slots=True)
class Step[C, E]:
    """
    A single pipeline step.

    Steps run in order; each receives the value produced by the previous
    successful step. ``on_failure`` decides whether a failure stops the
    pipeline or is recorded while the previous value flows on.
    """

    name: str
    action: Action[C, E]
    on_failure: OnFailure


# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StepFailure[E]:
    """A best-effort step that failed without stopping the pipeline."""

    step: str
    error: E


@dataclass(frozen=True, slots=True)
class PipelineResult[C, E]:
    """Successful pipeline result with metadata."""

    value: C
    steps_executed: int
    failures: tuple[StepFailure[E], ...]

    def failed(self, step: str) -> StepFailure[E] | None:
        for failure in self.failures:
            if failure.step == step:
                return failure
        return None


@dataclass(frozen=True, slots=True)
class PipelineError[E]:
    """The required step that stopped the pipeline."""

    error: E
    step_failed: str
    steps_executed: int


__all__ = (
    "ContinuePolicy",
    "AbortPolicy",
    "OnFailure",
    "Action",
    "Step",
    "StepFailure",
    "PipelineResult",
    "PipelineError",
)
