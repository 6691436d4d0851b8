"""
Pipeline execution.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from kungfu import Result, Ok, Error

from storefront.checkout.pipeline._types import (
    ContinuePolicy,
    PipelineError,
    PipelineResult,
    Step,
    StepFailure,
)

logger = logging.getLogger(__name__)


async def run[C, E](
    steps: Sequence[Step[C, E]],
    initial: C,
) -> Result[PipelineResult[C, E], PipelineError[E]]:
    """
    Run steps in order, threading the value through.

    On a required step failure: returns PipelineError, later steps never run.
    On a best-effort failure: records it and continues with the previous value.

    Example:
        from storefront.checkout import pipeline as PL

        result = await PL.run([persist, upload, notify], ctx)

        match result:
            case Ok(r):
                r.value, r.failures
            case Error(e):
                print(f"Failed at {e.step_failed}")
    """
    value = initial
    failures: list[StepFailure[E]] = []
    executed = 0

    for s in steps:
        result = await s.action(value)
        executed += 1

        match result:
            case Ok(next_value):
                value = next_value

            case Error(error) if isinstance(s.on_failure, ContinuePolicy):
                logger.warning("Best-effort step %r failed: %s", s.name, error)
                failures.append(StepFailure(step=s.name, error=error))

            case Error(error):
                logger.error("Step %r failed: %s", s.name, error)
                return Error(PipelineError(
                    error=error,
                    step_failed=s.name,
                    steps_executed=executed,
                ))

    return Ok(PipelineResult(
        value=value,
        steps_executed=executed,
        failures=tuple(failures),
    ))


__all__ = ("run",)
