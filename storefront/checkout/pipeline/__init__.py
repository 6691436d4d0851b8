"""
Pipeline — sequential steps with per-step failure policy.

    from storefront.checkout import pipeline as PL

    result = await PL.run(
        [
            PL.step("persist", persist),
            PL.best_effort("upload_proof", upload),
        ],
        ctx,
    )
"""

from __future__ import annotations

from storefront.checkout.pipeline._types import (
    ContinuePolicy,
    AbortPolicy,
    OnFailure,
    Action,
    Step,
    StepFailure,
    PipelineResult,
    PipelineError,
)
from storefront.checkout.pipeline._step import step, best_effort, from_async
from storefront.checkout.pipeline._run import run

__all__ = (
    "ContinuePolicy",
    "AbortPolicy",
    "OnFailure",
    "Action",
    "Step",
    "StepFailure",
    "PipelineResult",
    "PipelineError",
    "step",
    "best_effort",
    "from_async",
    "run",
)
