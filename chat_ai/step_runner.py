from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger("chat_ai.steps")


@dataclass
class PipelineStep:
    """Named pipeline step with an optional skip guard."""
    name: str
    fn: Callable[[object], None]
    skip_if: Optional[Callable[[object], bool]] = None
    always_run: bool = False


class StepRunner:
    """Runs pipeline steps in order against one mutable request context."""

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self._steps]

    def run(self, context: object, request_id: str = "-") -> None:
        """Purpose: Execute steps in order with optional skip/always-run rules.
        Inputs/Outputs: Input is a mutable context object and a request id for logs;
            no return value.
        Side Effects / State: Invokes step functions that may mutate context and emits
            one log line per step.
        Dependencies: Depends on PipelineStep.fn and PipelineStep.skip_if semantics.
        Failure Modes: Exceptions in step functions propagate to the caller after an
            error log line; later steps do not run.
        If Removed: The request pipeline cannot run.
        Testing Notes: Verify skip_if and always_run logic with simple steps.
        """
        # Iterate steps and honor always_run/skip_if guards.
        for step in self._steps:
            if not step.always_run and step.skip_if and step.skip_if(context):
                logger.info("request=%s step=%s status=skipped", request_id, step.name)
                continue
            started = time.perf_counter()
            try:
                step.fn(context)
            except Exception:
                logger.error("request=%s step=%s status=error", request_id, step.name)
                raise
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info("request=%s step=%s status=success ms=%.1f", request_id, step.name, elapsed_ms)
