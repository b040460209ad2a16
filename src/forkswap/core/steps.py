"""Ordered, best-effort execution of multi-step operations.

Switch and clone are sequences of filesystem mutations. A failing step is
logged and recorded, and the sequence continues with the next step; the
returned StepResults (and the journal) show exactly which steps failed.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from forkswap.core.errors import ForkSwapError
from forkswap.core.user_feedback import UserFeedback

if TYPE_CHECKING:
    from forkswap.core.journal import SwapJournal


@dataclass(frozen=True)
class StepResult:
    """Outcome of one executed step."""

    description: str
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class Step:
    """A single sub-step of an operation.

    Attributes:
        description: Short imperative description, stored in the journal
        action: Callable performing the mutation; raises on failure
        success_message: Reported when the action completes
        failure_message: Reported (with the error) when the action raises
        when: Optional guard evaluated right before the step; a False result
            skips the step without recording anything
    """

    description: str
    action: Callable[[], None]
    success_message: str
    failure_message: str
    when: Callable[[], bool] | None = None


def run_steps(
    steps: Sequence[Step],
    *,
    feedback: UserFeedback,
    journal: "SwapJournal | None" = None,
) -> list[StepResult]:
    """Run steps in order, continuing past failures.

    Only OSError, RuntimeError (external command failures) and ForkSwapError
    are treated as step failures; anything else propagates.
    """
    results: list[StepResult] = []
    for step in steps:
        if step.when is not None and not step.when():
            continue

        try:
            step.action()
        except (OSError, RuntimeError, ForkSwapError) as e:
            feedback.error(f"{step.failure_message} {e}")
            result = StepResult(description=step.description, success=False, error=str(e))
        else:
            feedback.info(step.success_message)
            result = StepResult(description=step.description, success=True)

        results.append(result)
        if journal is not None:
            journal.record(result)

    return results


def failed_steps(results: Sequence[StepResult]) -> list[StepResult]:
    return [r for r in results if not r.success]
