"""
VoterReg Backend — Multi-Step Write Runner
===========================================

What:  Runs an ordered list of store writes that are committed one by one,
       undoing completed steps by hand when a critical step fails.
How:   Each Step names the sub-record it writes, the coroutine that writes it,
       an optional compensating coroutine, and whether a failure may be
       skipped (best effort).
Who:   Application Writer (submission) and Approval Orchestrator (approval).

Failure Rules:
    best_effort step fails  → logged at WARNING, the run continues
    critical step fails     → completed steps with a `compensate` are undone
                              in reverse order, then the error is re-raised:
                              DatabaseError  → PersistenceError(record=step.name)
                              other VoterRegError → unchanged
    compensation fails      → logged at ERROR, the original error still wins

    Steps without `compensate` stay committed after a failure; callers decide
    which writes deserve an undo.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from app.exceptions import DatabaseError, PersistenceError, VoterRegError

logger = logging.getLogger(__name__)


@dataclass
class Step:
    """One write in a multi-step flow."""

    name: str
    action: Callable[[], Awaitable[Any]]
    compensate: Optional[Callable[[], Awaitable[Any]]] = None
    best_effort: bool = False
    failure_message: Optional[str] = None


@dataclass
class WorkflowResult:
    """Outcome of a completed run."""

    results: Dict[str, Any] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    def __getitem__(self, name: str) -> Any:
        return self.results[name]


class Workflow:
    """
    Sequential step runner.

    Args:
        name:  Label used in log lines (e.g. "submission", "approval").
        steps: Steps in execution order.
    """

    def __init__(self, name: str, steps: Sequence[Step]):
        self.name = name
        self.steps = list(steps)

    async def _compensate(self, completed: List[Step]) -> None:
        for step in reversed(completed):
            if step.compensate is None:
                continue
            try:
                await step.compensate()
                logger.info("%s: compensated step '%s'", self.name, step.name)
            except Exception as e:
                logger.error(
                    "%s: compensation of step '%s' failed: %s",
                    self.name,
                    step.name,
                    str(e),
                    exc_info=True,
                )

    async def run(self) -> WorkflowResult:
        """
        Executes every step in order.

        Raises:
            PersistenceError: a critical step failed with a database error.
            VoterRegError:    a critical step raised any other domain error.
        """
        outcome = WorkflowResult()
        completed: List[Step] = []

        for step in self.steps:
            try:
                outcome.results[step.name] = await step.action()
            except VoterRegError as e:
                if step.best_effort:
                    logger.warning(
                        "%s: best-effort step '%s' failed, continuing: %s",
                        self.name,
                        step.name,
                        e.message,
                    )
                    outcome.skipped.append(step.name)
                    continue

                logger.error(
                    "%s: step '%s' failed: %s | context=%s",
                    self.name,
                    step.name,
                    e.message,
                    e.context,
                )
                await self._compensate(completed)

                if isinstance(e, DatabaseError) and not isinstance(e, PersistenceError):
                    raise PersistenceError(
                        record=step.name,
                        message=step.failure_message,
                        context={"workflow": self.name, **e.context},
                    ) from e
                raise
            completed.append(step)

        return outcome
