"""
Saga runner
Runs a lifecycle operation as an ordered list of locally committed steps,
compensating completed steps when a later one fails.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from bookstore.core.exceptions import AppException, CascadeError

logger = logging.getLogger(__name__)

StepAction = Callable[[], Awaitable[Any]]


@dataclass
class SagaStep:
    """One step of a saga."""

    name: str
    action: StepAction
    compensate: Optional[StepAction] = None


@dataclass
class Saga:
    """Ordered, compensable sequence of async steps.

    Steps must be idempotent: a failed saga is retried by running it again
    from the start against whatever state the previous attempt left.
    """

    name: str
    steps: List[SagaStep] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)
    results: Dict[str, Any] = field(default_factory=dict)

    def step(
        self,
        name: str,
        action: StepAction,
        compensate: Optional[StepAction] = None,
    ) -> "Saga":
        self.steps.append(SagaStep(name, action, compensate))
        return self

    async def run(self) -> Dict[str, Any]:
        """Run every step in order.

        Returns:
            Mapping of step name to the value its action returned

        Raises:
            CascadeError: When a step fails; completed steps are compensated
                first. Request errors (validation, not found) pass through
                unchanged.
        """
        for saga_step in self.steps:
            try:
                self.results[saga_step.name] = await saga_step.action()
            except Exception as e:
                logger.error(f"Saga '{self.name}' failed at step '{saga_step.name}': {e}")
                await self._compensate()
                if isinstance(e, AppException):
                    raise
                raise CascadeError(self.name, saga_step.name, e, self.completed) from e
            self.completed.append(saga_step.name)
            logger.debug(f"Saga '{self.name}' completed step '{saga_step.name}'")
        return self.results

    async def _compensate(self) -> None:
        by_name = {s.name: s for s in self.steps}
        for name in reversed(self.completed):
            compensate = by_name[name].compensate
            if compensate is None:
                continue
            try:
                await compensate()
                logger.info(f"Saga '{self.name}' compensated step '{name}'")
            except Exception as e:
                # Left for manual reconciliation
                logger.warning(f"Saga '{self.name}' could not compensate step '{name}': {e}")
