"""Step-by-step results for non-transactional multi-call workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class StepResult:
    name: str
    ok: bool
    value: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None


@dataclass
class WorkflowResult:
    """Ordered record of the steps a workflow attempted.

    Steps after the first failure are never attempted; earlier steps stay
    committed in the store.
    """

    name: str
    steps: List[StepResult] = field(default_factory=list)

    def record_ok(self, step: str, value: Any = None) -> None:
        self.steps.append(StepResult(name=step, ok=True, value=value))

    def record_failure(self, step: str, message: str, code: Optional[str] = None) -> None:
        self.steps.append(StepResult(name=step, ok=False, error=message, error_code=code))

    @property
    def ok(self) -> bool:
        return bool(self.steps) and all(step.ok for step in self.steps)

    @property
    def failed_step(self) -> Optional[StepResult]:
        for step in self.steps:
            if not step.ok:
                return step
        return None

    @property
    def completed(self) -> List[str]:
        return [step.name for step in self.steps if step.ok]

    def value_of(self, step: str) -> Any:
        for entry in self.steps:
            if entry.name == step and entry.ok:
                return entry.value
        return None


__all__ = ["StepResult", "WorkflowResult"]
