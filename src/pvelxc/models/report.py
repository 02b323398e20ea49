"""Step outcome models."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class StepStatus(Enum):
    """Result of a best-effort provisioning step."""
    OK = "ok"
    WARNING = "warning"
    SKIPPED = "skipped"


class StepOutcome(BaseModel):
    """Outcome of a single provisioning step."""
    model_config = ConfigDict(frozen=True)

    name: str
    status: StepStatus = StepStatus.OK
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status != StepStatus.WARNING

    @classmethod
    def ok(cls, name: str) -> "StepOutcome":
        return cls(name=name)

    @classmethod
    def warning(cls, name: str, reason: str) -> "StepOutcome":
        return cls(name=name, status=StepStatus.WARNING, reason=reason)

    @classmethod
    def skipped(cls, name: str, reason: str) -> "StepOutcome":
        return cls(name=name, status=StepStatus.SKIPPED, reason=reason)


class RunSummary(BaseModel):
    """Append-only record of every step outcome in a run."""
    vmid: Optional[int] = None
    hostname: str = ""
    outcomes: List[StepOutcome] = Field(default_factory=list)
    report_path: Optional[str] = None
    report: str = ""

    def add(self, outcome: StepOutcome) -> StepOutcome:
        self.outcomes.append(outcome)
        return outcome

    def extend(self, outcomes: List[StepOutcome]) -> None:
        self.outcomes.extend(outcomes)

    @property
    def warnings(self) -> List[StepOutcome]:
        return [o for o in self.outcomes if o.status == StepStatus.WARNING]

    @property
    def succeeded_with_warnings(self) -> bool:
        return bool(self.warnings)

    def get(self, name: str) -> Optional[StepOutcome]:
        """Latest outcome recorded under a step name."""
        for outcome in reversed(self.outcomes):
            if outcome.name == name:
                return outcome
        return None
