"""Execution result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field

from reclaim.models.space import SpaceDelta


@dataclass(slots=True, frozen=True)
class ActionOutcome:
    """Result of removing one catalog item."""

    identifier: str
    success: bool
    error: str = ""


@dataclass(slots=True)
class BatchResult:
    """Aggregated outcomes of one executor run.

    ``bytes_reclaimed`` is derived from the pre-removal sizes of the
    items that succeeded, not from a re-measurement.
    """

    outcomes: list[ActionOutcome] = field(default_factory=list)
    bytes_reclaimed: int = 0

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    @property
    def errors(self) -> list[str]:
        return [f"{o.identifier}: {o.error}" for o in self.outcomes if not o.success]


@dataclass(slots=True)
class StepReport:
    """What happened when a step was run."""

    step_id: str
    batch: BatchResult | None = None
    delta: SpaceDelta | None = None
    skipped_reason: str = ""
    error: str = ""

    @property
    def ran(self) -> bool:
        return not self.skipped_reason and not self.error
