"""Central step registry."""

from __future__ import annotations

import logging

from reclaim.models.step import CleanupStep

log = logging.getLogger(__name__)


class StepRegistry:
    """Stores registered cleanup steps and hands them out in menu order."""

    def __init__(self) -> None:
        self._steps: dict[str, CleanupStep] = {}

    def register(self, step: CleanupStep) -> None:
        """Register a step instance."""
        if step.id in self._steps:
            log.warning("Step '%s' already registered, skipping duplicate", step.id)
            return
        self._steps[step.id] = step
        log.debug("Registered step: %s (%s)", step.id, step.name)

    def get(self, step_id: str) -> CleanupStep | None:
        return self._steps.get(step_id)

    def ordered(self) -> list[CleanupStep]:
        """All steps, standard ones first, each by sort order then id."""
        return sorted(self._steps.values(), key=lambda s: (s.advanced, s.sort_order, s.id))

    def standard(self) -> list[CleanupStep]:
        return [s for s in self.ordered() if not s.advanced]

    def advanced(self) -> list[CleanupStep]:
        return [s for s in self.ordered() if s.advanced]

    def __len__(self) -> int:
        return len(self._steps)
