"""Kernel retention policy.

Installed kernels are classified so that the running kernel and the most
recent previous kernel(s) are never offered for removal.
"""

from __future__ import annotations

import logging
from typing import Iterable

from reclaim.core.errors import RetentionViolation
from reclaim.models.kernel import KernelEntry, RetentionPlan

log = logging.getLogger(__name__)

NOTHING_TO_REMOVE = "nothing to remove"


def classify(
    entries: Iterable[KernelEntry],
    running_version: str | None,
    keep_previous: int = 1,
) -> RetentionPlan:
    """Split installed kernels into kept and removable.

    Fails closed: when the running kernel is unknown, or is not among the
    installed entries, no candidates are produced.  Entries whose package
    metadata could not be read are excluded, never removable.

    Args:
        entries: Installed kernel image packages, in any order.
        running_version: ``uname -r`` of the booted kernel.
        keep_previous: How many non-running kernels to keep (at least 1).
    """
    keep_previous = max(1, keep_previous)
    plan = RetentionPlan()
    ordered = sorted(entries, key=lambda e: e.version.key)

    if not running_version:
        plan.reason = "running kernel could not be determined"
        plan.excluded = ordered
        return plan

    for entry in ordered:
        entry.is_running = entry.version.raw == running_version
    running = [e for e in ordered if e.is_running]
    if not running:
        plan.reason = f"running kernel {running_version} is not among the installed packages"
        plan.excluded = ordered
        return plan

    plan.running = running[0]
    plan.kept.append(plan.running)

    previous: list[KernelEntry] = []
    for entry in ordered:
        if entry.is_running:
            continue
        if entry.error:
            plan.excluded.append(entry)
        else:
            previous.append(entry)

    if len(previous) <= keep_previous:
        plan.kept.extend(previous)
        plan.reason = NOTHING_TO_REMOVE
        return plan

    plan.kept.extend(previous[-keep_previous:])
    plan.candidates = previous[:-keep_previous]
    log.debug(
        "Retention: running=%s kept=%s candidates=%s",
        running_version,
        [str(e.version) for e in plan.kept],
        [str(e.version) for e in plan.candidates],
    )
    return plan


def verify_removal(plan: RetentionPlan, packages: Iterable[str]) -> None:
    """Refuse a removal set that breaks the retention invariant.

    Raises:
        RetentionViolation: *packages* include a kept kernel's packages, or
            the plan itself keeps no running or no fallback kernel.
    """
    if plan.running is None:
        raise RetentionViolation("running kernel unknown; refusing to remove kernels")
    if not any(not e.is_running for e in plan.kept):
        raise RetentionViolation("no fallback kernel would remain installed")
    clash = sorted(plan.protected_packages.intersection(packages))
    if clash:
        raise RetentionViolation(f"refusing to remove protected kernel packages: {', '.join(clash)}")
