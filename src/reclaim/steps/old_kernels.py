"""Step to purge old kernel packages while keeping the system bootable."""

from __future__ import annotations

import logging
import platform

from reclaim.adapters import apt
from reclaim.core.errors import ExecutionFailure
from reclaim.core.retention import classify, verify_removal
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.kernel import KernelEntry, KernelVersion, RetentionPlan
from reclaim.models.outcome import BatchResult
from reclaim.models.step import SYSTEM, PackageStep
from reclaim.terminal import Severity
from reclaim.utils import bytes_to_human, has_command

log = logging.getLogger(__name__)


def running_kernel() -> str | None:
    """``uname -r`` of the booted kernel, or None when unknown."""
    release = platform.release().strip()
    return release or None


def kernel_entries(installed: dict[str, apt.InstalledPackage]) -> list[KernelEntry]:
    """One entry per installed kernel version, with its package family."""
    present = {name for name, pkg in installed.items() if pkg.installed}
    versions: set[str] = set()
    for name in present:
        version = apt.kernel_version(name)
        if version:
            versions.add(version)

    entries: list[KernelEntry] = []
    for raw in versions:
        try:
            version = KernelVersion.parse(raw)
        except ValueError:
            log.debug("Ignoring unparsable kernel version: %s", raw)
            continue
        family = apt.kernel_family(raw, present)
        primary = f"linux-image-{raw}" if f"linux-image-{raw}" in family else family[0]
        entry = KernelEntry(
            version=version,
            package=primary,
            related=tuple(name for name in family if name != primary),
        )
        unknown = [name for name in family if installed[name].size_bytes is None]
        if unknown:
            entry.error = f"installed size unknown for {', '.join(unknown)}"
        else:
            entry.size_bytes = sum(installed[name].size_bytes or 0 for name in family)
        entries.append(entry)
    return entries


class OldKernelsStep(PackageStep):
    """Purges old kernels, keeping the running kernel and the newest previous one."""

    id = "old_kernels"
    name = "Old Kernels"
    description = (
        "Purges old linux-image packages with their headers and modules. "
        "The running kernel and the most recent previous kernel are always kept."
    )
    category = "system"
    group = SYSTEM
    requires_root = True
    risk_level = "aggressive"
    sort_order = 15
    item_noun = "kernel"
    selectable = True
    empty_message = "No old kernels to remove."

    def __init__(self) -> None:
        super().__init__()
        self._plan: RetentionPlan | None = None

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("dpkg-query"):
            return "dpkg-query not found"
        return None

    @property
    def keep_previous(self) -> int:
        minimum_kept = self.settings.get_int("kernels.minimum_kept", 2)
        return max(1, minimum_kept - 1)

    def plan(self) -> RetentionPlan:
        self._plan = classify(kernel_entries(apt.installed_packages()), running_kernel(), self.keep_previous)
        return self._plan

    def scan(self) -> Catalog:
        plan = self.plan()
        catalog = Catalog(self.id, self.name)
        if plan.running is not None:
            catalog.notes.append(f"Running kernel: {plan.running.version}")
        kept = [str(e.version) for e in plan.kept if not e.is_running]
        if kept:
            catalog.notes.append(f"Keeping as fallback: {', '.join(kept)}")
        if plan.reason:
            catalog.notes.append(f"Kernel retention: {plan.reason}")
        for entry in plan.excluded:
            if entry.error:
                catalog.warnings.append(f"{entry.package}: {entry.error}; not offered for removal")

        for entry in plan.candidates:
            catalog.add(
                CatalogItem(
                    identifier=str(entry.version),
                    label=f"{entry.version}  ({len(entry.packages)} packages)",
                    size_bytes=entry.size_bytes,
                    members=entry.packages,
                    notes=(", ".join(entry.packages),),
                )
            )
        return catalog

    def check_simulation(self, items: list[CatalogItem], simulated: list[str]) -> None:
        plan = self._plan if self._plan is not None else self.plan()
        verify_removal(plan, [*self.packages(items), *simulated])

    def removal_question(self, items: list[CatalogItem]) -> str:
        versions = ", ".join(item.identifier for item in items)
        total = sum(item.size_bytes for item in items)
        return f"Purge kernel(s) {versions} ({bytes_to_human(total)})?"

    def after_batch(self, result: BatchResult, engine) -> None:
        engine.terminal.info("Cleaning up leftover dependencies...")
        try:
            apt.autoremove()
        except ExecutionFailure as exc:
            engine.notify(Severity.WARNING, f"apt-get autoremove failed: {exc}")
        else:
            engine.record("apt-get autoremove completed after kernel removal")
