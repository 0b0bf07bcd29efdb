"""Base cleanup step interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.outcome import BatchResult

if TYPE_CHECKING:
    from reclaim.core.engine import ReclaimEngine
    from reclaim.core.scanner import ResourceClass
    from reclaim.settings import Settings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepGroup:
    """Menu section for related steps."""

    id: str
    name: str
    description: str = ""


SYSTEM = StepGroup("system", "System", "Packages, kernels, logs and crash dumps")
USER = StepGroup("user", "User files", "Trash, thumbnails and per-user caches")
APPLICATIONS = StepGroup("applications", "Applications", "Sandboxed apps, containers and browsers")
ADVANCED = StepGroup("advanced", "Advanced", "Steps that need extra care")


class CleanupStep(ABC):
    """Base class for every cleanup step.

    A step scans one resource class into a :class:`Catalog` and knows how
    to remove a single item of it.  The engine drives the rest (display,
    selection, confirmation, execution, accounting and logging).
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier, e.g. 'apt_cache'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name, e.g. 'APT Package Cache'."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What this step removes and why it's safe."""

    @property
    @abstractmethod
    def category(self) -> str:
        """Category: 'system', 'user', 'package_manager', 'browser', 'application'."""

    group: StepGroup | None = None
    requires_root: bool = False
    risk_level: str = "safe"
    sort_order: int = 50
    item_noun: str = "item"

    selectable: bool = False
    """Whether the user picks items by index instead of all-or-nothing."""

    advanced: bool = False
    """Advanced steps ask for an extra acknowledgement and are left out of 'run all'."""

    preamble: str | None = None
    display_limit: int | None = None
    large_threshold_key: str | None = None
    empty_message: str = "Nothing to clean."

    @property
    def settings(self) -> Settings:
        from reclaim.settings import Settings

        return Settings.instance()

    @abstractmethod
    def scan(self) -> Catalog:
        """Build the catalog of removable items. MUST NOT delete anything."""

    def remove(self, item: CatalogItem) -> None:
        """Remove one item, raising on failure.

        The default deletes ``item.path``.  Override in steps that call
        external tools instead.
        """
        from reclaim.utils import remove_path

        remove_path(self.item_path(item), privileged=self.requires_root)

    @staticmethod
    def item_path(item: CatalogItem) -> Path:
        if item.path is None:
            raise ValueError(f"{item.identifier} has no path to remove")
        return item.path

    def validate_batch(self, items: list[CatalogItem]) -> None:
        """Last check before confirmation; raise to abort the step."""

    def after_batch(self, result: BatchResult, engine: ReclaimEngine) -> None:
        """Hook run after every executor batch, whatever its outcome."""

    def run(self, engine: ReclaimEngine) -> BatchResult | None:
        """Run the whole step. Override for flows that are not catalog based."""
        return engine.reclaim(self)

    def confirm_question(self, items: list[CatalogItem]) -> str:
        from reclaim.utils import bytes_to_human, plural

        total = sum(i.size_bytes for i in items)
        return f"Remove {plural(len(items), self.item_noun)} ({bytes_to_human(total)})?"

    def large_warning(self, total_bytes: int) -> str:
        from reclaim.utils import bytes_to_human

        return f"WARNING: this will permanently delete {bytes_to_human(total_bytes)} of data."

    @property
    def unavailable_reason(self) -> str | None:
        """Why this step cannot work on this system, or None if supported."""
        return None

    def is_available(self) -> bool:
        return self.unavailable_reason is None


class ResourceScanStep(CleanupStep, ABC):
    """Step whose catalog is a declarative :class:`ResourceClass` scan.

    Subclasses define metadata and ``_resource``.  Scan and availability
    logic is provided.
    """

    @property
    @abstractmethod
    def _resource(self) -> ResourceClass:
        """What to scan."""

    @property
    def unavailable_reason(self) -> str | None:
        if not any(root.is_dir() for root in self._resource.roots):
            return f"{self.name} location not found"
        return None

    def scan(self) -> Catalog:
        from reclaim.core.scanner import scan_resource

        catalog = scan_resource(self._resource, step_id=self.id)
        catalog.name = self.name
        return catalog


class PackageStep(CleanupStep, ABC):
    """Step whose items are packages removed with apt-get.

    Each batch is simulated with ``apt-get -s`` before it is confirmed.
    Packages the simulation would take away beyond the selection are named
    in the confirmation question.
    """

    apt_action: str = "purge"
    item_noun = "package"

    def __init__(self) -> None:
        self._collateral: list[str] = []

    @staticmethod
    def packages(items: list[CatalogItem]) -> list[str]:
        return [name for item in items for name in (item.members or (item.identifier,))]

    def validate_batch(self, items: list[CatalogItem]) -> None:
        from reclaim.adapters import apt

        requested = self.packages(items)
        simulated = apt.simulate(self.apt_action, requested)
        chosen = set(requested)
        self._collateral = sorted({name for name in simulated if name not in chosen})
        if self._collateral:
            log.info("apt-get %s would also remove: %s", self.apt_action, ", ".join(self._collateral))
        self.check_simulation(items, simulated)

    def check_simulation(self, items: list[CatalogItem], simulated: list[str]) -> None:
        """Raise to refuse what apt-get would actually remove."""

    def removal_question(self, items: list[CatalogItem]) -> str:
        return super().confirm_question(items)

    def confirm_question(self, items: list[CatalogItem]) -> str:
        question = self.removal_question(items)
        if self._collateral:
            return f"apt-get would also remove {', '.join(self._collateral)}. {question}"
        return question

    def remove(self, item: CatalogItem) -> None:
        from reclaim.adapters import apt

        names = self.packages([item])
        if self.apt_action == "remove":
            apt.remove(names)
        else:
            apt.purge(names)
