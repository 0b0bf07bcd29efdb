"""Steps backed by dpkg and apt-get."""

from __future__ import annotations

import logging
from pathlib import Path

from reclaim.adapters import apt
from reclaim.core.scanner import ResourceClass, suffix_rule
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.step import ADVANCED, SYSTEM, PackageStep, ResourceScanStep
from reclaim.utils import has_command

log = logging.getLogger(__name__)

_ARCHIVES_DIR = Path("/var/cache/apt/archives")


def _package_items(catalog: Catalog, names: list[str], installed: dict[str, apt.InstalledPackage]) -> None:
    for name in names:
        package = installed.get(name)
        version = f" {package.version}" if package and package.version else ""
        size = package.size_bytes if package and package.size_bytes else 0
        catalog.add(CatalogItem(identifier=name, label=f"{name}{version}", size_bytes=size))


class AptAutoremoveStep(PackageStep):
    """Removes packages that were installed as dependencies and are no longer needed."""

    id = "apt_autoremove"
    name = "Unused Packages"
    description = "Removes automatically installed packages nothing depends on any more (apt-get autoremove)."
    category = "package_manager"
    group = SYSTEM
    requires_root = True
    risk_level = "moderate"
    sort_order = 10
    apt_action = "remove"
    empty_message = "No unused packages."

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("apt-get"):
            return "apt-get not found"
        return None

    def scan(self) -> Catalog:
        catalog = Catalog(self.id, self.name, notes=["Simulated with apt-get -s autoremove; nothing changed yet."])
        _package_items(catalog, apt.autoremove_candidates(), apt.installed_packages())
        return catalog


class AptCacheStep(ResourceScanStep):
    """Deletes downloaded package archives from the APT cache."""

    id = "apt_cache"
    name = "APT Package Cache"
    description = "Removes downloaded .deb archives. APT downloads them again when needed."
    category = "package_manager"
    group = SYSTEM
    requires_root = True
    sort_order = 11
    item_noun = "archive"
    display_limit = 15
    empty_message = "The package cache is already empty."

    @property
    def _resource(self) -> ResourceClass:
        return ResourceClass(
            name=self.name,
            roots=(_ARCHIVES_DIR,),
            match=suffix_rule(".deb"),
            kinds=frozenset({"file"}),
            label=lambda p: p.name,
        )


class ResidualConfigStep(PackageStep):
    """Purges configuration left behind by removed packages."""

    id = "residual_configs"
    name = "Residual Package Configs"
    description = "Purges configuration files of packages that were removed but not purged (dpkg state 'rc')."
    category = "package_manager"
    group = SYSTEM
    requires_root = True
    sort_order = 12
    empty_message = "No residual configuration found."

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("dpkg-query"):
            return "dpkg-query not found"
        return None

    def scan(self) -> Catalog:
        installed = apt.installed_packages()
        names = sorted(p.name for p in installed.values() if p.residual)
        catalog = Catalog(self.id, self.name)
        _package_items(catalog, names, installed)
        return catalog


class OrphanedLibrariesStep(PackageStep):
    """Purges libraries reported as orphaned by deborphan."""

    id = "orphaned_libraries"
    name = "Orphaned Libraries"
    description = "Purges libraries no installed package depends on, as reported by deborphan."
    category = "package_manager"
    group = ADVANCED
    requires_root = True
    risk_level = "aggressive"
    sort_order = 90
    advanced = True
    preamble = (
        "deborphan can report libraries that are still used by software installed "
        "outside the package manager. Review the list carefully before removing anything."
    )
    empty_message = "No orphaned libraries found."

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("deborphan"):
            return "deborphan is not installed (sudo apt install deborphan)"
        return None

    def scan(self) -> Catalog:
        catalog = Catalog(self.id, self.name)
        _package_items(catalog, apt.orphans(), apt.installed_packages())
        return catalog
