"""Steps for Flatpak runtimes and Snap revisions."""

from __future__ import annotations

import logging

from reclaim.adapters import flatpak, snap
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.step import APPLICATIONS, CleanupStep
from reclaim.utils import has_command

log = logging.getLogger(__name__)


class FlatpakUnusedStep(CleanupStep):
    """Uninstalls Flatpak runtimes no installed application uses."""

    id = "flatpak_unused"
    name = "Unused Flatpak Runtimes"
    description = "Uninstalls runtimes and extensions that no installed Flatpak application needs."
    category = "application"
    group = APPLICATIONS
    sort_order = 40
    item_noun = "runtime"
    empty_message = "No unused Flatpak runtimes."

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("flatpak"):
            return "Flatpak is not installed"
        return None

    def scan(self) -> Catalog:
        catalog = Catalog(self.id, self.name, notes=["Flatpak does not report sizes for unused runtimes."])
        for ref in flatpak.unused_refs():
            catalog.add(CatalogItem(identifier=ref, label=ref))
        return catalog

    def remove(self, item: CatalogItem) -> None:
        flatpak.uninstall(item.identifier)


class SnapRevisionsStep(CleanupStep):
    """Removes disabled snap revisions, keeping the active one."""

    id = "snap_revisions"
    name = "Old Snap Revisions"
    description = (
        "Removes disabled snap revisions. snapd keeps earlier revisions around "
        "so a refresh can be rolled back; the active revision stays."
    )
    category = "package_manager"
    group = APPLICATIONS
    requires_root = True
    sort_order = 41
    item_noun = "revision"
    empty_message = "No disabled snap revisions."

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("snap"):
            return "Snap is not installed"
        return None

    def scan(self) -> Catalog:
        catalog = Catalog(self.id, self.name)
        for rev in snap.disabled_revisions():
            try:
                size = rev.file.stat().st_size
            except OSError:
                log.debug("Cannot stat %s", rev.file)
                size = 0
            catalog.add(
                CatalogItem(
                    identifier=f"{rev.name}_{rev.revision}",
                    label=f"{rev.name} (revision {rev.revision})",
                    size_bytes=size,
                )
            )
        return catalog

    def remove(self, item: CatalogItem) -> None:
        name, _, revision = item.identifier.rpartition("_")
        if not name:
            raise ValueError(f"Cannot parse snap revision: {item.identifier}")
        snap.remove_revision(snap.SnapRevision(name, revision))
