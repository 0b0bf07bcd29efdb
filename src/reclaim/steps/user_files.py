"""Steps for the user's trash and thumbnail cache."""

from __future__ import annotations

import logging
from pathlib import Path

from reclaim.core.scanner import ResourceClass
from reclaim.models.catalog import CatalogItem
from reclaim.models.step import USER, ResourceScanStep
from reclaim.utils import bytes_to_human, remove_path, xdg_cache_home, xdg_data_home

log = logging.getLogger(__name__)


class TrashStep(ResourceScanStep):
    """Empties the user's trash (~/.local/share/Trash)."""

    id = "trash"
    name = "Trash"
    description = "Permanently deletes files in the trash. These files were already deleted by the user."
    category = "user"
    group = USER
    sort_order = 30
    item_noun = "file"
    display_limit = 20
    large_threshold_key = "confirm.large_threshold_mb"
    empty_message = "Trash is already empty."

    def _trash_dir(self) -> Path:
        return xdg_data_home() / "Trash"

    @property
    def _resource(self) -> ResourceClass:
        return ResourceClass(
            name=self.name,
            roots=(self._trash_dir() / "files",),
            label=lambda p: p.name,
            skip_empty=False,
        )

    @property
    def unavailable_reason(self) -> str | None:
        if not (self._trash_dir() / "files").is_dir():
            return "Trash directory not found"
        return None

    def large_warning(self, total_bytes: int) -> str:
        return (
            f"WARNING: the trash holds {bytes_to_human(total_bytes)}. "
            "Emptying it is permanent and cannot be undone."
        )

    def remove(self, item: CatalogItem) -> None:
        path = self.item_path(item)
        remove_path(path)
        info = self._trash_dir() / "info" / f"{path.name}.trashinfo"
        info.unlink(missing_ok=True)


class ThumbnailsStep(ResourceScanStep):
    """Clears the freedesktop thumbnail cache."""

    id = "thumbnails"
    name = "Thumbnail Cache"
    description = "Clears cached image previews. File managers regenerate them on demand."
    category = "user"
    group = USER
    sort_order = 31
    item_noun = "folder"
    empty_message = "Thumbnail cache is empty."

    @property
    def _resource(self) -> ResourceClass:
        return ResourceClass(
            name=self.name,
            roots=(xdg_cache_home() / "thumbnails",),
            kinds=frozenset({"dir"}),
            label=lambda p: f"thumbnails/{p.name}",
        )

    def confirm_question(self, items: list[CatalogItem]) -> str:
        total = sum(i.size_bytes for i in items)
        return f"Clear the thumbnail cache ({bytes_to_human(total)})?"

    def remove(self, item: CatalogItem) -> None:
        remove_path(self.item_path(item), keep_dir=True)
