"""Step to remove AppImage files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from reclaim.core.scanner import ResourceClass, suffix_rule
from reclaim.models.catalog import CatalogItem
from reclaim.models.step import APPLICATIONS, ResourceScanStep
from reclaim.utils import remove_path

log = logging.getLogger(__name__)


def _default_locations() -> tuple[Path, ...]:
    home = Path.home()
    return (
        home / "Applications",
        home / ".local" / "bin",
        home / "bin",
        Path("/opt"),
        Path("/usr/local/bin"),
        home / "Downloads",
    )


def _executable_tag(path: Path) -> list[str]:
    return ["executable"] if os.access(path, os.X_OK) else []


def _label(path: Path) -> str:
    suffix = " [executable]" if os.access(path, os.X_OK) else ""
    return f"{path.name}  in {path.parent}{suffix}"


class AppImagesStep(ResourceScanStep):
    """Lets the user pick AppImages to delete from the usual locations."""

    id = "appimages"
    name = "AppImages"
    description = "Finds .AppImage files in common application and download folders so unused ones can be deleted."
    category = "application"
    group = APPLICATIONS
    risk_level = "moderate"
    sort_order = 42
    item_noun = "AppImage"
    selectable = True
    empty_message = "No AppImages found."

    def locations(self) -> tuple[Path, ...]:
        return _default_locations() + tuple(self.settings.get_paths("appimage.search_paths"))

    @property
    def _resource(self) -> ResourceClass:
        return ResourceClass(
            name=self.name,
            roots=self.locations(),
            match=suffix_rule(".appimage"),
            kinds=frozenset({"file"}),
            max_depth=2,
            tagger=_executable_tag,
            label=_label,
        )

    def remove(self, item: CatalogItem) -> None:
        path = self.item_path(item)
        remove_path(path, privileged=not os.access(path.parent, os.W_OK))
