"""Step to clear the largest per-application cache directories."""

from __future__ import annotations

import logging

from reclaim.core.scanner import ResourceClass, TagRule, TagTable
from reclaim.models.catalog import CatalogItem
from reclaim.models.step import USER, ResourceScanStep
from reclaim.utils import remove_path, xdg_cache_home

log = logging.getLogger(__name__)

CACHE_DIR_TAGS = TagTable(
    [
        TagRule("fontconfig", "critical", "CRITICAL: font cache, text may render incorrectly until rebuilt"),
        TagRule("mesa_shader_cache*", "critical", "CRITICAL: GPU shader cache, games and 3D apps recompile shaders"),
        TagRule("nvidia", "critical", "CRITICAL: NVIDIA driver cache, GPU applications may misbehave"),
        TagRule("gstreamer-*", "caution", "Caution: GStreamer registry, rebuilt automatically on next use"),
        TagRule("pip", "safe", "Safe: pip download cache"),
    ]
)

TOP_COUNT = 10


class CacheDirsStep(ResourceScanStep):
    """Offers the ten largest folders under ~/.cache for clearing."""

    id = "cache_dirs"
    name = "Application Caches"
    description = "Lists the largest folders in ~/.cache and clears the ones you pick. Applications rebuild them."
    category = "user"
    group = USER
    risk_level = "moderate"
    sort_order = 32
    item_noun = "folder"
    selectable = True
    large_threshold_key = "confirm.large_threshold_mb"
    empty_message = "No cache folders found."

    @property
    def _resource(self) -> ResourceClass:
        return ResourceClass(
            name=self.name,
            roots=(xdg_cache_home(), *self.settings.get_paths("cache.extra_paths")),
            kinds=frozenset({"dir"}),
            exclude=frozenset({"thumbnails"}),
            tags=CACHE_DIR_TAGS,
            order="size",
            limit=TOP_COUNT,
            label=lambda p: p.name if p.parent == xdg_cache_home() else str(p),
        )

    def remove(self, item: CatalogItem) -> None:
        remove_path(self.item_path(item), keep_dir=True)
