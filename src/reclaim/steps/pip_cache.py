"""Step to purge the pip download cache."""

from __future__ import annotations

import logging
from pathlib import Path

from reclaim.adapters import pip
from reclaim.core.scanner import entry_size
from reclaim.core.errors import ScanError
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.step import USER, CleanupStep
from reclaim.utils import remove_path, xdg_cache_home

log = logging.getLogger(__name__)


class PipCacheStep(CleanupStep):
    """Purges ~/.cache/pip, via pip itself when possible."""

    id = "pip_cache"
    name = "pip Cache"
    description = "Purges downloaded wheels and HTTP responses cached by pip."
    category = "development"
    group = USER
    sort_order = 33
    item_noun = "cache"
    empty_message = "The pip cache is empty."

    def _cache_dir(self) -> Path:
        return xdg_cache_home() / "pip"

    @property
    def unavailable_reason(self) -> str | None:
        if not self._cache_dir().is_dir():
            return "pip cache directory not found"
        return None

    def scan(self) -> Catalog:
        catalog = Catalog(self.id, self.name)
        path = self._cache_dir()
        try:
            size = entry_size(path, "dir")
        except ScanError as exc:
            log.debug("%s", exc)
            return catalog
        if size > 0:
            catalog.add(CatalogItem(identifier=str(path), label=str(path), size_bytes=size, path=path))
        return catalog

    def remove(self, item: CatalogItem) -> None:
        if pip.purge_cache():
            return
        log.info("pip cache purge unavailable, clearing %s manually", item.identifier)
        remove_path(self.item_path(item), keep_dir=True)
