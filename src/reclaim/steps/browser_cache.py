"""Step to clear web browser caches."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path

from reclaim.core.scanner import ResourceClass, scan_resource
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.step import APPLICATIONS, CleanupStep
from reclaim.utils import bytes_to_human, remove_path, xdg_cache_home

log = logging.getLogger(__name__)

# Cache directories relative to ~/.cache
CHROMIUM_FAMILY = {
    "google-chrome": "Google Chrome",
    "chromium": "Chromium",
    "BraveSoftware/Brave-Browser": "Brave",
    "vivaldi": "Vivaldi",
    "opera": "Opera",
}


def _firefox_roots() -> tuple[Path, ...]:
    return (xdg_cache_home() / "mozilla" / "firefox", Path.home() / ".mozilla" / "firefox")


def _is_firefox_cache(path: Path) -> bool:
    return path.name == "cache2" and fnmatch.fnmatch(path.parent.name, "*.default*")


class BrowserCacheStep(CleanupStep):
    """Clears the HTTP caches of Firefox profiles and Chromium-based browsers."""

    id = "browser_cache"
    name = "Browser Caches"
    description = "Clears cached web pages, scripts and media of Firefox, Chrome, Chromium, Brave, Vivaldi and Opera."
    category = "browser"
    group = APPLICATIONS
    sort_order = 60
    item_noun = "cache"
    selectable = True
    large_threshold_key = "browser.warning_size_mb"
    empty_message = "No browser caches found."

    def _firefox(self) -> ResourceClass:
        return ResourceClass(
            name="Firefox",
            roots=_firefox_roots(),
            match=_is_firefox_cache,
            kinds=frozenset({"dir"}),
            max_depth=2,
            label=lambda p: f"Firefox ({p.parent.name})",
        )

    def _chromium_family(self) -> ResourceClass:
        cache = xdg_cache_home()

        def relative(path: Path) -> str:
            return path.relative_to(cache).as_posix()

        return ResourceClass(
            name="Chromium-based browsers",
            roots=(cache,),
            match=lambda p: relative(p) in CHROMIUM_FAMILY,
            kinds=frozenset({"dir"}),
            max_depth=2,
            label=lambda p: CHROMIUM_FAMILY[relative(p)],
        )

    @property
    def unavailable_reason(self) -> str | None:
        cache = xdg_cache_home()
        if any(root.is_dir() for root in _firefox_roots()):
            return None
        if any((cache / rel).is_dir() for rel in CHROMIUM_FAMILY):
            return None
        return "No supported browser found"

    def scan(self) -> Catalog:
        catalog = Catalog(self.id, self.name, warnings=["Close all browsers before clearing their caches."])
        for resource in (self._firefox(), self._chromium_family()):
            for item in scan_resource(resource).items:
                catalog.add(item)
        return catalog

    def large_warning(self, total_bytes: int) -> str:
        return (
            f"WARNING: {bytes_to_human(total_bytes)} of browser cache selected. "
            "Pages will load slower until the caches are rebuilt."
        )

    def remove(self, item: CatalogItem) -> None:
        remove_path(self.item_path(item), keep_dir=True)
