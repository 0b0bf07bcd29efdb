"""Catalog dataclasses produced by step scans."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True, frozen=True)
class CatalogItem:
    """Single removable item discovered by a scan.

    ``identifier`` is a path or a package name and is unique within its
    catalog.  ``members`` lists related identifiers that are removed
    together with the item (e.g. every package of one kernel version).
    """

    identifier: str
    label: str
    size_bytes: int = 0
    tags: frozenset[str] = frozenset()
    removable: bool = True
    path: Path | None = None
    members: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"Negative size for {self.identifier!r}: {self.size_bytes}")

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


@dataclass(slots=True)
class Catalog:
    """Ordered, sized set of removable items for one cleanup step."""

    step_id: str
    name: str
    items: list[CatalogItem] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add(self, item: CatalogItem) -> bool:
        """Append *item* unless its identifier is already present."""
        if any(existing.identifier == item.identifier for existing in self.items):
            return False
        self.items.append(item)
        return True

    @property
    def total_bytes(self) -> int:
        return sum(item.size_bytes for item in self.items)

    @property
    def removable_items(self) -> list[CatalogItem]:
        return [item for item in self.items if item.removable]

    def pick(self, indices: tuple[int, ...] | list[int]) -> list[CatalogItem]:
        """Return the items at the given zero-based indices, in order."""
        return [self.items[i] for i in indices]

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> CatalogItem:
        return self.items[index]

    def __bool__(self) -> bool:
        return bool(self.items)
