"""Declarative resource scanning.

A :class:`ResourceClass` describes where candidate items live (roots),
which entries qualify (a matching rule), how to size them, and how to
tag them.  :func:`scan_resource` turns a description into a
:class:`~reclaim.models.catalog.Catalog` without touching anything.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator

from reclaim.core.errors import ScanError
from reclaim.models.catalog import Catalog, CatalogItem

log = logging.getLogger(__name__)

MatchRule = Callable[[Path], bool]
SizeCalculator = Callable[[Path], int]
Tagger = Callable[[Path], Iterable[str]]


def match_all(path: Path) -> bool:
    return True


def suffix_rule(*suffixes: str) -> MatchRule:
    """Match names ending in any of *suffixes* (case-insensitive)."""
    lowered = tuple(s.lower() for s in suffixes)

    def rule(path: Path) -> bool:
        return path.name.lower().endswith(lowered)

    return rule


@dataclass(frozen=True)
class TagRule:
    """Name pattern that attaches a tag and an optional note to an item."""

    pattern: str
    tag: str
    note: str = ""


class TagTable:
    """Ordered name-pattern -> tag rules consulted for every scanned item."""

    def __init__(self, rules: Iterable[TagRule] = ()) -> None:
        self._rules = tuple(rules)

    def lookup(self, name: str) -> tuple[frozenset[str], tuple[str, ...]]:
        tags: set[str] = set()
        notes: list[str] = []
        for rule in self._rules:
            if fnmatch.fnmatch(name, rule.pattern):
                tags.add(rule.tag)
                if rule.note:
                    notes.append(rule.note)
        return frozenset(tags), tuple(notes)

    def __len__(self) -> int:
        return len(self._rules)


@dataclass(frozen=True)
class ResourceClass:
    """Where to look and what counts as one removable item.

    ``max_depth`` is how far below a root matching may go; 1 means only
    the direct children of each root.  A matched directory is a single
    item and is never descended into.
    """

    name: str
    roots: tuple[Path, ...]
    match: MatchRule = match_all
    kinds: frozenset[str] = frozenset({"file", "dir"})
    max_depth: int = 1
    exclude: frozenset[str] = frozenset()
    tags: TagTable = field(default_factory=TagTable)
    tagger: Tagger | None = None
    size_of: SizeCalculator | None = None
    label: Callable[[Path], str] | None = None
    skip_empty: bool = True
    order: str = "path"
    limit: int | None = None


def entry_size(path: Path, kind: str) -> int:
    """Apparent size of a file, or summed file sizes of a directory tree.

    A symlink counts as the link itself and is never followed.

    Raises:
        ScanError: *path* cannot be read.
    """
    from reclaim.utils import tree_usage

    try:
        if kind == "dir" and not path.is_symlink():
            with os.scandir(path):
                pass
            return tree_usage(path)[0]
        return path.lstat().st_size
    except OSError as exc:
        raise ScanError(f"Cannot read {path}: {exc}") from exc


def _within(path: Path, roots: Iterable[Path]) -> bool:
    return any(path == root or path.is_relative_to(root) for root in roots)


def _kind_of(entry: os.DirEntry, resolved: Path) -> str | None:
    if entry.is_symlink():
        if resolved.is_dir():
            return "dir"
        return "file" if resolved.is_file() else None
    if entry.is_dir(follow_symlinks=False):
        return "dir"
    if entry.is_file(follow_symlinks=False):
        return "file"
    return None


def _walk(resource: ResourceClass, resolved_roots: list[Path]) -> Iterator[tuple[Path, str]]:
    """Yield ``(path, kind)`` for every matching entry under the roots."""
    for root in resource.roots:
        if not root.is_dir():
            log.debug("Skipping missing root: %s", root)
            continue
        stack: list[tuple[Path, int]] = [(root, 1)]
        while stack:
            current, depth = stack.pop()
            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError:
                log.debug("Cannot read: %s", current)
                continue
            for entry in entries:
                if entry.name in resource.exclude:
                    continue
                path = Path(entry.path)
                try:
                    resolved = path.resolve()
                except OSError:
                    log.debug("Cannot resolve: %s", path)
                    continue
                kind = _kind_of(entry, resolved)
                if kind is None:
                    continue
                if entry.is_symlink() and not _within(resolved, resolved_roots):
                    log.debug("Skipping symlink leaving the scanned roots: %s", path)
                    continue
                if kind in resource.kinds and resource.match(path):
                    yield path, kind
                elif kind == "dir" and depth < resource.max_depth and not entry.is_symlink():
                    stack.append((path, depth + 1))


def scan_resource(resource: ResourceClass, step_id: str | None = None) -> Catalog:
    """Enumerate and size the items described by *resource*.

    Items are identified by the path found under the roots, links
    included, and de-duplicated by resolved path.  When a link and its
    target are both found the target is kept.  Unreadable items are
    omitted and the scan carries on.
    """
    catalog = Catalog(step_id=step_id or resource.name, name=resource.name)
    resolved_roots = []
    for root in resource.roots:
        try:
            resolved_roots.append(root.resolve())
        except OSError:
            log.debug("Cannot resolve root: %s", root)

    found: dict[Path, tuple[Path, str]] = {}
    for path, kind in _walk(resource, resolved_roots):
        resolved = path.resolve()
        if resolved not in found or (found[resolved][0].is_symlink() and not path.is_symlink()):
            found[resolved] = (path, kind)

    items: list[CatalogItem] = []
    for path, kind in found.values():
        try:
            size = resource.size_of(path) if resource.size_of else entry_size(path, kind)
        except ScanError as exc:
            log.debug("%s", exc)
            continue
        if resource.skip_empty and size == 0:
            continue

        tags, notes = resource.tags.lookup(path.name)
        if resource.tagger is not None:
            tags = tags | frozenset(resource.tagger(path))
        items.append(
            CatalogItem(
                identifier=str(path),
                label=resource.label(path) if resource.label else str(path),
                size_bytes=size,
                tags=tags,
                path=path,
                notes=notes,
            )
        )

    if resource.order == "size":
        items.sort(key=lambda i: (-i.size_bytes, i.identifier))
    else:
        items.sort(key=lambda i: i.identifier)
    if resource.limit is not None:
        items = items[: resource.limit]

    for item in items:
        catalog.add(item)
    log.debug("Scanned %s: %d items, %d bytes", resource.name, len(catalog), catalog.total_bytes)
    return catalog
