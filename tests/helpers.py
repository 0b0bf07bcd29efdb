"""Fakes shared by the test modules."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from reclaim.core.space import SpaceAccountant
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.space import DiskUsage, SpaceSample
from reclaim.models.step import CleanupStep
from reclaim.terminal import Terminal

MB = 1024 * 1024
GB = 1024 * MB


class ScriptedTerminal(Terminal):
    """Terminal that answers prompts from a script and records output."""

    def __init__(self, answers: list[str] | tuple[str, ...] = ()) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []
        self.lines: list[str] = []

    def echo(self, text: str = "", *, fg: str | None = None, bold: bool = False) -> None:
        self.lines.append(text)

    def ask(self, prompt: str, default: str = "") -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {prompt}")
        return self.answers.pop(0)

    def pager(self, text: str) -> None:
        self.lines.append(text)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


class SteppedAccountant(SpaceAccountant):
    """Returns pre-set available byte counts, repeating the last one."""

    def __init__(self, samples: list[int] | None = None) -> None:
        super().__init__("/")
        self.samples = list(samples or [10 * GB])

    def sample(self) -> SpaceSample:
        value = self.samples.pop(0) if len(self.samples) > 1 else self.samples[0]
        return SpaceSample(available_bytes=value, taken_at=datetime(2024, 1, 1))

    def mounts(self) -> list[DiskUsage]:
        return [DiskUsage("/", total=100 * GB, used=40 * GB, free=60 * GB)]


def make_items(*specs: tuple[str, int], tags: dict[str, set[str]] | None = None) -> list[CatalogItem]:
    tags = tags or {}
    return [
        CatalogItem(identifier=name, label=name, size_bytes=size, tags=frozenset(tags.get(name, ())), path=Path(name))
        for name, size in specs
    ]


class FakeStep(CleanupStep):
    """Step that serves a fixed catalog and records removals."""

    description = "A fake step for testing"
    category = "user"

    def __init__(
        self,
        step_id: str = "fake",
        items: list[CatalogItem] | None = None,
        *,
        available: bool = True,
        fail_on: tuple[str, ...] = (),
        scan_error: Exception | None = None,
        selectable: bool = False,
        advanced: bool = False,
        preamble: str | None = None,
        requires_root: bool = False,
        sort_order: int = 50,
        large_threshold_key: str | None = None,
    ) -> None:
        self._id = step_id
        self._items = items if items is not None else make_items(("a.bin", 100), ("b.bin", 200))
        self._available = available
        self._fail_on = fail_on
        self._scan_error = scan_error
        self.selectable = selectable
        self.advanced = advanced
        self.preamble = preamble
        self.requires_root = requires_root
        self.sort_order = sort_order
        self.large_threshold_key = large_threshold_key
        self.removed: list[str] = []
        self.after_batch_calls = 0

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return f"Fake Step ({self._id})"

    @property
    def unavailable_reason(self) -> str | None:
        return None if self._available else "not available in tests"

    def scan(self) -> Catalog:
        if self._scan_error is not None:
            raise self._scan_error
        catalog = Catalog(self.id, self.name)
        for item in self._items:
            catalog.add(item)
        return catalog

    def remove(self, item: CatalogItem) -> None:
        if item.identifier in self._fail_on:
            raise OSError(f"Permission denied: {item.identifier}")
        self.removed.append(item.identifier)

    def after_batch(self, result, engine) -> None:
        self.after_batch_calls += 1
