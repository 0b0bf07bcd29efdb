"""Kernel version and retention plan dataclasses."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(.*)$")
_SUFFIX_SPLIT_RE = re.compile(r"[-.+~_]")


@dataclass(slots=True, frozen=True)
class KernelVersion:
    """Orderable kernel release such as ``6.8.0-45-generic``.

    The key compares major/minor/patch numerically, then each suffix
    component numerically when it is a number and lexically otherwise.
    Numeric components sort before textual ones.
    """

    raw: str
    key: tuple = field(compare=False, repr=False)

    @classmethod
    def parse(cls, raw: str) -> KernelVersion:
        raw = raw.strip()
        match = _VERSION_RE.match(raw)
        if match is None:
            raise ValueError(f"Not a kernel version: {raw!r}")
        major, minor, patch, rest = match.groups()
        suffix: list[tuple[int, int | str]] = []
        for part in _SUFFIX_SPLIT_RE.split(rest):
            if not part:
                continue
            if part.isdigit():
                suffix.append((0, int(part)))
            else:
                suffix.append((1, part))
        key = (int(major), int(minor or 0), int(patch or 0), tuple(suffix))
        return cls(raw=raw, key=key)

    def __lt__(self, other: KernelVersion) -> bool:
        return self.key < other.key

    def __le__(self, other: KernelVersion) -> bool:
        return self.key <= other.key

    def __gt__(self, other: KernelVersion) -> bool:
        return self.key > other.key

    def __ge__(self, other: KernelVersion) -> bool:
        return self.key >= other.key

    def __str__(self) -> str:
        return self.raw


@dataclass(slots=True)
class KernelEntry:
    """One installed kernel image package and its package family."""

    version: KernelVersion
    package: str
    related: tuple[str, ...] = ()
    is_running: bool = False
    size_bytes: int = 0
    error: str = ""

    @property
    def packages(self) -> tuple[str, ...]:
        return (self.package, *self.related)


@dataclass(slots=True)
class RetentionPlan:
    """Classification of installed kernels into kept and removable."""

    running: KernelEntry | None = None
    kept: list[KernelEntry] = field(default_factory=list)
    candidates: list[KernelEntry] = field(default_factory=list)
    excluded: list[KernelEntry] = field(default_factory=list)
    reason: str = ""

    @property
    def protected_packages(self) -> set[str]:
        packages: set[str] = set()
        for entry in self.kept:
            packages.update(entry.packages)
        return packages
