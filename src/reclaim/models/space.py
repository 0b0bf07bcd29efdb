"""Free space sampling dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class SpaceSample:
    """Available bytes on a filesystem at one point in time."""

    available_bytes: int
    taken_at: datetime


@dataclass(slots=True, frozen=True)
class SpaceDelta:
    """Difference ``after - before`` between two samples. May be negative."""

    bytes: int

    @property
    def significant(self) -> bool:
        return self.bytes > 0


@dataclass(slots=True, frozen=True)
class DiskUsage:
    """Usage figures for one mounted filesystem."""

    path: str
    total: int
    used: int
    free: int

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.used * 100 / self.total)
