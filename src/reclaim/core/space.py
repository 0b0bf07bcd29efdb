"""Free space accounting."""

from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime
from typing import Callable

from reclaim.models.space import DiskUsage, SpaceDelta, SpaceSample
from reclaim.utils import bytes_to_human

log = logging.getLogger(__name__)

NO_CHANGE = "No significant space change detected"


class SpaceAccountant:
    """Samples available bytes on the primary filesystem."""

    def __init__(self, path: str = "/", clock: Callable[[], datetime] = datetime.now) -> None:
        self.path = path
        self._clock = clock

    def sample(self) -> SpaceSample:
        return SpaceSample(available_bytes=shutil.disk_usage(self.path).free, taken_at=self._clock())

    @staticmethod
    def delta(before: SpaceSample, after: SpaceSample) -> SpaceDelta:
        """``after - before``; negative values are normal, never an error."""
        return SpaceDelta(after.available_bytes - before.available_bytes)

    @staticmethod
    def describe(delta: SpaceDelta) -> str:
        if delta.significant:
            return f"Space freed: {bytes_to_human(delta.bytes)}"
        return NO_CHANGE

    def usage(self, path: str | None = None) -> DiskUsage:
        path = path or self.path
        total, used, free = shutil.disk_usage(path)
        return DiskUsage(path=path, total=total, used=used, free=free)

    def mounts(self) -> list[DiskUsage]:
        """Usage of the primary filesystem, plus /home when it is separate."""
        try:
            result = [self.usage()]
        except OSError as exc:
            log.warning("Cannot read disk usage of %s: %s", self.path, exc)
            return []
        try:
            if os.stat("/home").st_dev != os.stat(self.path).st_dev:
                result.append(self.usage("/home"))
        except OSError:
            log.debug("Cannot stat /home")
        return result
