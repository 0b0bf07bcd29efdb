"""Append-only, human-readable record of every decision and outcome."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

log = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_LINE_RE = re.compile(r"^\[(?P<ts>[^\]]+)\] (?P<msg>.*)$")


@dataclass(slots=True, frozen=True)
class LogRecord:
    timestamp: datetime
    message: str

    def format(self) -> str:
        return f"[{self.timestamp.strftime(TIMESTAMP_FORMAT)}] {self.message}"


class ActionLog:
    """One ``[YYYY-MM-DD HH:MM:SS] message`` line per record.

    The file is created on the first append.  Records are never rewritten;
    :meth:`clear` is the only way to drop them.
    """

    def __init__(self, path: Path, clock: Callable[[], datetime] = datetime.now) -> None:
        self.path = Path(path)
        self._clock = clock

    def append(self, message: str) -> LogRecord:
        record = LogRecord(self._clock().replace(microsecond=0), " ".join(message.splitlines()))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(record.format() + "\n")
        except OSError as e:
            log.warning("Could not write action log %s: %s", self.path, e)
        return record

    def records(self) -> list[LogRecord]:
        if not self.path.exists():
            return []
        result: list[LogRecord] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            match = _LINE_RE.match(line)
            if match is None:
                continue
            try:
                ts = datetime.strptime(match["ts"], TIMESTAMP_FORMAT)
            except ValueError:
                continue
            result.append(LogRecord(ts, match["msg"]))
        return result

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8") if self.path.exists() else ""

    def clear(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("", encoding="utf-8")

    @property
    def exists(self) -> bool:
        return self.path.exists()
