"""JSON-backed settings with built-in defaults."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from reclaim.utils import xdg_config_home, xdg_data_home

log = logging.getLogger(__name__)


def _defaults() -> dict[str, Any]:
    return {
        "log": {"file": str(xdg_data_home() / "reclaim" / "actions.log")},
        "space": {"path": "/"},
        "confirm": {"large_threshold_mb": 1024},
        "browser": {"warning_size_mb": 1024},
        "kernels": {"minimum_kept": 2},
        "steps": {"disabled": []},
        "cache": {"extra_paths": []},
        "appimage": {"search_paths": []},
    }


def _lookup(data: dict[str, Any], parts: list[str]) -> tuple[bool, Any]:
    node: Any = data
    for part in parts:
        if not isinstance(node, dict) or part not in node:
            return False, None
        node = node[part]
    return True, node


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Settings:
    """User preferences stored as one JSON object.

    Keys are dotted paths into that object, so ``"kernels.minimum_kept"``
    addresses ``{"kernels": {"minimum_kept": ...}}``.  Anything the file
    does not set comes from :func:`_defaults`.  Every :meth:`set` writes
    the file back immediately.
    """

    _instance: Settings | None = None

    def __init__(self, file: Path | None = None) -> None:
        self._file = file or xdg_config_home() / "reclaim" / "settings.json"
        self._values: dict[str, Any] = self._read()

    @classmethod
    def instance(cls) -> Settings:
        """Shared settings, created from the default file on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def load(cls, file: Path | None) -> Settings:
        """Read settings from *file* and make them the shared instance."""
        cls._instance = cls(file)
        return cls._instance

    @property
    def path(self) -> Path:
        return self._file

    def get(self, key: str, default: Any = None) -> Any:
        parts = key.split(".")
        for source in (self._values, _defaults()):
            found, value = _lookup(source, parts)
            if found:
                return value
        return default

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            log.warning("Setting %s=%r is not a number, using %d", key, value, default)
            return default

    def get_paths(self, key: str) -> list[Path]:
        value = self.get(key, [])
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            log.warning("Setting %s should be a list of paths", key)
            return []
        return [Path(p).expanduser() for p in value]

    def set(self, key: str, value: Any) -> None:
        *parents, leaf = key.split(".")
        node = self._values
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[leaf] = value
        self._write()

    def effective(self) -> dict[str, Any]:
        """Defaults overlaid with the values stored on disk."""
        return _merge(_defaults(), self._values)

    def _read(self) -> dict[str, Any]:
        try:
            text = self._file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            log.warning("Cannot read settings file %s: %s", self._file, exc)
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning("Settings file %s is not valid JSON (%s), using defaults", self._file, exc)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring settings file %s: top level is not an object", self._file)
            return {}
        return data

    def _write(self) -> None:
        try:
            self._file.parent.mkdir(parents=True, exist_ok=True)
            self._file.write_text(json.dumps(self._values, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as exc:
            log.warning("Cannot write settings file %s: %s", self._file, exc)


def parse_value(text: str) -> Any:
    """Decode a command-line value as JSON, falling back to the raw string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
