"""Filesystem and formatting helpers used across steps."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import subprocess
from pathlib import Path

log = logging.getLogger(__name__)

_UNITS = ("KB", "MB", "GB", "TB")


def has_command(name: str) -> bool:
    """Whether *name* resolves to an executable on PATH."""
    return shutil.which(name) is not None


def _xdg_dir(variable: str, *fallback: str) -> Path:
    value = os.environ.get(variable)
    return Path(value) if value else Path.home().joinpath(*fallback)


def xdg_cache_home() -> Path:
    return _xdg_dir("XDG_CACHE_HOME", ".cache")


def xdg_config_home() -> Path:
    return _xdg_dir("XDG_CONFIG_HOME", ".config")


def xdg_data_home() -> Path:
    return _xdg_dir("XDG_DATA_HOME", ".local", "share")


def remove_path(path: Path, *, privileged: bool = False, keep_dir: bool = False) -> None:
    """Delete a file or directory tree.

    With ``keep_dir`` a directory is emptied but kept in place.  Paths the
    current user cannot write are handed to ``rm``/``find`` through sudo
    when ``privileged`` is set.  Raises OSError or ExecutionFailure.
    """
    from reclaim.core.privileges import is_root

    if privileged and not is_root():
        from reclaim.adapters.commands import run

        if keep_dir:
            run(["find", str(path), "-mindepth", "1", "-delete"], privileged=True, check=True)
        else:
            run(["rm", "-rf", "--", str(path)], privileged=True, check=True)
        return

    if path.is_dir() and not path.is_symlink():
        if keep_dir:
            clear_directory(path)
        else:
            shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def clear_directory(path: Path) -> None:
    """Remove everything inside *path*, leaving the directory itself."""
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def tree_usage(path: Path | str) -> tuple[int, int]:
    """Apparent bytes and regular file count below *path*.

    GNU ``find`` does the walk when it is installed; otherwise ``os.walk``.
    Symlinks are counted as nothing and never followed.
    """
    try:
        return _usage_from_find(str(path))
    except (OSError, subprocess.SubprocessError, ValueError):
        log.debug("find unavailable for %s, walking in Python", path)
        return _usage_from_walk(path)


def _usage_from_find(root: str) -> tuple[int, int]:
    proc = subprocess.run(["find", root, "-type", "f", "-printf", "%s\n"], capture_output=True)
    sizes = [int(token) for token in proc.stdout.split()]
    return sum(sizes), len(sizes)


def _usage_from_walk(root: Path | str) -> tuple[int, int]:
    total = files = 0
    for dirpath, _dirnames, filenames in os.walk(root, onerror=lambda e: log.debug("Cannot read: %s", e.filename)):
        for name in filenames:
            try:
                st = os.lstat(os.path.join(dirpath, name))
            except OSError:
                continue
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
                files += 1
    return total, files


def bytes_to_human(size_bytes: int) -> str:
    """``1536`` -> ``"1.5 KB"``; whole bytes below 1 KB, one decimal above."""
    if size_bytes < 0:
        return "-" + bytes_to_human(-size_bytes)
    if size_bytes < 1024:
        return f"{size_bytes} B"
    value = size_bytes / 1024
    for unit in _UNITS[:-1]:
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} {_UNITS[-1]}"


def plural(count: int, noun: str) -> str:
    """``plural(2, "kernel")`` -> ``"2 kernels"``."""
    return f"{count} {noun}{'' if count == 1 else 's'}"
