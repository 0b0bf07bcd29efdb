"""pip cache adapter."""

from __future__ import annotations

import logging

from reclaim.adapters.commands import run
from reclaim.core.errors import PreconditionFailure
from reclaim.utils import has_command

log = logging.getLogger(__name__)


def purge_cache() -> bool:
    """Try ``pip3 cache purge`` then ``pip cache purge``; True if one worked."""
    for pip in ("pip3", "pip"):
        if not has_command(pip):
            continue
        try:
            proc = run([pip, "cache", "purge"])
        except PreconditionFailure:
            continue
        if proc.returncode == 0:
            return True
        log.debug("%s cache purge failed: %s", pip, proc.stderr.strip())
    return False
