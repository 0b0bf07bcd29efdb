"""Error taxonomy shared by steps, adapters and the engine."""

from __future__ import annotations


class ReclaimError(Exception):
    """Base class for every error raised by reclaim itself."""


class ScanError(ReclaimError):
    """A resource location or query could not be read.

    Always recovered locally by omitting the affected item.
    """


class ValidationError(ReclaimError):
    """A user-supplied token or value is malformed."""


class RetentionViolation(ReclaimError):
    """A removal plan would touch the running kernel or leave no fallback."""


class ExecutionFailure(ReclaimError):
    """A single removal command failed."""


class PreconditionFailure(ReclaimError):
    """A required tool is absent or a daemon is unreachable."""
