"""Reclaim data models."""

from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.kernel import KernelEntry, KernelVersion, RetentionPlan
from reclaim.models.outcome import ActionOutcome, BatchResult, StepReport
from reclaim.models.space import DiskUsage, SpaceDelta, SpaceSample
from reclaim.models.step import CleanupStep, PackageStep, ResourceScanStep, StepGroup

__all__ = [
    "ActionOutcome",
    "BatchResult",
    "Catalog",
    "CatalogItem",
    "CleanupStep",
    "DiskUsage",
    "KernelEntry",
    "KernelVersion",
    "PackageStep",
    "ResourceScanStep",
    "RetentionPlan",
    "SpaceDelta",
    "SpaceSample",
    "StepGroup",
    "StepReport",
]
