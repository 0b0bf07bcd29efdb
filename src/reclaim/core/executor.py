"""Per-item removal with partial-failure accounting."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from reclaim.models.catalog import CatalogItem
from reclaim.models.outcome import ActionOutcome, BatchResult

log = logging.getLogger(__name__)

Remover = Callable[[CatalogItem], None]
OutcomeCallback = Callable[[CatalogItem, ActionOutcome], None]


def execute_batch(
    items: Iterable[CatalogItem],
    remover: Remover,
    on_outcome: OutcomeCallback | None = None,
) -> BatchResult:
    """Run *remover* on every item, never stopping at the first failure.

    Any exception raised for one item becomes a failed outcome for that
    item; the remaining items are still attempted.  Bytes reclaimed are
    summed from the pre-removal sizes of the items whose removal succeeded.
    """
    result = BatchResult()
    for item in items:
        try:
            remover(item)
        except Exception as exc:
            log.debug("Removal of %s failed", item.identifier, exc_info=True)
            outcome = ActionOutcome(item.identifier, success=False, error=str(exc) or exc.__class__.__name__)
        else:
            outcome = ActionOutcome(item.identifier, success=True)
            result.bytes_reclaimed += item.size_bytes
        result.outcomes.append(outcome)
        if on_outcome:
            on_outcome(item, outcome)
    return result
