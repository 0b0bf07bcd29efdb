"""Yes/no confirmation gates that guard every mutating action."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reclaim.terminal import Terminal

log = logging.getLogger(__name__)

_AFFIRMATIVE = frozenset({"y", "yes"})


class GateState(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def is_affirmative(response: str | None) -> bool:
    return response is not None and response.strip().lower() in _AFFIRMATIVE


class ConfirmationGate:
    """Single yes/no decision point.

    Starts PENDING and moves exactly once to APPROVED or REJECTED.
    Anything other than y/yes, including an empty line, rejects.
    """

    def __init__(self, question: str, warning: str | None = None) -> None:
        self.question = question
        self.warning = warning
        self.state = GateState.PENDING

    @property
    def approved(self) -> bool:
        return self.state is GateState.APPROVED

    def answer(self, response: str | None) -> GateState:
        if self.state is not GateState.PENDING:
            raise RuntimeError(f"Gate already {self.state.value}")
        self.state = GateState.APPROVED if is_affirmative(response) else GateState.REJECTED
        log.debug("Gate %r -> %s", self.question, self.state.value)
        return self.state

    def ask(self, terminal: Terminal) -> bool:
        if self.warning:
            terminal.warning(self.warning)
        return self.answer(terminal.ask(f"{self.question} [y/N]")) is GateState.APPROVED


class TwoTierGate:
    """One gate, plus a second amplified gate for large batches.

    The second gate is only asked when ``total_bytes`` exceeds
    ``threshold_bytes`` and the first gate approved.
    """

    def __init__(
        self,
        question: str,
        total_bytes: int,
        threshold_bytes: int | None,
        amplified_warning: str,
    ) -> None:
        self.first = ConfirmationGate(question)
        self.second = ConfirmationGate("Are you absolutely sure?", warning=amplified_warning)
        self.total_bytes = total_bytes
        self.threshold_bytes = threshold_bytes

    @property
    def requires_second(self) -> bool:
        return self.threshold_bytes is not None and self.total_bytes > self.threshold_bytes

    @property
    def approved(self) -> bool:
        if not self.first.approved:
            return False
        return self.second.approved if self.requires_second else True

    @property
    def rejected_tier(self) -> int | None:
        """1 or 2 for the gate that rejected, None when nothing rejected."""
        if self.first.state is GateState.REJECTED:
            return 1
        if self.second.state is GateState.REJECTED:
            return 2
        return None

    def ask(self, terminal: Terminal) -> bool:
        if not self.first.ask(terminal):
            return False
        if self.requires_second:
            return self.second.ask(terminal)
        return True
