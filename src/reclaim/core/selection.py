"""Index-based selection parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

from reclaim.core.errors import ValidationError

_NUMBER_RE = re.compile(r"\d+")


@dataclass(slots=True, frozen=True)
class Selection:
    """Validated zero-based indices plus the raw tokens that were rejected."""

    indices: tuple[int, ...] = ()
    rejected: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.indices)


def validate_token(token: str, bound: int) -> int:
    """Map one 1-based token to a zero-based index within ``[0, bound)``."""
    if not _NUMBER_RE.fullmatch(token):
        raise ValidationError(f"{token!r} is not a number")
    number = int(token)
    if not 1 <= number <= bound:
        raise ValidationError(f"{number} is outside 1-{bound}")
    return number - 1


def parse_selection(raw: str, bound: int) -> Selection:
    """Parse comma-separated 1-based numbers such as ``"1, 3,5"``.

    Never fails as a whole: every token ends up either as a valid index
    (duplicates collapse, first occurrence wins the position) or in the
    rejected list, in input order.
    """
    indices: list[int] = []
    rejected: list[str] = []
    for part in raw.split(","):
        token = part.strip()
        try:
            index = validate_token(token, bound)
        except ValidationError:
            rejected.append(token)
            continue
        if index not in indices:
            indices.append(index)
    return Selection(indices=tuple(indices), rejected=tuple(rejected))
