# cpi_scrolly/scrolly/step_table.py
"""Ordered, read-only mapping from step index to chart artifact identifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple


@dataclass(frozen=True)
class StepSpecTable:
    """Step ``i`` renders ``identifiers[i]``; indices are 0-based and contiguous."""

    identifiers: Tuple[str, ...]

    @classmethod
    def from_list(cls, identifiers: Iterable[str]) -> "StepSpecTable":
        cleaned = tuple(str(item).strip() for item in identifiers)
        if any(not item for item in cleaned):
            raise ValueError("Step table entries must be non-empty artifact identifiers.")
        return cls(identifiers=cleaned)

    def lookup(self, step_index: object) -> Optional[str]:
        # bool is an int subclass; True must not resolve to step 1.
        if isinstance(step_index, bool) or not isinstance(step_index, int):
            return None
        if 0 <= step_index < len(self.identifiers):
            return self.identifiers[step_index]
        return None

    def __len__(self) -> int:
        return len(self.identifiers)

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        return iter(enumerate(self.identifiers))


__all__ = ["StepSpecTable"]
