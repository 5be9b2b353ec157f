# cpi_scrolly/scrolly/step_detector.py
"""Turn visibility entries for step regions into step indices.

The detector keeps no state of its own: it subscribes
:meth:`StepDetector.handle_entries` to a :class:`VisibilityTracker` and
forwards the declared index of every region that becomes visible, in document
order, to a single ``on_step`` callback. Repeated indices are forwarded as-is;
suppressing them is the synchroniser's job.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from .visibility import IntersectionEntry, VisibilityPolicy, VisibilityTracker

_STEP_INDEX_RE = re.compile(r"\d+")


def parse_step_index(raw: Any) -> Optional[int]:
    """Parse a ``data-step`` value as a base-10 integer, ``None`` if malformed."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not _STEP_INDEX_RE.fullmatch(text):
        return None
    return int(text, 10)


@dataclass
class StepDetector:
    policy: VisibilityPolicy
    on_step: Callable[[int], Any]

    def attach(self, regions: Iterable[Any], viewport_height: float) -> VisibilityTracker:
        """Observe ``regions`` (objects exposing ``box`` and ``step_attr``)."""
        tracker = VisibilityTracker(self.policy, viewport_height, self.handle_entries)
        for region in regions:
            tracker.observe(region, region.box)
        return tracker

    def handle_entries(self, entries: Sequence[IntersectionEntry]) -> None:
        for entry in entries:
            if not entry.is_intersecting:
                continue
            raw = getattr(entry.target, "step_attr", None)
            step_index = parse_step_index(raw)
            if step_index is None:
                logging.error("No chart spec found for step: %r", raw)
                continue
            self.on_step(step_index)


__all__ = ["StepDetector", "parse_step_index"]
