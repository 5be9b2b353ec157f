# cpi_scrolly/scrolly/visibility.py
"""Viewport-intersection tracking for step regions.

:class:`VisibilityTracker` plays the part of the browser's intersection
observer. Targets are registered with their vertical box; each call to
:meth:`VisibilityTracker.scroll_to` recomputes which targets satisfy the
:class:`VisibilityPolicy` and hands the subscribed callback one batch of
entries for the targets whose state changed, in registration order. The first
computation after a target is observed always reports it.

Geometry is one-dimensional (document y coordinates, growing downwards);
horizontal layout never affects which step is active.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Sequence


@dataclass(frozen=True)
class VisibilityPolicy:
    """When a region counts as visible.

    ``margin_top`` and ``margin_bottom`` are fractions of the viewport height
    added to the root box, so negative values shrink it the way a CSS
    ``rootMargin`` of ``-75% 0px -25% 0px`` does. ``threshold`` is the minimum
    share of the region's height that must fall inside the root box; ``0``
    means touching the root box is enough.
    """

    threshold: float = 0.0
    margin_top: float = 0.0
    margin_bottom: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError("threshold must lie between 0 and 1")
        if self.margin_top + self.margin_bottom < -1.0:
            raise ValueError("root margins collapse the viewport to a negative height")

    @classmethod
    def majority_area(cls) -> "VisibilityPolicy":
        return cls(threshold=0.5)

    @classmethod
    def crossing_band(cls, position: float = 0.75) -> "VisibilityPolicy":
        """Zero-height root line ``position`` of the way down the viewport."""
        return cls(threshold=0.0, margin_top=-position, margin_bottom=-(1.0 - position))

    def root_box(self, offset: float, viewport_height: float) -> tuple[float, float]:
        top = offset - self.margin_top * viewport_height
        bottom = offset + viewport_height + self.margin_bottom * viewport_height
        return top, bottom

    def intersection_ratio(self, box: "Box", offset: float, viewport_height: float) -> float:
        root_top, root_bottom = self.root_box(offset, viewport_height)
        overlap = min(box.bottom, root_bottom) - max(box.top, root_top)
        if overlap < 0:
            return 0.0
        if box.height <= 0:
            return 1.0
        return min(overlap / box.height, 1.0)

    def is_intersecting(self, box: "Box", offset: float, viewport_height: float) -> bool:
        root_top, root_bottom = self.root_box(offset, viewport_height)
        touching = min(box.bottom, root_bottom) >= max(box.top, root_top)
        if not touching:
            return False
        if self.threshold <= 0:
            return True
        return self.intersection_ratio(box, offset, viewport_height) >= self.threshold


POLICY_PRESETS: Mapping[str, Callable[[], VisibilityPolicy]] = {
    "majority_area": VisibilityPolicy.majority_area,
    "crossing_band": VisibilityPolicy.crossing_band,
}


@dataclass(frozen=True)
class Box:
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class IntersectionEntry:
    target: Any
    is_intersecting: bool
    intersection_ratio: float


@dataclass
class VisibilityTracker:
    """Report visibility changes of observed targets to a single callback."""

    policy: VisibilityPolicy
    viewport_height: float
    callback: Callable[[Sequence[IntersectionEntry]], Any]
    _targets: List[tuple[Any, Box]] = field(default_factory=list, init=False)
    _last_state: Dict[int, bool] = field(default_factory=dict, init=False)

    def observe(self, target: Any, box: Box) -> None:
        self._targets.append((target, box))

    def scroll_to(self, offset: float) -> List[IntersectionEntry]:
        entries: List[IntersectionEntry] = []
        for position, (target, box) in enumerate(self._targets):
            intersecting = self.policy.is_intersecting(box, offset, self.viewport_height)
            if self._last_state.get(position) == intersecting:
                continue
            self._last_state[position] = intersecting
            entries.append(
                IntersectionEntry(
                    target=target,
                    is_intersecting=intersecting,
                    intersection_ratio=self.policy.intersection_ratio(box, offset, self.viewport_height),
                )
            )
        if entries:
            self.callback(entries)
        return entries


def policy_from_config(value: Any) -> VisibilityPolicy:
    """Build a policy from a preset name or a mapping of policy fields."""
    if value is None:
        return VisibilityPolicy.crossing_band()
    if isinstance(value, str):
        try:
            return POLICY_PRESETS[value]()
        except KeyError as exc:
            raise ValueError(f"Unknown visibility policy preset: {value!r}") from exc
    if isinstance(value, Mapping):
        return VisibilityPolicy(
            threshold=float(value.get("threshold", 0.0)),
            margin_top=float(value.get("margin_top", 0.0)),
            margin_bottom=float(value.get("margin_bottom", 0.0)),
        )
    raise TypeError(f"Unsupported visibility policy: {value!r}")


__all__ = [
    "Box",
    "IntersectionEntry",
    "POLICY_PRESETS",
    "VisibilityPolicy",
    "VisibilityTracker",
    "policy_from_config",
]
