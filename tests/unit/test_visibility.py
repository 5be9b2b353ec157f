# cpi_scrolly/tests/unit/test_visibility.py
"""Unit tests for viewport intersection tracking."""

from __future__ import annotations

from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

import pytest

from scrolly.visibility import Box, VisibilityPolicy, VisibilityTracker, policy_from_config


def test_crossing_band_root_is_a_line_three_quarters_down() -> None:
    policy = VisibilityPolicy.crossing_band()
    assert policy.root_box(offset=100.0, viewport_height=800.0) == (700.0, 700.0)

    assert policy.is_intersecting(Box(top=650.0, height=100.0), 100.0, 800.0)
    assert not policy.is_intersecting(Box(top=710.0, height=100.0), 100.0, 800.0)
    assert not policy.is_intersecting(Box(top=0.0, height=100.0), 100.0, 800.0)


def test_majority_area_needs_half_the_region() -> None:
    policy = VisibilityPolicy.majority_area()
    region = Box(top=600.0, height=400.0)

    assert policy.intersection_ratio(region, 0.0, 800.0) == pytest.approx(0.5)
    assert policy.is_intersecting(region, 0.0, 800.0)
    assert not policy.is_intersecting(region, -10.0, 800.0)
    assert policy.intersection_ratio(region, -500.0, 800.0) == 0.0


def test_tracker_reports_initial_state_then_changes_only() -> None:
    batches = []
    tracker = VisibilityTracker(VisibilityPolicy.crossing_band(), 800.0, batches.append)
    tracker.observe("first", Box(top=800.0, height=600.0))
    tracker.observe("second", Box(top=1600.0, height=600.0))

    initial = tracker.scroll_to(0.0)
    assert [(entry.target, entry.is_intersecting) for entry in initial] == [("first", False), ("second", False)]

    assert tracker.scroll_to(100.0) == []

    entered = tracker.scroll_to(300.0)
    assert [(entry.target, entry.is_intersecting) for entry in entered] == [("first", True)]

    swapped = tracker.scroll_to(1100.0)
    assert [(entry.target, entry.is_intersecting) for entry in swapped] == [("first", False), ("second", True)]
    assert len(batches) == 3


def test_policy_from_config_accepts_presets_and_mappings() -> None:
    assert policy_from_config("majority_area") == VisibilityPolicy(threshold=0.5)
    assert policy_from_config(None) == VisibilityPolicy.crossing_band()
    assert policy_from_config({"threshold": 0.25, "margin_top": -0.5, "margin_bottom": -0.5}) == VisibilityPolicy(
        threshold=0.25, margin_top=-0.5, margin_bottom=-0.5
    )
    with pytest.raises(ValueError):
        policy_from_config("halfway")
    with pytest.raises(ValueError):
        VisibilityPolicy(threshold=1.5)
