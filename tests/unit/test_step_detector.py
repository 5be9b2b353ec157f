# cpi_scrolly/tests/unit/test_step_detector.py
"""Unit tests for step detection from visibility entries."""

from __future__ import annotations

import logging
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

import pytest

from scrolly.host_page import StepRegion, stack_regions
from scrolly.step_detector import StepDetector, parse_step_index
from scrolly.visibility import IntersectionEntry, VisibilityPolicy


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", 1), ("0", 0), (" 7 ", 7), ("010", 10), ("-1", None), ("+2", None), ("abc", None), ("", None), ("1.5", None), (None, None)],
)
def test_parse_step_index(raw, expected) -> None:
    assert parse_step_index(raw) == expected


def test_handle_entries_forwards_every_visible_region_in_order(caplog) -> None:
    received: list[int] = []
    detector = StepDetector(VisibilityPolicy.crossing_band(), received.append)
    entries = [
        IntersectionEntry(StepRegion(step_attr="1"), True, 1.0),
        IntersectionEntry(StepRegion(step_attr="2"), False, 0.0),
        IntersectionEntry(StepRegion(step_attr="oops"), True, 1.0),
        IntersectionEntry(StepRegion(step_attr="1"), True, 1.0),
        IntersectionEntry(StepRegion(step_attr="3"), True, 0.4),
    ]

    with caplog.at_level(logging.ERROR):
        detector.handle_entries(entries)

    assert received == [1, 1, 3]
    assert all(isinstance(value, int) for value in received)
    assert "'oops'" in caplog.text


def test_crossing_band_activates_one_step_at_a_time() -> None:
    received: list[int] = []
    regions = stack_regions(
        [StepRegion(step_attr=str(index)) for index in range(3)],
        step_height=600.0,
        gap=200.0,
        offset=800.0,
    )
    tracker = StepDetector(VisibilityPolicy.crossing_band(), received.append).attach(regions, 800.0)

    for offset in (0.0, 300.0, 1100.0, 1900.0, 300.0):
        tracker.scroll_to(offset)

    assert received == [0, 1, 2, 0]


def test_majority_area_can_emit_several_steps_in_one_batch() -> None:
    received: list[int] = []
    regions = stack_regions([StepRegion(step_attr=str(index)) for index in range(3)], step_height=100.0)
    tracker = StepDetector(VisibilityPolicy.majority_area(), received.append).attach(regions, 800.0)

    entries = tracker.scroll_to(0.0)

    assert len(entries) == 3
    assert received == [0, 1, 2]


def test_negative_step_is_logged_not_forwarded(caplog) -> None:
    received: list[int] = []
    detector = StepDetector(VisibilityPolicy.crossing_band(), received.append)

    with caplog.at_level(logging.ERROR):
        detector.handle_entries([IntersectionEntry(StepRegion(step_attr="-1"), True, 1.0)])

    assert received == []
    assert "'-1'" in caplog.text
