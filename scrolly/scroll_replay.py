# cpi_scrolly/scrolly/scroll_replay.py
"""Replay a reader's scroll session against the host page.

Wires the whole widget together the way the page script does on load: parse
the host page, build the step table, render step 0, subscribe the step
detector to a visibility tracker, then feed the tracker a sequence of scroll
offsets. After each offset the dispatched activations are allowed to settle,
and the page with the last rendered chart embedded in its target is written
to ``output_page``.

Useful for checking that the step markup, the step table and the generated
chart files agree before publishing.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

from .fetch import StaticFileFetcher
from .host_page import HostPage, PageSurface, stack_regions
from .step_detector import StepDetector
from .step_table import StepSpecTable
from .synchronizer import ChartSynchronizer, RenderOptions
from .visibility import VisibilityPolicy


@dataclass
class ScrollReplayConfig:
    """Host page, chart files and scroll geometry for a replay."""

    page: Path
    artifact_root: Path | str
    specs: Sequence[str]
    output_page: Path
    target_id: str = "vis"
    step_selector: str = ".step"
    policy: VisibilityPolicy = field(default_factory=VisibilityPolicy.crossing_band)
    viewport_height: float = 800.0
    step_height: float = 600.0
    step_gap: float = 200.0
    step_offset: float = 0.0
    scroll_offsets: Sequence[float] = ()
    strict: bool = False
    padding: int = 15


@dataclass
class ScrollReplayResult:
    steps_observed: int
    activations: Sequence[int]
    renders: Sequence[Tuple[int, str]]
    final_step: int
    output_page: Path


def run(config: ScrollReplayConfig) -> ScrollReplayResult:
    """Replay ``config.scroll_offsets`` and write the resulting page."""

    if not config.specs:
        raise ValueError("At least one chart spec must be listed for the step table.")
    page = HostPage.from_path(config.page, target_id=config.target_id, step_selector=config.step_selector)
    return asyncio.run(_replay(page, config))


async def _replay(page: HostPage, config: ScrollReplayConfig) -> ScrollReplayResult:
    table = StepSpecTable.from_list(config.specs)
    regions = stack_regions(
        page.step_regions(),
        step_height=config.step_height,
        gap=config.step_gap,
        offset=config.step_offset,
    )
    if len(regions) != len(table):
        logging.warning("Host page has %d step regions but the step table lists %d charts", len(regions), len(table))

    synchronizer = ChartSynchronizer(
        table=table,
        fetch=StaticFileFetcher(config.artifact_root),
        render=PageSurface(page),
        target=page.target(),
        options=RenderOptions(padding=config.padding),
        strict=config.strict,
    )
    activations: List[int] = []

    def on_step(step_index: int) -> None:
        activations.append(step_index)
        synchronizer.dispatch(step_index)

    await synchronizer.start()
    tracker = StepDetector(config.policy, on_step).attach(regions, config.viewport_height)
    for offset in config.scroll_offsets:
        tracker.scroll_to(float(offset))
        await synchronizer.drain()

    output_page = page.write(config.output_page)
    logging.info("Replayed %d scroll offsets, %d charts rendered", len(config.scroll_offsets), len(synchronizer.history))
    return ScrollReplayResult(
        steps_observed=len(regions),
        activations=tuple(activations),
        renders=tuple(synchronizer.history),
        final_step=synchronizer.current_step,
        output_page=output_page,
    )


__all__ = ["ScrollReplayConfig", "ScrollReplayResult", "run"]
