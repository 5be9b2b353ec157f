# cpi_scrolly/scrolly/synchronizer.py
"""Swap the rendered chart whenever the active scroll step changes.

:class:`ChartSynchronizer` owns the only mutable state of the widget: the
index of the step whose chart was most recently claimed. Each accepted step
change follows the same sequence:

1. ignore the request if the index equals ``current_step``;
2. claim the index immediately, before any awaiting;
3. resolve the artifact identifier through the :class:`StepSpecTable`;
4. fetch the artifact and reject non-success statuses;
5. decode the body as JSON;
6. hand the document to the rendering surface with fixed options.

Failures in steps 3-6 are logged and swallowed at the top of
:meth:`ChartSynchronizer.activate`; the previous chart simply stays in place.

Ordering
--------
Activations for different indices may complete out of order: if step 0 is
still fetching when step 1 finishes rendering, step 0's chart lands last. With
``strict=True`` every claim gets a generation number and a completion whose
generation is no longer current is discarded before rendering.

Example
-------
```python
table = StepSpecTable.from_list(["chart_a.json", "chart_b.json"])
sync = ChartSynchronizer(table, StaticFileFetcher("web"), PageSurface(page), page.target())
asyncio.run(sync.start())
```
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set, Tuple

from .errors import ChartSyncError, DecodeFailure, MissingArtifactMapping, TransportFailure
from .fetch import FetchResponse
from .step_table import StepSpecTable

NO_STEP = -1

Fetcher = Callable[[str], Awaitable[FetchResponse]]
Renderer = Callable[[Any, Mapping[str, Any], Mapping[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class RenderOptions:
    """Display options passed with every render call."""

    actions: bool = False
    padding: int = 15

    def as_dict(self) -> Dict[str, Any]:
        return {"actions": self.actions, "padding": self.padding}


@dataclass
class SyncState:
    current_step: int = NO_STEP
    generation: int = 0


@dataclass
class ChartSynchronizer:
    """Map step indices to chart artifacts and render them on one target."""

    table: StepSpecTable
    fetch: Fetcher
    render: Renderer
    target: Any
    options: RenderOptions = field(default_factory=RenderOptions)
    strict: bool = False
    state: SyncState = field(default_factory=SyncState)
    history: List[Tuple[int, str]] = field(default_factory=list, init=False)
    _pending: Set["asyncio.Task[None]"] = field(default_factory=set, init=False, repr=False)

    @property
    def current_step(self) -> int:
        return self.state.current_step

    async def start(self) -> None:
        """Populate the initial view with step 0."""
        await self.activate(0)

    async def activate(self, step_index: int) -> None:
        generation = self._claim(step_index)
        if generation is None:
            return
        await self._update(step_index, generation)

    def dispatch(self, step_index: int) -> Optional["asyncio.Task[None]"]:
        """Claim ``step_index`` now and schedule the fetch/render on the running loop.

        Used by synchronous callers such as the step detector, which must not
        wait for the chart before handling the next entry.
        """
        loop = asyncio.get_running_loop()
        generation = self._claim(step_index)
        if generation is None:
            return None
        task = loop.create_task(self._update(step_index, generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every dispatched activation to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _claim(self, step_index: int) -> Optional[int]:
        if step_index == self.state.current_step:
            return None
        self.state.current_step = step_index
        self.state.generation += 1
        return self.state.generation

    async def _update(self, step_index: int, generation: int) -> None:
        identifier: Optional[str] = None
        try:
            identifier = self.table.lookup(step_index)
            if identifier is None:
                raise MissingArtifactMapping(
                    f"No chart spec found for step: {step_index}",
                    step_index=step_index,
                )
            spec = await self._retrieve(step_index, identifier)
            if self.strict and generation != self.state.generation:
                logging.debug(
                    "Discarding stale chart %s for step %s (current step %s)",
                    identifier,
                    step_index,
                    self.state.current_step,
                )
                return
            await self.render(self.target, spec, self.options.as_dict())
            self.history.append((step_index, identifier))
            logging.info("Rendered %s for step %s", identifier, step_index)
        except ChartSyncError as exc:
            logging.error("Error updating chart for step %s (%s): %s", step_index, identifier, exc)
        except Exception:
            logging.exception("Error updating chart for step %s (%s)", step_index, identifier)

    async def _retrieve(self, step_index: int, identifier: str) -> Mapping[str, Any]:
        response = await self.fetch(identifier)
        if not response.ok:
            raise TransportFailure(
                f"HTTP error! status: {response.status} for file {identifier}",
                status=response.status,
                step_index=step_index,
                identifier=identifier,
            )
        try:
            return json.loads(response.body)
        except ValueError as exc:
            raise DecodeFailure(
                f"Invalid JSON in {identifier}: {exc}",
                step_index=step_index,
                identifier=identifier,
            ) from exc


__all__ = [
    "ChartSynchronizer",
    "Fetcher",
    "NO_STEP",
    "RenderOptions",
    "Renderer",
    "SyncState",
]
