# cpi_scrolly/scrolly/host_page.py
"""Host page access: step regions, the render target, and chart embedding.

The host page is plain HTML parsed with BeautifulSoup. Step regions are the
elements matching ``step_selector`` (``.step`` by default) and carry their
index in ``data-step``; the render target is the element with ``target_id``.
:class:`PageSurface` is the rendering surface used outside tests: it replaces
the target's contents with the chart specification and its embed options so
the bootstrap script of the written page can hand it to ``vegaEmbed``.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from bs4 import BeautifulSoup

from .errors import RenderFailure
from .visibility import Box

CHART_SCRIPT_TYPE = "application/vnd.vegalite+json"


@dataclass(frozen=True)
class StepRegion:
    """A marked step region with its raw ``data-step`` value and layout box."""

    step_attr: Optional[str]
    text: str = ""
    box: Box = field(default_factory=lambda: Box(top=0.0, height=0.0))


class HostPage:
    def __init__(self, html: str, *, target_id: str = "vis", step_selector: str = ".step"):
        self.soup = BeautifulSoup(html, "html.parser")
        self.target_id = target_id
        self.step_selector = step_selector

    @classmethod
    def from_path(cls, path: Path, **kwargs: Any) -> "HostPage":
        if not path.exists():
            raise FileNotFoundError(f"Host page not found: {path}")
        return cls(path.read_text(encoding="utf-8"), **kwargs)

    def target(self):
        element = self.soup.find(id=self.target_id)
        if element is None:
            raise ValueError(f"Host page has no render target with id {self.target_id!r}.")
        return element

    def step_regions(self) -> List[StepRegion]:
        regions: List[StepRegion] = []
        for element in self.soup.select(self.step_selector):
            regions.append(
                StepRegion(step_attr=element.get("data-step"), text=element.get_text(" ", strip=True))
            )
        return regions

    def to_html(self) -> str:
        return str(self.soup)

    def write(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_html(), encoding="utf-8")
        return path


def stack_regions(
    regions: Iterable[StepRegion],
    *,
    step_height: float,
    gap: float = 0.0,
    offset: float = 0.0,
) -> List[StepRegion]:
    """Lay regions out top to bottom, each ``step_height`` tall and ``gap`` apart."""
    if step_height < 0 or gap < 0:
        raise ValueError("step_height and gap must be non-negative")
    laid_out: List[StepRegion] = []
    top = offset
    for region in regions:
        laid_out.append(replace(region, box=Box(top=top, height=step_height)))
        top += step_height + gap
    return laid_out


class PageSurface:
    """Render chart specifications by embedding them into the page's target."""

    def __init__(self, page: HostPage):
        self.page = page
        self.rendered: List[Mapping[str, Any]] = []

    async def __call__(self, target, spec: Mapping[str, Any], options: Mapping[str, Any]) -> None:
        if not isinstance(spec, Mapping):
            raise RenderFailure(f"Chart specification must be an object, got {type(spec).__name__}.")
        if "layer" not in spec and "mark" not in spec:
            raise RenderFailure("Chart specification has neither 'mark' nor 'layer'.")
        # Rendering is asynchronous in the browser as well.
        await asyncio.sleep(0)
        target.clear()
        script = self.page.soup.new_tag(
            "script",
            attrs={"type": CHART_SCRIPT_TYPE, "data-embed-options": json.dumps(dict(options))},
        )
        script.string = json.dumps(spec, ensure_ascii=False)
        target.append(script)
        self.rendered.append(spec)


__all__ = ["CHART_SCRIPT_TYPE", "HostPage", "PageSurface", "StepRegion", "stack_regions"]
