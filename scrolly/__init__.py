# cpi_scrolly/scrolly/__init__.py
"""Expose step modules for the CPI scrolly widget and its chart export."""

from . import (
    chart_spec,
    cpi_chart_export,
    errors,
    fetch,
    host_page,
    run_step,
    scroll_replay,
    step_detector,
    step_table,
    synchronizer,
    visibility,
)

__all__ = [
    "chart_spec",
    "cpi_chart_export",
    "errors",
    "fetch",
    "host_page",
    "run_step",
    "scroll_replay",
    "step_detector",
    "step_table",
    "synchronizer",
    "visibility",
]
