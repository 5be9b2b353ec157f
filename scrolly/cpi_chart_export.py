# cpi_scrolly/scrolly/cpi_chart_export.py
"""Offline step - turn the wide CPI inflation CSV into chart state specs.

The input is the statistics office export with one row per indicator
(``Description``) and one column per month headed ``m/yy`` or ``m/yyyy``,
holding year-on-year inflation as percentage strings such as ``"5.4%"``. The
step melts it to long form, converts percentages to fractions, drops cells
whose month or value cannot be parsed, and writes one layered Vega-Lite file
per configured chart state.

Each chart state highlights a handful of indicators in their own colors and
greys out the rest, so the scrolly page can walk the reader from headline
inflation to individual food categories while the axes stay fixed.

Typical usage
-------------
```python
from pathlib import Path
from scrolly.cpi_chart_export import ChartStateConfig, CpiChartExportConfig, run

config = CpiChartExportConfig(
    input_csv=Path("data/newCPIdata.csv"),
    output_dir=Path("web"),
    charts=[ChartStateConfig(output="chart_state_1.json")],
)
run(config)
```

Outputs
-------
- ``<output_dir>/<chart.output>`` for every chart state.
- Optional Parquet file with the tidy long-form table (``tidy_output``).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .chart_spec import color_scale, label_layer, latest_point_layer, layered_spec, line_layer

DEFAULT_HIGHLIGHT: Mapping[str, str] = {"All Items": "#006400", "Food": "#990091"}

_NUMERIC_MONTH_RE = re.compile(r"(\d{1,2})\s*[/\-.]\s*(\d{2}|\d{4})")
_NAMED_MONTH_FORMATS = ("%b-%y", "%b %y", "%b-%Y", "%b %Y", "%B %Y", "%B-%Y")


@dataclass
class ChartStateConfig:
    """One chart state of the scrolly page."""

    output: str
    title: str = "Monthly CPI Inflation Timeline"
    highlight: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_HIGHLIGHT))
    points: bool = False
    y_title: str = "Year-on-Year Inflation"


@dataclass
class CpiChartExportConfig:
    """Configuration for the CPI chart export step."""

    input_csv: Path
    output_dir: Path
    charts: Sequence[ChartStateConfig]
    end_date: str = "2025-11-01"
    tidy_output: Path | None = None
    description_column: str = "Description"
    description: str = "South Africa Monthly CPI Inflation"
    background: str = "white"


@dataclass
class CpiChartExportResult:
    """Summary of the export."""

    indicators: int
    input_cells: int
    retained_rows: int
    dropped_rows: int
    chart_paths: Sequence[Path]
    tidy_path: Path | None = None


def run(config: CpiChartExportConfig) -> CpiChartExportResult:
    """Write every configured chart state from one CPI CSV."""

    if not config.input_csv.exists():
        raise FileNotFoundError(f"CPI CSV not found: {config.input_csv}")
    if not config.charts:
        raise ValueError("At least one chart state must be configured.")

    frame, input_cells = load_long_frame(config.input_csv, description_column=config.description_column)
    if frame.empty:
        raise ValueError(f"No cells with a parseable month and value in {config.input_csv}")

    rows = frame_to_rows(frame)
    indicators = list(dict.fromkeys(frame["Description"]))
    date_domain = (min(frame["Date"]), config.end_date)
    logging.info(
        "Loaded %d indicators, %d/%d cells retained from %s",
        len(indicators),
        len(frame),
        input_cells,
        config.input_csv,
    )

    config.output_dir.mkdir(parents=True, exist_ok=True)
    chart_paths: List[Path] = []
    for chart in config.charts:
        spec = build_chart_spec(
            rows,
            indicators,
            chart,
            date_domain=date_domain,
            description=config.description,
            background=config.background,
        )
        path = config.output_dir / chart.output
        _write_spec_json(spec, path)
        logging.info("Wrote %s (%d layers)", path, len(spec["layer"]))
        chart_paths.append(path)

    tidy_path: Optional[Path] = None
    if config.tidy_output is not None:
        config.tidy_output.parent.mkdir(parents=True, exist_ok=True)
        _write_tidy_parquet(frame, config.tidy_output)
        tidy_path = config.tidy_output

    return CpiChartExportResult(
        indicators=len(indicators),
        input_cells=input_cells,
        retained_rows=len(frame),
        dropped_rows=input_cells - len(frame),
        chart_paths=tuple(chart_paths),
        tidy_path=tidy_path,
    )


def load_long_frame(path: Path, *, description_column: str = "Description") -> Tuple[pd.DataFrame, int]:
    """Return the tidy ``Description``/``Date``/``Value`` frame and the raw cell count."""
    raw = pd.read_csv(path, dtype=str)
    if description_column not in raw.columns:
        raise ValueError(f"Input CSV must include a {description_column!r} column.")

    long = raw.melt(
        id_vars=[description_column],
        var_name="Date_str",
        value_name="Value_str",
        ignore_index=False,
    )
    # Keep indicator-major order: every month of the first indicator, then the next.
    long = long.sort_index(kind="stable").reset_index(drop=True)
    input_cells = len(long)

    values = long["Value_str"].str.replace("%", "", regex=False).str.strip()
    long["Value"] = pd.to_numeric(values, errors="coerce") / 100
    long["Date"] = long["Date_str"].map(parse_month_header)
    long = long.dropna(subset=["Value", "Date"])

    tidy = pd.DataFrame(
        {
            "Description": long[description_column].astype(str).str.strip(),
            "Date": [value.strftime("%Y-%m-%d") for value in long["Date"]],
            "Value": long["Value"].astype(float),
        }
    )
    return tidy.reset_index(drop=True), input_cells


def parse_month_header(text: Any) -> Optional[date]:
    """Parse a ``m/y`` column header to the first day of that month."""
    if not isinstance(text, str):
        return None
    text = text.strip()
    match = _NUMERIC_MONTH_RE.fullmatch(text)
    if match:
        month = int(match.group(1))
        year = int(match.group(2))
        if len(match.group(2)) == 2:
            year += 2000 if year < 69 else 1900
        if not 1 <= month <= 12:
            return None
        return date(year, month, 1)
    for fmt in _NAMED_MONTH_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().replace(day=1)
        except ValueError:
            continue
    return None


def frame_to_rows(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    return [
        {"Description": str(description), "Date": str(day), "Value": float(value)}
        for description, day, value in zip(frame["Description"], frame["Date"], frame["Value"])
    ]


def build_chart_spec(
    rows: Sequence[Mapping[str, Any]],
    indicators: Sequence[str],
    chart: ChartStateConfig,
    *,
    date_domain: Sequence[str],
    description: str,
    background: str = "white",
) -> Dict[str, Any]:
    highlighted = [name for name in chart.highlight if name in indicators]
    missing = [name for name in chart.highlight if name not in indicators]
    if missing:
        logging.warning("Highlighted indicators not in data for %s: %s", chart.output, ", ".join(missing))

    scale = color_scale(indicators, {name: chart.highlight[name] for name in highlighted})
    layers = [line_layer(rows, scale=scale, date_domain=date_domain, y_title=chart.y_title)]
    if highlighted and chart.points:
        layers.append(latest_point_layer(rows, scale=scale, highlighted=highlighted))
    if highlighted:
        layers.append(label_layer(rows, scale=scale, highlighted=highlighted))
    return layered_spec(layers, title=chart.title, description=description, background=background)


def _write_spec_json(spec: Mapping[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(spec, handle, ensure_ascii=False, indent=2)
        handle.write("\n")


def _write_tidy_parquet(frame: pd.DataFrame, path: Path) -> None:
    frame.to_parquet(path, index=False)


__all__ = [
    "ChartStateConfig",
    "CpiChartExportConfig",
    "CpiChartExportResult",
    "build_chart_spec",
    "load_long_frame",
    "parse_month_header",
    "run",
]
