# cpi_scrolly/scrolly/run_step.py
"""Command-line front-end for the CPI scrolly build steps.

Reads a YAML configuration (see ``configs/default.yaml``) and wires the typed
config objects defined in ``scrolly/`` to their corresponding ``run``
functions. Typical invocation:

``python -m scrolly.run_step --config configs/default.yaml chart_export``.

Use ``--dry-run`` to inspect resolved configuration without executing a step
and ``--json`` to receive machine-readable output for orchestration tooling.

Supported steps map directly to the ``steps`` stanza in the YAML config, and
any dataclass returned by a step is serialised to JSON when ``--json`` is
supplied.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml

try:  # Support both package-style (`python -m`) and script-style invocation.
    from .cpi_chart_export import ChartStateConfig, CpiChartExportConfig, run as run_chart_export
    from .scroll_replay import ScrollReplayConfig, run as run_scroll_replay
    from .visibility import policy_from_config
except ImportError:  # pragma: no cover - executed only when run as a stand-alone script.
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
    from scrolly.cpi_chart_export import ChartStateConfig, CpiChartExportConfig, run as run_chart_export
    from scrolly.scroll_replay import ScrollReplayConfig, run as run_scroll_replay
    from scrolly.visibility import policy_from_config


STEPS = ("chart_export", "scroll_replay")


def main(argv: list[str] | None = None) -> int:
    """Entry point for invoking individual build steps."""
    default_config_path = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"

    parser = argparse.ArgumentParser(description="Run CPI scrolly build steps.")
    parser.add_argument(
        "--config",
        type=Path,
        default=default_config_path,
        help="Path to YAML configuration file.",
    )
    parser.add_argument("step", choices=STEPS, help="Step to execute.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve configuration and exit without running the step.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit results (or dry-run config) as JSON for downstream tooling.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(message)s")

    config_path = args.config.expanduser().resolve()
    config_data = _load_config(config_path)
    steps_cfg = config_data.get("steps", {})
    step_cfg = steps_cfg.get(args.step)
    if step_cfg is None:
        raise KeyError(f"Step '{args.step}' not found in configuration.")

    base_dir = config_path.parent

    if args.step == "chart_export":
        step_config = _parse_chart_export_config(step_cfg, base_dir)
        if args.dry_run:
            _emit_config("chart_export", step_config, args.json)
            return 0
        result = run_chart_export(step_config)
    elif args.step == "scroll_replay":
        step_config = _parse_scroll_replay_config(step_cfg, base_dir)
        if args.dry_run:
            _emit_config("scroll_replay", step_config, args.json)
            return 0
        result = run_scroll_replay(step_config)
    else:
        raise RuntimeError(f"Unsupported step: {args.step}")

    _emit_result(args.step, result, args.json)
    return 0


def _load_config(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _resolve_path(base_dir: Path, value: str) -> Path:
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = (base_dir / candidate).resolve()
    return candidate


def _resolve_root(base_dir: Path, value: str) -> Path | str:
    if urlparse(value).scheme in {"http", "https", "file"}:
        return value
    return _resolve_path(base_dir, value)


def _parse_chart_state(config: Mapping[str, Any]) -> ChartStateConfig:
    kwargs: dict[str, Any] = {"output": str(config["output"])}
    if "title" in config:
        kwargs["title"] = str(config["title"])
    if "highlight" in config:
        kwargs["highlight"] = {str(name): str(color) for name, color in (config["highlight"] or {}).items()}
    if "points" in config:
        kwargs["points"] = bool(config["points"])
    if "y_title" in config:
        kwargs["y_title"] = str(config["y_title"])
    return ChartStateConfig(**kwargs)


def _parse_chart_export_config(config: Mapping[str, Any], base_dir: Path) -> CpiChartExportConfig:
    return CpiChartExportConfig(
        input_csv=_resolve_path(base_dir, config["input_csv"]),
        output_dir=_resolve_path(base_dir, config["output_dir"]),
        charts=[_parse_chart_state(entry) for entry in config.get("charts") or []],
        end_date=str(config.get("end_date", "2025-11-01")),
        tidy_output=_resolve_path(base_dir, config["tidy_output"]) if config.get("tidy_output") else None,
        description_column=config.get("description_column", "Description"),
        description=config.get("description", "South Africa Monthly CPI Inflation"),
        background=config.get("background", "white"),
    )


def _parse_scroll_replay_config(config: Mapping[str, Any], base_dir: Path) -> ScrollReplayConfig:
    return ScrollReplayConfig(
        page=_resolve_path(base_dir, config["page"]),
        artifact_root=_resolve_root(base_dir, config["artifact_root"]),
        specs=[str(item) for item in config.get("specs") or []],
        output_page=_resolve_path(base_dir, config["output_page"]),
        target_id=config.get("target_id", "vis"),
        step_selector=config.get("step_selector", ".step"),
        policy=policy_from_config(config.get("policy")),
        viewport_height=float(config.get("viewport_height", 800.0)),
        step_height=float(config.get("step_height", 600.0)),
        step_gap=float(config.get("step_gap", 200.0)),
        step_offset=float(config.get("step_offset", 0.0)),
        scroll_offsets=[float(value) for value in config.get("scroll_offsets") or []],
        strict=bool(config.get("strict", False)),
        padding=int(config.get("padding", 15)),
    )


def _emit_config(step: str, config: Any, as_json: bool) -> None:
    payload = {"step": step, "config": _to_serialisable(config)}
    if as_json:
        print(json.dumps(payload, indent=2))
    else:
        print(f"[DRY-RUN] {step} configuration:\n{yaml.safe_dump(payload, sort_keys=False)}")


def _emit_result(step: str, result: Any, as_json: bool) -> None:
    summary = _result_summary(step, result)
    payload = {
        "step": step,
        "summary": summary,
        "result": _to_serialisable(result),
    }
    if as_json:
        print(json.dumps(payload, indent=2))
    else:
        print(summary)


def _result_summary(step: str, result: Any) -> str:
    if step == "chart_export":
        return "Wrote {charts} chart spec(s) from {retained}/{total} cells across {indicators} indicators (dropped={dropped}).".format(
            charts=len(result.chart_paths),
            retained=result.retained_rows,
            total=result.input_cells,
            indicators=result.indicators,
            dropped=result.dropped_rows,
        )
    if step == "scroll_replay":
        return "Replayed {activations} activation(s) over {steps} step(s); {renders} render(s), final step {final}. Page: {page}".format(
            activations=len(result.activations),
            steps=result.steps_observed,
            renders=len(result.renders),
            final=result.final_step,
            page=result.output_page,
        )
    return f"Step {step} completed."


def _to_serialisable(obj: Any) -> Any:
    if is_dataclass(obj):
        data = asdict(obj)
        return {key: _to_serialisable(value) for key, value in data.items()}
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, dict):
        return {key: _to_serialisable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_to_serialisable(value) for value in obj]
    return obj


if __name__ == "__main__":
    sys.exit(main())
