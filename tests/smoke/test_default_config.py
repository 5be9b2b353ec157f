# cpi_scrolly/tests/smoke/test_default_config.py
"""Smoke checks that the shipped configuration resolves for every step."""

from __future__ import annotations

import json
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

import pytest

from scrolly import run_step


ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG = ROOT / "configs" / "default.yaml"


@pytest.mark.parametrize("step", run_step.STEPS)
def test_default_config_dry_run(step: str, capsys) -> None:
    exit_code = run_step.main(["--config", str(DEFAULT_CONFIG), step, "--dry-run", "--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["step"] == step
    assert payload["config"]


def test_default_step_table_matches_host_page() -> None:
    from scrolly.host_page import HostPage

    config = run_step._parse_scroll_replay_config(
        run_step._load_config(DEFAULT_CONFIG)["steps"]["scroll_replay"],
        DEFAULT_CONFIG.parent,
    )
    regions = HostPage.from_path(config.page).step_regions()

    assert [region.step_attr for region in regions] == [str(index) for index in range(len(config.specs))]


def test_default_chart_states_cover_step_table() -> None:
    steps = run_step._load_config(DEFAULT_CONFIG)["steps"]
    outputs = [chart["output"] for chart in steps["chart_export"]["charts"]]
    assert outputs == steps["scroll_replay"]["specs"]


def test_host_page_embeds_the_chart_script_it_receives() -> None:
    from scrolly.host_page import CHART_SCRIPT_TYPE, HostPage

    page = HostPage.from_path(ROOT / "web" / "index.html")
    bootstrap = [script.string or "" for script in page.soup.find_all("script") if not script.get("src")]

    assert any(CHART_SCRIPT_TYPE in body and "vegaEmbed(" in body for body in bootstrap)
    assert page.target().find("script") is None
