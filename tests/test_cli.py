from __future__ import annotations

from pathlib import Path

import pandas as pd
import yaml
from typer.testing import CliRunner

from metric_timeline.cli import app


def _write_inputs(tmp_path: Path) -> tuple[Path, Path]:
    csv_path = tmp_path / "metrics.csv"
    csv_path.write_text(
        "METRICID,TIMESTAMP\nA,2024-01-01T00:00:00Z\nB,2024-01-01T00:01:00Z\n",
        encoding="utf-8",
    )
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "categories": [
                    {"name": "expected", "members": "A", "color": "#3b82f6"},
                    {"name": "actual", "members": "", "color": "#ef4444"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return csv_path, config_path


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "project" in result.stdout
    assert "render" in result.stdout
    assert "run-all" in result.stdout


def test_project_command_applies_member_overrides(tmp_path: Path) -> None:
    csv_path, config_path = _write_inputs(tmp_path)
    out_dir = tmp_path / "out"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "project",
            "--csv",
            str(csv_path),
            "--config",
            str(config_path),
            "--out",
            str(out_dir),
            "--members",
            "actual=B",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Entries: 2" in result.stdout
    timeline = pd.read_csv(out_dir / "tables" / "timeline.csv")
    assert timeline["category"].tolist() == ["expected", "actual"]
    assert not (out_dir / "figures" / "timeline.png").exists()


def test_render_command_writes_figure(tmp_path: Path) -> None:
    csv_path, config_path = _write_inputs(tmp_path)
    out_dir = tmp_path / "out"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "render",
            "--csv",
            str(csv_path),
            "--config",
            str(config_path),
            "--out",
            str(out_dir),
            "--select",
            "A",
        ],
    )

    assert result.exit_code == 0, result.output
    assert (out_dir / "figures" / "timeline.png").exists()
    assert (out_dir / "summary" / "chart_payload.json").exists()


def test_unknown_member_category_is_rejected(tmp_path: Path) -> None:
    csv_path, config_path = _write_inputs(tmp_path)

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "project",
            "--csv",
            str(csv_path),
            "--config",
            str(config_path),
            "--out",
            str(tmp_path / "out"),
            "--members",
            "noise=A",
        ],
    )

    assert result.exit_code != 0
    assert "Unknown category" in result.output


def test_malformed_header_exits_with_reason(tmp_path: Path) -> None:
    _, config_path = _write_inputs(tmp_path)
    bad_csv = tmp_path / "bad.csv"
    bad_csv.write_text("foo,bar\n1,2\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "run-all",
            "--csv",
            str(bad_csv),
            "--config",
            str(config_path),
            "--out",
            str(tmp_path / "out"),
        ],
    )

    assert result.exit_code == 1
    assert "CSV must contain 'METRICID' and 'TIMESTAMP' columns." in result.output
