from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from metric_timeline.config import AppConfig
from metric_timeline.features.categories import build_rule_set
from metric_timeline.io.read import read_upload_text
from metric_timeline.io.write import write_summary, write_table
from metric_timeline.paths import build_output_paths
from metric_timeline.pipeline.recompute import EngineSettings, TimelineResult, compute_timeline
from metric_timeline.report.payload import build_chart_payload
from metric_timeline.report.tables import (
    build_diagnostics_table,
    build_legend_table,
    build_summary,
    build_timeline_table,
)
from metric_timeline.timeline.selection import SelectionState
from metric_timeline.viz.timeline import plot_timeline

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOutputs:
    result: TimelineResult
    tables: dict[str, Path]
    summary: Path | None = None
    payload: Path | None = None
    figure: Path | None = None


def build_selection(selected: Iterable[str] = (), hovered: str | None = None) -> SelectionState:
    state = SelectionState()
    for identifier in selected:
        state.toggle_select(identifier)
    state.set_hover(hovered)
    return state


def write_artifacts(result: TimelineResult, out_dir: Path, config: AppConfig) -> RunOutputs:
    paths = build_output_paths(out_dir)
    fmt = config.outputs.tables_format
    tables = {
        "timeline": build_timeline_table(result),
        "legend": build_legend_table(result),
        "diagnostics": build_diagnostics_table(result),
    }
    written = {
        name: write_table(table, paths.tables / f"{name}.{fmt}", fmt=fmt)
        for name, table in tables.items()
    }
    summary = write_summary(build_summary(result), paths.summary / "summary.json")
    return RunOutputs(result=result, tables=written, summary=summary)


def render_artifacts(
    result: TimelineResult,
    out_dir: Path,
    config: AppConfig,
    selection: SelectionState,
) -> RunOutputs:
    paths = build_output_paths(out_dir)
    payload = write_summary(
        build_chart_payload(result, selection),
        paths.summary / "chart_payload.json",
    )
    figure = None
    try:
        figure = plot_timeline(
            result,
            paths.figures / f"timeline.{config.outputs.figures_format}",
            selection=selection,
        )
    except Exception:  # pragma: no cover
        LOGGER.exception("Failed rendering timeline figure")
    return RunOutputs(result=result, tables={}, payload=payload, figure=figure)


def run_timeline(
    csv_path: Path,
    out_dir: Path,
    config: AppConfig,
    *,
    selected: Iterable[str] = (),
    hovered: str | None = None,
    tables: bool = True,
    render: bool = True,
) -> RunOutputs:
    """Compute the timeline for one upload and write the requested artifacts."""
    result = compute_timeline(
        read_upload_text(csv_path),
        build_rule_set(config.categories),
        EngineSettings.from_config(config),
    )
    LOGGER.info(
        "Computed timeline: %d rows, %d entries, %d legend entries, %d diagnostics",
        result.row_count,
        len(result.timeline),
        len(result.legend),
        len(result.diagnostics),
    )

    outputs = RunOutputs(result=result, tables={})
    if tables:
        outputs = write_artifacts(result, out_dir, config)
    if render:
        rendered = render_artifacts(result, out_dir, config, build_selection(selected, hovered))
        outputs = RunOutputs(
            result=result,
            tables=outputs.tables,
            summary=outputs.summary,
            payload=rendered.payload,
            figure=rendered.figure,
        )
    return outputs
