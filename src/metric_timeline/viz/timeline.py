from __future__ import annotations

from pathlib import Path

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
from matplotlib.lines import Line2D

from metric_timeline.pipeline.recompute import TimelineResult
from metric_timeline.report.payload import AXIS_TICK_FORMAT, marker_style
from metric_timeline.timeline.selection import SelectionState
from metric_timeline.viz.common import save_figure

MAX_LEGEND_ROWS = 40


def _linestyle(dash: str | None) -> str | tuple[int, tuple[float, ...]]:
    if dash is None:
        return "-"
    return (0, tuple(float(part) for part in dash.split()))


def plot_timeline(
    result: TimelineResult,
    output_path: Path,
    selection: SelectionState | None = None,
) -> Path:
    state = selection or SelectionState()
    fig, ax = plt.subplots(figsize=(14, 6))

    if result.is_empty:
        ax.text(0.5, 0.5, "Awaiting data", ha="center", va="center", transform=ax.transAxes)
        ax.set_xticks([])
        ax.set_yticks([])
        return save_figure(output_path)

    for entry in result.timeline:
        style = marker_style(entry, state.emphasis_for(entry.identifier))
        ax.axvline(
            entry.timestamp.to_pydatetime(),
            color=style["stroke"],
            linewidth=style["stroke_width"],
            alpha=style["stroke_opacity"],
            linestyle=_linestyle(style["dash"]),
        )

    lower, upper = result.domain.as_timestamps(result.timezone)
    ax.set_xlim(lower.to_pydatetime(), upper.to_pydatetime())
    ax.xaxis.set_major_formatter(mdates.DateFormatter(AXIS_TICK_FORMAT, tz=lower.tzinfo))
    ax.set_yticks([])
    ax.set_xlabel("Time")
    ax.grid(True, linestyle="--", alpha=0.5)

    handles = [
        Line2D(
            [0],
            [0],
            color=entry.color,
            linewidth=3.0 if state.is_selected(entry.identifier) else 1.5,
            linestyle="-" if entry.observed else ":",
            label=entry.identifier,
        )
        for entry in result.legend[:MAX_LEGEND_ROWS]
    ]
    if handles:
        ax.legend(handles=handles, loc="upper left", bbox_to_anchor=(1.01, 1.0), fontsize="small")
    return save_figure(output_path)
