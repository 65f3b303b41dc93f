"""JSON-ready payloads consumed by a rendering surface (chart, tooltip and legend)."""

from __future__ import annotations

from typing import Any

import pandas as pd

from metric_timeline.pipeline.recompute import TimelineResult
from metric_timeline.timeline.projector import TimelineEntry
from metric_timeline.timeline.selection import NEUTRAL, Emphasis, SelectionState

DASH_PATTERN = "4 4"
DEFAULT_STROKE_WIDTH = 1.5
BOLD_STROKE_WIDTH = 3.0
DEFAULT_OPACITY = 1.0
DIMMED_OPACITY = 0.2
AXIS_TICK_FORMAT = "%H:%M:%S"


def format_tooltip_time(timestamp: pd.Timestamp) -> str:
    return f"{timestamp.strftime('%Y-%m-%d %H:%M:%S')}.{timestamp.microsecond // 1000:03d}"


def marker_style(entry: TimelineEntry, emphasis: Emphasis = NEUTRAL) -> dict[str, Any]:
    # Interval ends are drawn solid; instants and interval starts are dashed.
    return {
        "stroke": entry.color,
        "stroke_width": BOLD_STROKE_WIDTH if emphasis.bold else DEFAULT_STROKE_WIDTH,
        "stroke_opacity": DIMMED_OPACITY if emphasis.dimmed else DEFAULT_OPACITY,
        "dash": None if entry.is_boundary_end else DASH_PATTERN,
    }


def tooltip_payload(entry: TimelineEntry) -> dict[str, Any]:
    return {
        "identifier": entry.identifier,
        "label": entry.label,
        "color": entry.color,
        "timestamp": format_tooltip_time(entry.timestamp),
        "timestamp_iso": entry.timestamp.isoformat(),
    }


def build_chart_payload(
    result: TimelineResult,
    selection: SelectionState | None = None,
) -> dict[str, Any]:
    state = selection or SelectionState()
    return {
        "timezone": result.timezone,
        "domain": {
            "lower_ms": result.domain.lower_ms,
            "upper_ms": result.domain.upper_ms,
            "empty": result.domain.empty,
        },
        "entries": [
            {
                "identifier": entry.identifier,
                "kind": entry.kind,
                "category": entry.category,
                "x": entry.epoch_ms,
                "is_boundary_end": entry.is_boundary_end,
                "tooltip": tooltip_payload(entry),
                "style": marker_style(entry, state.emphasis_for(entry.identifier)),
            }
            for entry in result.timeline
        ],
        "legend": [
            {
                "identifier": legend_entry.identifier,
                "color": legend_entry.color,
                "category": legend_entry.category,
                "observed": legend_entry.observed,
                "selected": state.is_selected(legend_entry.identifier),
            }
            for legend_entry in result.legend
        ],
    }
