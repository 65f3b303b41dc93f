from __future__ import annotations

from collections import Counter
from dataclasses import asdict
from typing import Any

import pandas as pd

from metric_timeline.pipeline.recompute import TimelineResult

TIMELINE_COLUMNS = [
    "identifier",
    "timestamp",
    "kind",
    "category",
    "color",
    "label",
    "is_boundary_end",
]
LEGEND_COLUMNS = ["identifier", "color", "category", "observed"]
DIAGNOSTIC_COLUMNS = ["kind", "line", "identifier", "detail"]


def build_timeline_table(result: TimelineResult) -> pd.DataFrame:
    rows = [
        {
            "identifier": entry.identifier,
            "timestamp": entry.timestamp,
            "kind": entry.kind,
            "category": entry.category,
            "color": entry.color,
            "label": entry.label,
            "is_boundary_end": entry.is_boundary_end,
        }
        for entry in result.timeline
    ]
    return pd.DataFrame(rows, columns=TIMELINE_COLUMNS)


def build_legend_table(result: TimelineResult) -> pd.DataFrame:
    return pd.DataFrame([asdict(entry) for entry in result.legend], columns=LEGEND_COLUMNS)


def build_diagnostics_table(result: TimelineResult) -> pd.DataFrame:
    frame = pd.DataFrame(
        [asdict(diagnostic) for diagnostic in result.diagnostics],
        columns=DIAGNOSTIC_COLUMNS,
    )
    frame["line"] = frame["line"].astype("Int64")
    return frame


def build_summary(result: TimelineResult) -> dict[str, Any]:
    lower, upper = result.domain.as_timestamps(result.timezone)
    return {
        "rows": result.row_count,
        "timeline_entries": len(result.timeline),
        "legend_entries": len(result.legend),
        "identifiers_plotted": len(result.identifiers),
        "identifiers_declared_absent": sum(1 for entry in result.legend if not entry.observed),
        "diagnostics": dict(sorted(Counter(d.kind for d in result.diagnostics).items())),
        "domain": {
            "empty": result.domain.empty,
            "lower_ms": result.domain.lower_ms,
            "upper_ms": result.domain.upper_ms,
            "lower": None if result.domain.empty else lower.isoformat(),
            "upper": None if result.domain.empty else upper.isoformat(),
        },
    }
