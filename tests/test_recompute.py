from __future__ import annotations

import json
import logging

import pandas as pd
import pytest

from metric_timeline.errors import (
    EXCESS_OBSERVATIONS,
    ROW_SKIPPED,
    TIMESTAMP_UNPARSABLE,
    FormatError,
)
from metric_timeline.features.categories import CategoryRule, CategoryRuleSet
from metric_timeline.pipeline.recompute import (
    EngineSettings,
    build_timeline,
    clear_cache,
    compute_timeline,
)
from metric_timeline.report.payload import build_chart_payload

RULES = CategoryRuleSet(
    rules=(
        CategoryRule(name="expected", color="#3b82f6", members=("A", "B", "M")),
        CategoryRule(name="actual", color="#ef4444", members=("A", "C", "D")),
    )
)

SAMPLE = "\n".join(
    [
        "METRICID,TIMESTAMP,VALUE",
        "C,2024-01-01T00:03:00Z,1",
        "A,2024-01-01T00:05:00Z,1",
        "B,2024-01-01T00:01:00Z,1",
        "B,2024-01-01T00:02:00Z,1",
        "A,2024-01-01T00:00:00Z,1",
        "B,2024-01-01T00:09:00Z,1",
        "D,not-a-time,1",
        "X,2024-01-01T00:04:00Z,1",
        "short",
    ]
)


def test_two_observations_reduce_to_an_interval() -> None:
    raw = "identifier,timestamp\nA,2024-01-01T00:00:00Z\nA,2024-01-01T00:05:00Z\n"
    rules = CategoryRuleSet(rules=(CategoryRule(name="expected", color="#00f", members=("A",)),))
    settings = EngineSettings(identifier_column="identifier", timestamp_column="timestamp")

    result = build_timeline(raw, rules, settings)

    assert [(entry.identifier, entry.timestamp, entry.kind) for entry in result.timeline] == [
        ("A", pd.Timestamp("2024-01-01T00:00:00Z"), "interval-start"),
        ("A", pd.Timestamp("2024-01-01T00:05:00Z"), "interval-end"),
    ]
    assert [(entry.identifier, entry.color) for entry in result.legend] == [("A", "#00f")]


def test_timeline_is_sorted_and_intervals_are_ordered() -> None:
    result = build_timeline(SAMPLE, RULES)

    timestamps = [entry.timestamp for entry in result.timeline]
    assert timestamps == sorted(timestamps)

    by_identifier: dict[str, list[str]] = {}
    for entry in result.timeline:
        by_identifier.setdefault(entry.identifier, []).append(entry.kind)
    assert by_identifier == {
        "A": ["interval-start", "interval-end"],
        "B": ["interval-start", "interval-end"],
        "C": ["instant"],
    }


def test_precedence_prefers_expected_over_actual() -> None:
    result = build_timeline(SAMPLE, RULES)

    categories = {entry.identifier: entry.category for entry in result.timeline}
    assert categories["A"] == "expected"
    assert categories["C"] == "actual"
    assert "X" not in categories


def test_excess_observations_keep_only_extremes() -> None:
    result = build_timeline(SAMPLE, RULES)

    b_times = [entry.timestamp for entry in result.timeline if entry.identifier == "B"]
    assert b_times == [pd.Timestamp("2024-01-01T00:01:00Z"), pd.Timestamp("2024-01-01T00:09:00Z")]
    excess = result.diagnostics_of(EXCESS_OBSERVATIONS)
    assert [diagnostic.identifier for diagnostic in excess] == ["B"]


def test_non_fatal_problems_are_reported_as_diagnostics() -> None:
    result = build_timeline(SAMPLE, RULES)

    assert [d.line for d in result.diagnostics_of(ROW_SKIPPED)] == [10]
    assert [d.identifier for d in result.diagnostics_of(TIMESTAMP_UNPARSABLE)] == ["D"]
    assert result.row_count == 8


def test_declared_identifiers_without_data_get_legend_only() -> None:
    result = build_timeline(SAMPLE, RULES)

    legend = [(entry.identifier, entry.category, entry.observed) for entry in result.legend]
    assert legend == [
        ("C", "actual", True),
        ("A", "expected", True),
        ("B", "expected", True),
        ("M", "expected", False),
        ("D", "actual", False),
    ]
    assert "M" not in result.identifiers
    assert len([entry for entry in result.legend if entry.identifier == "M"]) == 1


def test_pipeline_is_idempotent() -> None:
    first = build_timeline(SAMPLE, RULES)
    second = build_timeline(SAMPLE, RULES)

    assert first == second
    assert json.dumps(build_chart_payload(first), sort_keys=True) == json.dumps(
        build_chart_payload(second), sort_keys=True
    )


def test_header_without_required_columns_raises() -> None:
    with pytest.raises(FormatError):
        build_timeline("foo,bar\n1,2\n", RULES)


def test_empty_batch_uses_placeholder_domain() -> None:
    result = build_timeline("METRICID,TIMESTAMP\n", RULES)

    assert result.is_empty
    assert result.domain.empty
    assert (result.domain.lower_ms, result.domain.upper_ms) == (0.0, 1.0)


def test_compute_timeline_memoizes_equal_inputs() -> None:
    clear_cache()
    first = compute_timeline(SAMPLE, RULES)
    again = compute_timeline(SAMPLE, CategoryRuleSet(rules=RULES.rules))

    assert first is again
    assert compute_timeline(SAMPLE, RULES.with_color("actual", "#000")) is not first


def test_compute_timeline_logs_diagnostics_once(caplog: pytest.LogCaptureFixture) -> None:
    clear_cache()
    with caplog.at_level(logging.WARNING, logger="metric_timeline.pipeline.recompute"):
        compute_timeline(SAMPLE, RULES)
        compute_timeline(SAMPLE, RULES)

    messages = [record.getMessage() for record in caplog.records]
    assert sum(EXCESS_OBSERVATIONS in message for message in messages) == 1
    assert sum(TIMESTAMP_UNPARSABLE in message for message in messages) == 1
