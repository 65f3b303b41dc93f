"""Merge reduced markers into one ordered, render-ready timeline with legend and domain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

import pandas as pd

from metric_timeline.features.categories import CategoryRule, CategoryRuleSet, declared_absent
from metric_timeline.features.reduce import (
    INTERVAL_END,
    INTERVAL_START,
    MarkerKind,
    ReducedMarker,
)

DEFAULT_PADDING_FRACTION = 0.05
DEFAULT_ZERO_SPAN_PADDING_SECONDS = 10.0

_LABEL_SUFFIXES: dict[str, str] = {
    INTERVAL_START: " (start)",
    INTERVAL_END: " (end)",
}


@dataclass(frozen=True)
class TimelineEntry:
    identifier: str
    timestamp: pd.Timestamp
    kind: MarkerKind
    category: str
    color: str
    label: str

    @property
    def is_boundary_end(self) -> bool:
        return self.kind == INTERVAL_END

    @property
    def epoch_ms(self) -> float:
        return self.timestamp.value / 1_000_000


@dataclass(frozen=True)
class LegendEntry:
    identifier: str
    color: str
    category: str
    observed: bool = True


@dataclass(frozen=True)
class TimeDomain:
    """Padded horizontal bounds in epoch milliseconds.

    ``empty`` marks the ``[0, 1]`` placeholder used when there is nothing to plot.
    """

    lower_ms: float
    upper_ms: float
    empty: bool = False

    def as_timestamps(self, timezone: str = "UTC") -> tuple[pd.Timestamp, pd.Timestamp]:
        return (
            pd.Timestamp(self.lower_ms, unit="ms", tz="UTC").tz_convert(timezone),
            pd.Timestamp(self.upper_ms, unit="ms", tz="UTC").tz_convert(timezone),
        )


EMPTY_DOMAIN = TimeDomain(lower_ms=0.0, upper_ms=1.0, empty=True)


@dataclass(frozen=True)
class Projection:
    timeline: tuple[TimelineEntry, ...]
    legend: tuple[LegendEntry, ...]
    domain: TimeDomain


def marker_label(rule: CategoryRule, identifier: str, kind: MarkerKind) -> str:
    return f"{rule.label}: {identifier}{_LABEL_SUFFIXES.get(kind, '')}"


def compute_domain(
    timestamps: Iterable[pd.Timestamp],
    *,
    padding_fraction: float = DEFAULT_PADDING_FRACTION,
    zero_span_padding_seconds: float = DEFAULT_ZERO_SPAN_PADDING_SECONDS,
) -> TimeDomain:
    values = [timestamp.value / 1_000_000 for timestamp in timestamps]
    if not values:
        return EMPTY_DOMAIN
    lower = min(values)
    upper = max(values)
    span = upper - lower
    padding = span * padding_fraction if span > 0 else zero_span_padding_seconds * 1000.0
    return TimeDomain(lower_ms=lower - padding, upper_ms=upper + padding)


def project(
    markers_by_identifier: Mapping[str, Sequence[ReducedMarker]],
    assignment: Mapping[str, CategoryRule | None],
    rule_set: CategoryRuleSet | None = None,
    *,
    padding_fraction: float = DEFAULT_PADDING_FRACTION,
    zero_span_padding_seconds: float = DEFAULT_ZERO_SPAN_PADDING_SECONDS,
) -> Projection:
    """Build the time-sorted timeline, the legend and the padded domain.

    Identifiers without a category are left out. When ``rule_set`` is given, declared
    identifiers that produced no marker get a legend entry with ``observed=False``.
    """
    entries: list[TimelineEntry] = []
    legend: list[LegendEntry] = []
    for identifier, markers in markers_by_identifier.items():
        rule = assignment.get(identifier)
        if rule is None or not markers:
            continue
        legend.append(LegendEntry(identifier=identifier, color=rule.color, category=rule.name))
        entries.extend(
            TimelineEntry(
                identifier=identifier,
                timestamp=marker.timestamp,
                kind=marker.kind,
                category=rule.name,
                color=rule.color,
                label=marker_label(rule, identifier, marker.kind),
            )
            for marker in markers
        )

    # sorted() is stable, so equal timestamps keep per-identifier insertion order.
    timeline = sorted(entries, key=lambda entry: entry.timestamp)

    if rule_set is not None:
        observed = [entry.identifier for entry in legend]
        legend.extend(
            LegendEntry(identifier=identifier, color=rule.color, category=rule.name, observed=False)
            for identifier, rule in declared_absent(observed, rule_set)
        )

    domain = compute_domain(
        (entry.timestamp for entry in timeline),
        padding_fraction=padding_fraction,
        zero_span_padding_seconds=zero_span_padding_seconds,
    )
    return Projection(timeline=tuple(timeline), legend=tuple(legend), domain=domain)
