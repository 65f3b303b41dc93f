"""Pure recomputation of every derived structure from (raw text, rule set)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from metric_timeline.errors import ROW_SKIPPED, Diagnostic, DiagnosticKind
from metric_timeline.features.categories import CategoryRuleSet, classify
from metric_timeline.features.reduce import reduce_groups
from metric_timeline.io.rows import parse_rows
from metric_timeline.io.schema import DEFAULT_IDENTIFIER_COLUMN, DEFAULT_TIMESTAMP_COLUMN
from metric_timeline.preprocess.time import (
    DEFAULT_TIMEZONE,
    add_parsed_timestamps,
    group_timestamps,
)
from metric_timeline.timeline.projector import (
    DEFAULT_PADDING_FRACTION,
    DEFAULT_ZERO_SPAN_PADDING_SECONDS,
    EMPTY_DOMAIN,
    LegendEntry,
    TimeDomain,
    TimelineEntry,
    project,
)

if TYPE_CHECKING:
    from metric_timeline.config import AppConfig

LOGGER = logging.getLogger(__name__)

CACHE_SIZE = 16


@dataclass(frozen=True)
class EngineSettings:
    identifier_column: str = DEFAULT_IDENTIFIER_COLUMN
    timestamp_column: str = DEFAULT_TIMESTAMP_COLUMN
    timezone: str = DEFAULT_TIMEZONE
    padding_fraction: float = DEFAULT_PADDING_FRACTION
    zero_span_padding_seconds: float = DEFAULT_ZERO_SPAN_PADDING_SECONDS

    @classmethod
    def from_config(cls, config: AppConfig) -> EngineSettings:
        return cls(
            identifier_column=config.columns.identifier,
            timestamp_column=config.columns.timestamp,
            timezone=config.time.timezone,
            padding_fraction=config.domain.padding_fraction,
            zero_span_padding_seconds=config.domain.zero_span_padding_seconds,
        )


@dataclass(frozen=True)
class TimelineResult:
    timeline: tuple[TimelineEntry, ...]
    legend: tuple[LegendEntry, ...]
    domain: TimeDomain
    diagnostics: tuple[Diagnostic, ...] = ()
    row_count: int = 0
    timezone: str = DEFAULT_TIMEZONE

    @property
    def is_empty(self) -> bool:
        return not self.timeline

    @property
    def identifiers(self) -> frozenset[str]:
        return frozenset(entry.identifier for entry in self.timeline)

    def diagnostics_of(self, kind: DiagnosticKind) -> tuple[Diagnostic, ...]:
        return tuple(diagnostic for diagnostic in self.diagnostics if diagnostic.kind == kind)


EMPTY_RESULT = TimelineResult(timeline=(), legend=(), domain=EMPTY_DOMAIN)


def build_timeline(
    raw_text: str,
    rule_set: CategoryRuleSet,
    settings: EngineSettings = EngineSettings(),
) -> TimelineResult:
    """Run parse, classify, reduce and project without side effects.

    Raises ``FormatError`` when the header lacks a required column; every other
    problem is returned in ``diagnostics``.
    """
    parsed = parse_rows(
        raw_text,
        identifier_column=settings.identifier_column,
        timestamp_column=settings.timestamp_column,
    )
    frame, timestamp_diagnostics = add_parsed_timestamps(parsed.records, settings.timezone)
    groups = group_timestamps(frame)

    assignment = classify(groups.keys(), rule_set)
    classified = {
        identifier: timestamps
        for identifier, timestamps in groups.items()
        if assignment[identifier] is not None
    }
    reduced, reduce_diagnostics = reduce_groups(classified)

    projection = project(
        reduced,
        assignment,
        rule_set,
        padding_fraction=settings.padding_fraction,
        zero_span_padding_seconds=settings.zero_span_padding_seconds,
    )
    return TimelineResult(
        timeline=projection.timeline,
        legend=projection.legend,
        domain=projection.domain,
        diagnostics=parsed.diagnostics + timestamp_diagnostics + reduce_diagnostics,
        row_count=parsed.row_count,
        timezone=settings.timezone,
    )


def _log_diagnostics(diagnostics: tuple[Diagnostic, ...]) -> None:
    for diagnostic in diagnostics:
        level = logging.DEBUG if diagnostic.kind == ROW_SKIPPED else logging.WARNING
        LOGGER.log(
            level,
            "%s line=%s identifier=%s: %s",
            diagnostic.kind,
            diagnostic.line,
            diagnostic.identifier,
            diagnostic.detail,
        )


@lru_cache(maxsize=CACHE_SIZE)
def _compute_cached(
    raw_text: str,
    rule_set: CategoryRuleSet,
    settings: EngineSettings,
) -> TimelineResult:
    result = build_timeline(raw_text, rule_set, settings)
    _log_diagnostics(result.diagnostics)
    return result


def compute_timeline(
    raw_text: str,
    rule_set: CategoryRuleSet,
    settings: EngineSettings | None = None,
) -> TimelineResult:
    """Memoized ``build_timeline``; equal inputs return the same result object."""
    return _compute_cached(raw_text, rule_set, settings or EngineSettings())


def clear_cache() -> None:
    _compute_cached.cache_clear()
