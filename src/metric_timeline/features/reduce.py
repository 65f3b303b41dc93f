from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Sequence

import pandas as pd

from metric_timeline.errors import EXCESS_OBSERVATIONS, Diagnostic

MarkerKind = Literal["instant", "interval-start", "interval-end"]

INSTANT: MarkerKind = "instant"
INTERVAL_START: MarkerKind = "interval-start"
INTERVAL_END: MarkerKind = "interval-end"


@dataclass(frozen=True)
class ReducedMarker:
    identifier: str
    timestamp: pd.Timestamp
    kind: MarkerKind

    @property
    def is_boundary_end(self) -> bool:
        return self.kind == INTERVAL_END


@dataclass(frozen=True)
class Reduction:
    markers: tuple[ReducedMarker, ...]
    diagnostics: tuple[Diagnostic, ...] = ()


def reduce_timestamps(identifier: str, timestamps: Sequence[pd.Timestamp]) -> Reduction:
    """Collapse observations to a single instant or to the oldest/newest pair.

    Interior observations are dropped; more than two observations is reported as an
    ``excess_observations`` diagnostic. Equal oldest and newest still yield two markers.
    """
    ordered = sorted(timestamps)
    if not ordered:
        return Reduction(markers=())
    if len(ordered) == 1:
        return Reduction(markers=(ReducedMarker(identifier, ordered[0], INSTANT),))

    diagnostics: tuple[Diagnostic, ...] = ()
    if len(ordered) > 2:
        diagnostics = (
            Diagnostic(
                kind=EXCESS_OBSERVATIONS,
                detail=f"{len(ordered)} timestamps; using oldest and newest",
                identifier=identifier,
            ),
        )
    return Reduction(
        markers=(
            ReducedMarker(identifier, ordered[0], INTERVAL_START),
            ReducedMarker(identifier, ordered[-1], INTERVAL_END),
        ),
        diagnostics=diagnostics,
    )


def reduce_groups(
    groups: Mapping[str, Sequence[pd.Timestamp]],
) -> tuple[dict[str, tuple[ReducedMarker, ...]], tuple[Diagnostic, ...]]:
    reduced: dict[str, tuple[ReducedMarker, ...]] = {}
    diagnostics: list[Diagnostic] = []
    for identifier, timestamps in groups.items():
        reduction = reduce_timestamps(identifier, timestamps)
        if reduction.markers:
            reduced[identifier] = reduction.markers
        diagnostics.extend(reduction.diagnostics)
    return reduced, tuple(diagnostics)
