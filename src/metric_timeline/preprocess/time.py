from __future__ import annotations

import re

import pandas as pd

from metric_timeline.errors import TIMESTAMP_UNPARSABLE, Diagnostic
from metric_timeline.io.schema import CanonicalColumns

DEFAULT_TIMEZONE = "UTC"

# Date, optionally followed by a time with optional fractional seconds and offset.
_ISO_8601_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:[.,]\d+)?)?(?:Z|[+-]\d{2}(?::?\d{2})?)?)?$"
)


def parse_timestamp(text: str, timezone: str = DEFAULT_TIMEZONE) -> pd.Timestamp | None:
    """Parse one ISO-8601 value into a nanosecond timestamp in ``timezone``.

    Values without an offset are taken to be wall-clock time in ``timezone``. Returns
    ``None`` for anything that is not ISO-8601 shaped or does not denote a real instant.
    """
    candidate = text.strip()
    if not _ISO_8601_RE.match(candidate):
        return None
    try:
        parsed = pd.Timestamp(candidate.replace(",", ".")).as_unit("ns")
    except (ValueError, OverflowError):
        return None

    if parsed.tzinfo is None:
        parsed = parsed.tz_localize(timezone, nonexistent="shift_forward", ambiguous="NaT")
    else:
        parsed = parsed.tz_convert(timezone)
    if pd.isna(parsed):
        return None
    return parsed


def add_parsed_timestamps(
    records: pd.DataFrame,
    timezone: str = DEFAULT_TIMEZONE,
) -> tuple[pd.DataFrame, tuple[Diagnostic, ...]]:
    working = records.copy()
    parsed = [
        parse_timestamp(str(text), timezone)
        for text in working[CanonicalColumns.timestamp_text]
    ]
    working[CanonicalColumns.timestamp] = pd.to_datetime(
        pd.Series(parsed, index=working.index, dtype=object),
        utc=True,
    ).dt.tz_convert(timezone)

    invalid = working[working[CanonicalColumns.timestamp].isna()]
    diagnostics = tuple(
        Diagnostic(
            kind=TIMESTAMP_UNPARSABLE,
            detail=f"invalid timestamp {text!r}",
            line=int(line),
            identifier=str(identifier),
        )
        for line, identifier, text in zip(
            invalid[CanonicalColumns.line],
            invalid[CanonicalColumns.identifier],
            invalid[CanonicalColumns.timestamp_text],
        )
    )
    return working, diagnostics


def group_timestamps(frame: pd.DataFrame) -> dict[str, list[pd.Timestamp]]:
    """Group valid timestamps per identifier, ascending, in first-observation order."""
    valid = frame.dropna(subset=[CanonicalColumns.timestamp]).sort_values(
        CanonicalColumns.line, kind="stable"
    )
    grouped = valid.groupby(CanonicalColumns.identifier, sort=False)[CanonicalColumns.timestamp]
    return {str(identifier): sorted(series.tolist()) for identifier, series in grouped}
