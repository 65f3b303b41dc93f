from __future__ import annotations

from dataclasses import dataclass

from metric_timeline.errors import FormatError

DEFAULT_IDENTIFIER_COLUMN = "METRICID"
DEFAULT_TIMESTAMP_COLUMN = "TIMESTAMP"
FIELD_DELIMITER = ","


@dataclass(frozen=True)
class CanonicalColumns:
    line: str = "line"
    identifier: str = "identifier"
    timestamp_text: str = "timestamp_text"
    timestamp: str = "timestamp"


RECORD_COLUMNS = [
    CanonicalColumns.line,
    CanonicalColumns.identifier,
    CanonicalColumns.timestamp_text,
]


def split_fields(line: str) -> list[str]:
    # Naive split: quoted fields containing commas are not supported.
    return [value.strip() for value in line.split(FIELD_DELIMITER)]


def resolve_header(
    header: list[str],
    identifier_column: str = DEFAULT_IDENTIFIER_COLUMN,
    timestamp_column: str = DEFAULT_TIMESTAMP_COLUMN,
) -> tuple[int, int]:
    """Return (identifier index, timestamp index) using exact, case-sensitive matches."""
    required = [identifier_column, timestamp_column]
    missing = [column for column in required if column not in header]
    if missing:
        raise FormatError(missing_columns=missing, required_columns=required)
    return header.index(identifier_column), header.index(timestamp_column)
