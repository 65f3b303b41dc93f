"""Row parser: raw delimited upload text into (identifier, timestamp text) records."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from metric_timeline.errors import ROW_SKIPPED, Diagnostic
from metric_timeline.io.schema import (
    DEFAULT_IDENTIFIER_COLUMN,
    DEFAULT_TIMESTAMP_COLUMN,
    RECORD_COLUMNS,
    resolve_header,
    split_fields,
)


@dataclass(frozen=True)
class RowParseResult:
    records: pd.DataFrame
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.records)


def parse_rows(
    raw_text: str,
    *,
    identifier_column: str = DEFAULT_IDENTIFIER_COLUMN,
    timestamp_column: str = DEFAULT_TIMESTAMP_COLUMN,
) -> RowParseResult:
    """Parse upload text into records with columns ``line``, ``identifier``, ``timestamp_text``.

    The header must name both required columns or the whole batch is rejected with
    ``FormatError``. Rows with too few fields are dropped and reported as ``row_skipped``
    diagnostics. Line numbers are 1-based within the trimmed text, the header being line 1.
    """
    lines = raw_text.lstrip("\ufeff").strip().split("\n")
    identifier_index, timestamp_index = resolve_header(
        split_fields(lines[0]),
        identifier_column=identifier_column,
        timestamp_column=timestamp_column,
    )
    min_fields = max(identifier_index, timestamp_index) + 1

    rows: list[tuple[int, str, str]] = []
    diagnostics: list[Diagnostic] = []
    for line_number, line in enumerate(lines[1:], start=2):
        values = split_fields(line)
        if len(values) < min_fields:
            diagnostics.append(
                Diagnostic(
                    kind=ROW_SKIPPED,
                    detail=f"expected at least {min_fields} fields, found {len(values)}",
                    line=line_number,
                )
            )
            continue
        rows.append((line_number, values[identifier_index], values[timestamp_index]))

    records = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    return RowParseResult(records=records, diagnostics=tuple(diagnostics))
