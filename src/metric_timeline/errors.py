from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

DiagnosticKind = Literal["row_skipped", "timestamp_unparsable", "excess_observations"]

ROW_SKIPPED: DiagnosticKind = "row_skipped"
TIMESTAMP_UNPARSABLE: DiagnosticKind = "timestamp_unparsable"
EXCESS_OBSERVATIONS: DiagnosticKind = "excess_observations"


class FormatError(ValueError):
    """Raised when an upload cannot be used at all (required header columns missing)."""

    def __init__(self, missing_columns: list[str], required_columns: list[str]) -> None:
        self.missing_columns = list(missing_columns)
        self.required_columns = list(required_columns)
        quoted = " and ".join(f"'{column}'" for column in self.required_columns)
        super().__init__(f"CSV must contain {quoted} columns.")


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal problem recorded while building a timeline."""

    kind: DiagnosticKind
    detail: str
    line: int | None = None
    identifier: str | None = None
