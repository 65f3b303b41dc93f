from __future__ import annotations

from pathlib import Path


def read_upload_text(path: Path) -> str:
    # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
    return path.read_text(encoding="utf-8-sig")
