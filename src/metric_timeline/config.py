from __future__ import annotations

from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from metric_timeline.features.categories import parse_member_list

DEFAULT_EXPECTED_COLOR = "#3b82f6"
DEFAULT_ACTUAL_COLOR = "#ef4444"


class ColumnsConfig(BaseModel):
    identifier: str = "METRICID"
    timestamp: str = "TIMESTAMP"

    @model_validator(mode="after")
    def _distinct_columns(self) -> "ColumnsConfig":
        if self.identifier == self.timestamp:
            raise ValueError("columns.identifier and columns.timestamp must differ")
        return self


class TimeConfig(BaseModel):
    timezone: str = "UTC"

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"invalid timezone: {value}") from exc
        return value


class CategoryConfig(BaseModel):
    name: str = Field(min_length=1)
    display_name: str | None = None
    members: list[str] = Field(default_factory=list)
    color: str = Field(min_length=1)

    @field_validator("members", mode="before")
    @classmethod
    def _split_members(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return parse_member_list(value)
        if isinstance(value, (list, tuple)):
            return parse_member_list(",".join(str(item) for item in value))
        return value


def _default_categories() -> list[CategoryConfig]:
    return [
        CategoryConfig(name="expected", display_name="Expected", color=DEFAULT_EXPECTED_COLOR),
        CategoryConfig(name="actual", display_name="Actual", color=DEFAULT_ACTUAL_COLOR),
    ]


class DomainConfig(BaseModel):
    padding_fraction: float = Field(default=0.05, ge=0.0, lt=1.0)
    zero_span_padding_seconds: float = Field(default=10.0, gt=0.0)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    figures_format: str = "png"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    time: TimeConfig = Field(default_factory=TimeConfig)
    categories: list[CategoryConfig] = Field(default_factory=_default_categories)
    domain: DomainConfig = Field(default_factory=DomainConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)

    @field_validator("categories")
    @classmethod
    def _unique_category_names(cls, value: list[CategoryConfig]) -> list[CategoryConfig]:
        seen: set[str] = set()
        for category in value:
            if category.name in seen:
                raise ValueError(f"duplicate category name: {category.name}")
            seen.add(category.name)
        return value

    def category(self, name: str) -> CategoryConfig:
        for category in self.categories:
            if category.name == name:
                return category
        raise KeyError(name)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return AppConfig.model_validate(data)
