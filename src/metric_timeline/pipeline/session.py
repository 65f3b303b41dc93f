from __future__ import annotations

import logging
from dataclasses import dataclass, field

from metric_timeline.config import AppConfig
from metric_timeline.errors import FormatError
from metric_timeline.features.categories import CategoryRuleSet, build_rule_set
from metric_timeline.pipeline.recompute import (
    EMPTY_RESULT,
    EngineSettings,
    TimelineResult,
    compute_timeline,
)
from metric_timeline.timeline.selection import Emphasis, SelectionState

LOGGER = logging.getLogger(__name__)

SUCCESS_TITLE = "CSV Uploaded"
SUCCESS_MESSAGE = "Metric data loaded successfully."
FAILURE_TITLE = "Error"


@dataclass(frozen=True)
class Feedback:
    ok: bool
    title: str
    message: str

    @classmethod
    def success(cls) -> Feedback:
        return cls(ok=True, title=SUCCESS_TITLE, message=SUCCESS_MESSAGE)

    @classmethod
    def failure(cls, reason: str) -> Feedback:
        return cls(ok=False, title=FAILURE_TITLE, message=reason)


@dataclass
class TimelineSession:
    """Application state for one viewer: raw upload, category rules and selection.

    Derived structures are never stored; ``result`` recomputes (memoized) from the
    current raw text and rule set. Selection is cleared whenever the set of identifiers
    on the timeline changes.
    """

    rule_set: CategoryRuleSet = field(default_factory=CategoryRuleSet)
    settings: EngineSettings = field(default_factory=EngineSettings)
    raw_text: str | None = None
    selection: SelectionState = field(default_factory=SelectionState)
    _identifiers: frozenset[str] = field(default=frozenset(), init=False, repr=False)

    @classmethod
    def from_config(cls, config: AppConfig) -> TimelineSession:
        return cls(
            rule_set=build_rule_set(config.categories),
            settings=EngineSettings.from_config(config),
        )

    @property
    def result(self) -> TimelineResult:
        if self.raw_text is None:
            return EMPTY_RESULT
        return compute_timeline(self.raw_text, self.rule_set, self.settings)

    def upload(self, raw_text: str) -> Feedback:
        """Replace the raw input; a rejected upload leaves the previous data in place."""
        try:
            compute_timeline(raw_text, self.rule_set, self.settings)
        except FormatError as exc:
            LOGGER.warning("Rejected upload: %s", exc)
            return Feedback.failure(str(exc))
        self.raw_text = raw_text
        self._sync_selection()
        return Feedback.success()

    def set_rules(self, rule_set: CategoryRuleSet) -> None:
        self.rule_set = rule_set
        self._sync_selection()

    def set_members(self, category: str, members: str) -> None:
        self.set_rules(self.rule_set.with_members(category, members))

    def set_color(self, category: str, color: str) -> None:
        self.set_rules(self.rule_set.with_color(category, color))

    def toggle_select(self, identifier: str) -> bool:
        return self.selection.toggle_select(identifier)

    def set_hover(self, identifier: str | None) -> None:
        self.selection.set_hover(identifier)

    def emphasis_for(self, identifier: str) -> Emphasis:
        return self.selection.emphasis_for(identifier)

    def _sync_selection(self) -> None:
        identifiers = self.result.identifiers
        if identifiers != self._identifiers:
            self.selection.reset()
            self._identifiers = identifiers
