from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Emphasis:
    bold: bool = False
    dimmed: bool = False


NEUTRAL = Emphasis()


@dataclass
class SelectionState:
    """Click-toggled selection plus at most one hovered identifier."""

    selected: set[str] = field(default_factory=set)
    hovered: str | None = None

    def toggle_select(self, identifier: str) -> bool:
        if identifier in self.selected:
            self.selected.discard(identifier)
            return False
        self.selected.add(identifier)
        return True

    def set_hover(self, identifier: str | None) -> None:
        self.hovered = identifier

    def is_selected(self, identifier: str) -> bool:
        return identifier in self.selected

    @property
    def has_focus(self) -> bool:
        return bool(self.selected) or self.hovered is not None

    def emphasis_for(self, identifier: str) -> Emphasis:
        if identifier in self.selected or identifier == self.hovered:
            return Emphasis(bold=True)
        if self.has_focus:
            return Emphasis(dimmed=True)
        return NEUTRAL

    def reset(self) -> None:
        self.selected.clear()
        self.hovered = None
