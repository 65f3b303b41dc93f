"""Category rule sets and first-match classification of identifiers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Protocol


class CategorySource(Protocol):
    name: str
    display_name: str | None
    members: list[str]
    color: str


@dataclass(frozen=True)
class CategoryRule:
    name: str
    color: str
    members: tuple[str, ...] = ()
    display_name: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.name


@dataclass(frozen=True)
class CategoryRuleSet:
    """Ordered rules; earlier rules win when an identifier is declared more than once."""

    rules: tuple[CategoryRule, ...] = ()

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def get(self, name: str) -> CategoryRule:
        for rule in self.rules:
            if rule.name == name:
                return rule
        raise KeyError(name)

    def with_members(self, name: str, members: Iterable[str] | str) -> CategoryRuleSet:
        text = members if isinstance(members, str) else ",".join(members)
        return self._replace_rule(name, members=tuple(parse_member_list(text)))

    def with_color(self, name: str, color: str) -> CategoryRuleSet:
        return self._replace_rule(name, color=color)

    def declared_identifiers(self) -> dict[str, CategoryRule]:
        """Every declared identifier mapped to its winning rule, in rule then member order."""
        winners: dict[str, CategoryRule] = {}
        for rule in self.rules:
            for member in rule.members:
                winners.setdefault(member, rule)
        return winners

    def _replace_rule(self, name: str, **changes: object) -> CategoryRuleSet:
        self.get(name)
        return CategoryRuleSet(
            rules=tuple(
                replace(rule, **changes) if rule.name == name else rule for rule in self.rules
            )
        )


def parse_member_list(text: str) -> list[str]:
    """Split comma-separated identifiers, trimming blanks and dropping empty or repeated tokens."""
    members: list[str] = []
    for token in text.split(","):
        value = token.strip()
        if value and value not in members:
            members.append(value)
    return members


def build_rule_set(categories: Iterable[CategorySource]) -> CategoryRuleSet:
    return CategoryRuleSet(
        rules=tuple(
            CategoryRule(
                name=category.name,
                color=category.color,
                members=tuple(category.members),
                display_name=category.display_name,
            )
            for category in categories
        )
    )


def classify(
    identifiers: Iterable[str],
    rule_set: CategoryRuleSet,
) -> dict[str, CategoryRule | None]:
    """Assign each identifier its first matching rule, or ``None`` when unmatched."""
    winners = rule_set.declared_identifiers()
    return {identifier: winners.get(identifier) for identifier in identifiers}


def declared_absent(
    observed: Iterable[str],
    rule_set: CategoryRuleSet,
) -> list[tuple[str, CategoryRule]]:
    seen = set(observed)
    return [
        (identifier, rule)
        for identifier, rule in rule_set.declared_identifiers().items()
        if identifier not in seen
    ]
