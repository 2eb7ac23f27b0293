"""Priority-ordered detection rules.

A detection cascade is a list of independent ``Rule`` objects. The list order
is the precedence contract: ``first_match`` returns the label of the first
rule whose predicate holds, ``all_matches`` returns every matching label in
rule order. Each rule can be exercised on its own in tests.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Rule(Generic[T]):
    """Maps a subject (repo context, file text, ...) to ``label`` when ``predicate`` holds."""

    label: str
    predicate: Callable[[T], bool]

    def matches(self, subject: T) -> bool:
        return self.predicate(subject)


def first_match(rules: Iterable[Rule[T]], subject: T) -> str | None:
    """Return the label of the first matching rule, or None."""
    for rule in rules:
        if rule.matches(subject):
            return rule.label
    return None


def all_matches(rules: Iterable[Rule[T]], subject: T) -> list[str]:
    """Return the labels of every matching rule, in rule order."""
    return [rule.label for rule in rules if rule.matches(subject)]


def text_rule(label: str, pattern: str, flags: int = 0) -> Rule[str]:
    """Rule that searches a regex in a plain text subject."""
    compiled = re.compile(pattern, flags)
    return Rule(label, lambda text: bool(compiled.search(text)))


def dedupe(labels: Iterable[str]) -> list[str]:
    """Drop repeated labels, keeping the first occurrence."""
    return list(dict.fromkeys(labels))
