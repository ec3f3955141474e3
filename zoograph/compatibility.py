"""Pairwise compatibility rules for occupants sharing an enclosure.

The table is closed and evaluated in priority order; the first rule that
matches a pair makes the pair incompatible. Every rule is evaluated in both
orientations, so ``check_compatibility(a, b)`` and ``check_compatibility(b, a)``
always agree. Extending the policy means adding a row to
``COMPATIBILITY_RULES``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, List, Optional

from .schemas import Category, Occupant

# Species are compared case-insensitively.
PREDATOR_RIVALS: FrozenSet[FrozenSet[str]] = frozenset(
    {
        frozenset({"lion", "tiger"}),
        frozenset({"wolf", "bear"}),
    }
)

BIRD_CONFLICTS: FrozenSet[FrozenSet[str]] = frozenset(
    {
        frozenset({"eagle", "parrot"}),
        frozenset({"owl", "crow"}),
    }
)

AGGRESSIVE_FISH: FrozenSet[str] = frozenset({"piranha"})

WARM_BLOODED = frozenset({Category.MAMMAL, Category.BIRD})
ARACHNID_PREY = frozenset({Category.INSECT, Category.AMPHIBIAN, Category.FISH})


def _species(occupant: Occupant) -> str:
    return occupant.species.strip().casefold()


def _rival_pair(pairs: FrozenSet[FrozenSet[str]]) -> Callable[[Occupant, Occupant], bool]:
    def match(a: Occupant, b: Occupant) -> bool:
        return frozenset({_species(a), _species(b)}) in pairs

    return match


def _reptile_with_warm_blooded(a: Occupant, b: Occupant) -> bool:
    return a.category is Category.REPTILE and b.category in WARM_BLOODED


def _aggressive_fish(a: Occupant, b: Occupant) -> bool:
    return (
        a.category is Category.FISH
        and b.category is Category.FISH
        and _species(a) in AGGRESSIVE_FISH
    )


def _amphibian_with_insect(a: Occupant, b: Occupant) -> bool:
    return a.category is Category.AMPHIBIAN and b.category is Category.INSECT


def _arachnid_with_prey(a: Occupant, b: Occupant) -> bool:
    return a.category is Category.ARACHNID and b.category in ARACHNID_PREY


@dataclass(frozen=True)
class CompatibilityRule:
    """One row of the table. ``matches`` is checked in both orientations."""

    name: str
    description: str
    matches: Callable[[Occupant, Occupant], bool]

    def applies(self, a: Occupant, b: Occupant) -> bool:
        return self.matches(a, b) or self.matches(b, a)


COMPATIBILITY_RULES: List[CompatibilityRule] = [
    CompatibilityRule("predator_rivals", "predator species conflict", _rival_pair(PREDATOR_RIVALS)),
    CompatibilityRule("bird_conflict", "aggressive bird pair", _rival_pair(BIRD_CONFLICTS)),
    CompatibilityRule("reptile_vs_warm_blooded", "reptile alongside mammal or bird", _reptile_with_warm_blooded),
    CompatibilityRule("aggressive_fish", "aggressive fish species", _aggressive_fish),
    CompatibilityRule("amphibian_vs_insect", "amphibian alongside insect", _amphibian_with_insect),
    CompatibilityRule("arachnid_vs_small", "arachnid alongside insect, amphibian or fish", _arachnid_with_prey),
]


def validate_rules(rules: Iterable[CompatibilityRule]) -> None:
    """Reject malformed tables. Called once at import time."""
    seen = set()
    for rule in rules:
        if not rule.name or rule.name in seen:
            raise ValueError(f"Compatibility rule names must be unique and non-empty: {rule.name!r}")
        if not callable(rule.matches):
            raise ValueError(f"Compatibility rule {rule.name!r} has no predicate")
        seen.add(rule.name)
    for pairs in (PREDATOR_RIVALS, BIRD_CONFLICTS):
        for pair in pairs:
            if len(pair) != 2:
                raise ValueError(f"Rival pair must name two distinct species: {sorted(pair)}")


validate_rules(COMPATIBILITY_RULES)


def check_compatibility(a: Occupant, b: Occupant) -> Optional[CompatibilityRule]:
    """Return the first rule the pair violates, or None if they may share."""
    for rule in COMPATIBILITY_RULES:
        if rule.applies(a, b):
            return rule
    return None


def are_compatible(a: Occupant, b: Occupant) -> bool:
    return check_compatibility(a, b) is None
