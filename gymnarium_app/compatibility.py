"""Symmetric compatibility relation between variants of different categories.

The relation is stored once per *unordered* pair of categories: a cell keyed
by ``frozenset({A, B})`` holds the compatible variant pairs as
``frozenset({a, b})``. Asking from either side therefore reads the same cell.
"""
from __future__ import annotations

import itertools
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .catalog import (
    Available,
    AvailableAgent,
    AvailableExitCondition,
    AvailableVisualiser,
    Category,
    variants,
)
from .errors import CompatibilityError

__all__ = [
    "INTERACTIVE_ORDER",
    "CompatibilityMatrix",
    "default_matrix",
]

# Order in which the interactive front-end asks for the categories.
INTERACTIVE_ORDER = (
    Category.ENVIRONMENT,
    Category.VISUALISER,
    Category.AGENT,
    Category.EXIT_CONDITION,
)

CategoryPair = FrozenSet[Category]
VariantPair = FrozenSet[Available]


class CompatibilityMatrix:
    """Which variants of one category may be combined with which of another."""

    def __init__(self) -> None:
        self._cells: Dict[CategoryPair, FrozenSet[VariantPair]] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def declare(self, first: Category, second: Category, pairs: Iterable[Iterable[Available]]) -> None:
        """Set the cell for the unordered pair (*first*, *second*)."""
        if first is second:
            raise ValueError("Compatibility is only declared between different categories")
        cell = set()
        for pair in pairs:
            pair = frozenset(pair)
            categories = {variant.category for variant in pair}
            if len(pair) != 2 or categories != {first, second}:
                raise ValueError(
                    f"Edge {sorted(map(str, pair))} does not join {first.name} and {second.name}"
                )
            cell.add(pair)
        self._cells[frozenset((first, second))] = frozenset(cell)

    def declare_all(self, first: Category, second: Category) -> None:
        """Every variant of *first* supports every variant of *second*."""
        self.declare(first, second, itertools.product(variants(first), variants(second)))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def supports(self, a: Available, b: Available) -> bool:
        cell = self._cells.get(frozenset((a.category, b.category)))
        if cell is None:
            raise KeyError(f"No compatibility declared between {a.category.name} and {b.category.name}")
        return frozenset((a, b)) in cell

    def compatible(self, variant: Available, category: Category) -> FrozenSet[Available]:
        """Variants of *category* that may be paired with *variant*."""
        return frozenset(other for other in variants(category) if self.supports(variant, other))

    def offered(self, category: Category, chosen: Sequence[Available]) -> List[Available]:
        """Variants of *category* supported by every already *chosen* variant, in catalog order."""
        return [
            candidate
            for candidate in variants(category)
            if all(self.supports(previous, candidate) for previous in chosen)
        ]

    def first_conflict(self, chosen: Sequence[Available]) -> Optional[Tuple[Available, Available]]:
        for a, b in itertools.combinations(chosen, 2):
            if a.category is not b.category and not self.supports(a, b):
                return a, b
        return None

    def check(self, chosen: Sequence[Available]) -> None:
        """Raise CompatibilityError naming the first unsupported pair."""
        conflict = self.first_conflict(chosen)
        if conflict is not None:
            a, b = conflict
            raise CompatibilityError(
                f'{a.category.name.lower().replace("_", " ")} "{a.nice_name}" does not support '
                f'{b.category.name.lower().replace("_", " ")} "{b.nice_name}"'
            )

    def is_symmetric(self) -> bool:
        """True if a.supports(b) == b.supports(a) for every cross-category pair."""
        for first, second in itertools.combinations(Category, 2):
            for a in variants(first):
                for b in variants(second):
                    if (b in self.compatible(a, second)) != (a in self.compatible(b, first)):
                        return False
        return True


def default_matrix() -> CompatibilityMatrix:
    """The relation shipped with the application.

    The `Input` agent reads keys from the visualiser window and
    `visualiser is closed` watches it, so both need the matplotlib visualiser.
    """
    matrix = CompatibilityMatrix()
    matrix.declare_all(Category.ENVIRONMENT, Category.AGENT)
    matrix.declare_all(Category.ENVIRONMENT, Category.VISUALISER)
    matrix.declare_all(Category.ENVIRONMENT, Category.EXIT_CONDITION)
    matrix.declare_all(Category.AGENT, Category.EXIT_CONDITION)
    matrix.declare(
        Category.AGENT,
        Category.VISUALISER,
        [
            (AvailableAgent.RANDOM, AvailableVisualiser.NONE),
            (AvailableAgent.RANDOM, AvailableVisualiser.MATPLOTLIB_2D),
            (AvailableAgent.INPUT, AvailableVisualiser.MATPLOTLIB_2D),
        ],
    )
    matrix.declare(
        Category.VISUALISER,
        Category.EXIT_CONDITION,
        [
            (AvailableVisualiser.NONE, AvailableExitCondition.EPISODES_SIMULATED),
            (AvailableVisualiser.MATPLOTLIB_2D, AvailableExitCondition.EPISODES_SIMULATED),
            (AvailableVisualiser.MATPLOTLIB_2D, AvailableExitCondition.VISUALISER_CLOSED),
        ],
    )
    return matrix
