"""Resolved, typed counterparts of the catalog variants.

Each category has a small closed family of frozen dataclasses (one per
variant) whose fields are the variant's options, already parsed. `resolve`
builds one from a variant and a configuration map; `corresponding_available`
goes back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import ClassVar, Dict, Mapping, Tuple, Type

from .catalog import (
    Available,
    AvailableAgent,
    AvailableEnvironment,
    AvailableExitCondition,
    AvailableVisualiser,
)
from .errors import ParseError

__all__ = [
    "Selected",
    "SelectedEnvironment",
    "GymMountainCar",
    "CodeBulletAiLearnsToDrive",
    "SelectedAgent",
    "RandomAgentSelection",
    "InputAgentSelection",
    "SelectedVisualiser",
    "NoVisualiser",
    "Matplotlib2dVisualiser",
    "SelectedExitCondition",
    "EpisodesSimulated",
    "VisualiserClosed",
    "resolve",
    "selection_type",
]

logger = logging.getLogger(__name__)

# Variant -> selection dataclass
_SELECTION_TYPES: Dict[Available, Type["Selected"]] = {}


def _selects(variant: Available):
    def decorator(cls: Type["Selected"]) -> Type["Selected"]:
        if variant in _SELECTION_TYPES:
            raise KeyError(f"Variant '{variant}' already has a selection type")
        cls.available = variant
        _SELECTION_TYPES[variant] = cls
        return cls

    return decorator


def selection_type(variant: Available) -> Type["Selected"]:
    return _SELECTION_TYPES[variant]


class Selected:
    """Common base of every selection."""

    available: ClassVar[Available]

    @property
    def corresponding_available(self) -> Available:
        return type(self).available


# ------------------------------------------------------------------
# Environments
# ------------------------------------------------------------------

class SelectedEnvironment(Selected):
    pass


@_selects(AvailableEnvironment.GYM_MOUNTAIN_CAR)
@dataclass(frozen=True)
class GymMountainCar(SelectedEnvironment):
    goal_velocity: float


@_selects(AvailableEnvironment.CODE_BULLET_AI_LEARNS_TO_DRIVE)
@dataclass(frozen=True)
class CodeBulletAiLearnsToDrive(SelectedEnvironment):
    sensor_lines_visible: bool
    track_visible: bool


# ------------------------------------------------------------------
# Agents
# ------------------------------------------------------------------

class SelectedAgent(Selected):
    pass


@_selects(AvailableAgent.RANDOM)
@dataclass(frozen=True)
class RandomAgentSelection(SelectedAgent):
    pass


@_selects(AvailableAgent.INPUT)
@dataclass(frozen=True)
class InputAgentSelection(SelectedAgent):
    pass


# ------------------------------------------------------------------
# Visualisers
# ------------------------------------------------------------------

class SelectedVisualiser(Selected):
    pass


@_selects(AvailableVisualiser.NONE)
@dataclass(frozen=True)
class NoVisualiser(SelectedVisualiser):
    pass


@_selects(AvailableVisualiser.MATPLOTLIB_2D)
@dataclass(frozen=True)
class Matplotlib2dVisualiser(SelectedVisualiser):
    window_title: str
    window_dimension: Tuple[int, int]


# ------------------------------------------------------------------
# Exit conditions
# ------------------------------------------------------------------

class SelectedExitCondition(Selected):
    pass


@_selects(AvailableExitCondition.EPISODES_SIMULATED)
@dataclass(frozen=True)
class EpisodesSimulated(SelectedExitCondition):
    count_of_episodes: int


@_selects(AvailableExitCondition.VISUALISER_CLOSED)
@dataclass(frozen=True)
class VisualiserClosed(SelectedExitCondition):
    pass


# ------------------------------------------------------------------
# Resolver
# ------------------------------------------------------------------

def resolve(variant: Available, configuration: Mapping[str, str]) -> Selected:
    """Parse every option of *variant* from *configuration* or its default.

    Options are handled in declared order and the first malformed value
    aborts with `ParseError`. Keys the variant does not declare are ignored.
    """
    values = {}
    for descriptor in variant.options:
        raw = configuration.get(descriptor.name, descriptor.default)
        try:
            values[descriptor.name] = descriptor.type.parse(raw)
        except ValueError as exc:
            raise ParseError(descriptor.name, raw, exc) from exc

    leftover = set(configuration) - set(values)
    if leftover:
        logger.debug("Ignoring unknown options %s for %s", sorted(leftover), variant)

    cls = selection_type(variant)
    expected = {f.name for f in fields(cls)}
    if expected != set(values):  # pragma: no cover - catalog and dataclasses disagree
        raise TypeError(f"{cls.__name__} fields {sorted(expected)} do not match options of {variant}")
    return cls(**values)
