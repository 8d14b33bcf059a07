"""
Builds concrete components from resolved selections.

Each selection dataclass has exactly one builder, registered with
`register_builder`. `build_components` calls them in dependency order
(visualiser, environment, agent, exit condition) so that the single
`SimulationDriver` can run any legal combination.

Usage Example:
--------------

from gymnarium_app.factory import register_builder

@register_builder(MySelection)
def build_my_environment(selection, built):
    return MyEnvironment(selection.some_option)
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type

from .agents import InputAgent, RandomAgent
from .environments import AiLearnsToDrive, MountainCar
from .errors import CompatibilityError
from .pipeline import Selections
from .selection import (
    CodeBulletAiLearnsToDrive,
    EpisodesSimulated,
    GymMountainCar,
    InputAgentSelection,
    Matplotlib2dVisualiser,
    NoVisualiser,
    RandomAgentSelection,
    Selected,
    VisualiserClosed,
)
from .simulator.base import Agent, Environment, Visualiser
from .simulator.exit_conditions import ExitCondition, episodes_simulated, visualiser_closed

__all__ = ["Components", "register_builder", "get_builder", "build_components"]


@dataclass
class Components:
    """Everything the driver needs; filled in step by step while building."""

    environment: Optional[Environment] = None
    agent: Optional[Agent] = None
    visualiser: Optional[Visualiser] = None
    exit_condition: Optional[ExitCondition] = None


Builder = Callable[[Any, Components], Any]

# Builder registry: maps selection types to builder functions
_BUILDERS: Dict[Type[Selected], Builder] = {}


def register_builder(selection_cls: Type[Selected]):
    """
    Decorator registering the builder of one selection type.
    Raises if the type already has a builder.
    """
    if not inspect.isclass(selection_cls) or not issubclass(selection_cls, Selected):
        raise TypeError("@register_builder needs a Selected subclass")

    def decorator(func: Builder) -> Builder:
        if selection_cls in _BUILDERS:
            raise KeyError(f"Builder for '{selection_cls.__name__}' is already registered")
        _BUILDERS[selection_cls] = func
        return func

    return decorator


def get_builder(selection: Selected) -> Builder:
    try:
        return _BUILDERS[type(selection)]
    except KeyError as exc:
        raise KeyError(
            f"No builder registered for {type(selection).__name__}. Available: {[c.__name__ for c in _BUILDERS]}"
        ) from exc


def build_components(selections: Selections) -> Components:
    """Instantiate the four selections.

    If a later builder fails the already built visualiser is closed again.
    """
    built = Components()
    built.visualiser = get_builder(selections.visualiser)(selections.visualiser, built)
    try:
        built.environment = get_builder(selections.environment)(selections.environment, built)
        built.agent = get_builder(selections.agent)(selections.agent, built)
        built.exit_condition = get_builder(selections.exit_condition)(selections.exit_condition, built)
    except BaseException:
        if built.visualiser is not None:
            built.visualiser.close()
        raise
    return built


# ------------------------------------------------------------------
# Environments
# ------------------------------------------------------------------

@register_builder(GymMountainCar)
def _build_mountain_car(selection: GymMountainCar, built: Components) -> Environment:
    return MountainCar(goal_velocity=selection.goal_velocity)


@register_builder(CodeBulletAiLearnsToDrive)
def _build_ai_learns_to_drive(selection: CodeBulletAiLearnsToDrive, built: Components) -> Environment:
    return AiLearnsToDrive(
        sensor_lines_visible=selection.sensor_lines_visible,
        track_visible=selection.track_visible,
    )


# ------------------------------------------------------------------
# Agents
# ------------------------------------------------------------------

@register_builder(RandomAgentSelection)
def _build_random_agent(selection: RandomAgentSelection, built: Components) -> Agent:
    return RandomAgent(built.environment.action_space)


@register_builder(InputAgentSelection)
def _build_input_agent(selection: InputAgentSelection, built: Components) -> Agent:
    if built.visualiser is None:
        raise CompatibilityError("The Input agent needs a visualiser to read keys from")
    return InputAgent(built.visualiser.input_provider(), built.environment.action_from_keys)


# ------------------------------------------------------------------
# Visualisers
# ------------------------------------------------------------------

@register_builder(NoVisualiser)
def _build_no_visualiser(selection: NoVisualiser, built: Components) -> None:
    return None


@register_builder(Matplotlib2dVisualiser)
def _build_matplotlib_visualiser(selection: Matplotlib2dVisualiser, built: Components) -> Visualiser:
    # pyplot is only imported once a window is requested
    from .simulator.visualize import MatplotlibVisualiser

    return MatplotlibVisualiser(selection.window_title, selection.window_dimension)


# ------------------------------------------------------------------
# Exit conditions
# ------------------------------------------------------------------

@register_builder(EpisodesSimulated)
def _build_episodes_simulated(selection: EpisodesSimulated, built: Components) -> ExitCondition:
    return episodes_simulated(selection.count_of_episodes)


@register_builder(VisualiserClosed)
def _build_visualiser_closed(selection: VisualiserClosed, built: Components) -> ExitCondition:
    if built.visualiser is None:
        raise CompatibilityError('The exit condition "visualiser is closed" needs a visualiser')
    return visualiser_closed()
