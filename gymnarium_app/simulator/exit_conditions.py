"""Exit predicates polled by the driver before every step.

Any callable ``(environment, agent, visualiser, episode, step) -> bool`` can
be handed to the driver; these are the ones the catalog offers.
"""
from __future__ import annotations

from typing import Callable, Optional

from .base import Agent, Environment, Visualiser

__all__ = ["ExitCondition", "episodes_simulated", "visualiser_closed"]

ExitCondition = Callable[[Environment, Agent, Optional[Visualiser], int, int], bool]


def episodes_simulated(count_of_episodes: int) -> ExitCondition:
    """True once *count_of_episodes* episodes are done or an attached visualiser was closed."""

    def exit_condition(environment, agent, visualiser, episode, step):
        if visualiser is not None and not visualiser.is_open():
            return True
        return episode >= count_of_episodes

    return exit_condition


def visualiser_closed() -> ExitCondition:
    def exit_condition(environment, agent, visualiser, episode, step):
        return not visualiser.is_open()

    return exit_condition
