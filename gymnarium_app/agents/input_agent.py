"""Agent controlled by a human through the visualiser's keyboard input."""
from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet

from ..errors import DomainError
from ..simulator.base import Agent, KeyboardInput

__all__ = ["InputAgent"]


class InputAgent(Agent):
    def __init__(self, keyboard: KeyboardInput, to_action: Callable[[FrozenSet[str]], Any]):
        self.keyboard = keyboard
        self.to_action = to_action

    def reseed(self, seed) -> None:
        pass

    def reset(self) -> None:
        pass

    def choose_action(self, observation):
        return self.to_action(self.keyboard.pressed_keys())

    def process_reward(self, observation, new_observation, reward, done) -> None:
        pass

    def store(self) -> Dict[str, Any]:
        return {}

    def load(self, data: Dict[str, Any]) -> None:
        if data not in ({}, None):
            raise DomainError(f"InputAgent has no state to load, got {data!r}")
