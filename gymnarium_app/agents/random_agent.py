"""Agent that samples uniformly from the environment's action space."""
from __future__ import annotations

from typing import Any, Dict

import numpy as np

from ..errors import DomainError
from ..simulator.base import Agent, DiscreteSpace

__all__ = ["RandomAgent"]


class RandomAgent(Agent):
    """Ignores observations and rewards; only its generator state is persisted."""

    def __init__(self, action_space: DiscreteSpace):
        self.action_space = action_space
        self._rng = np.random.default_rng()

    def reseed(self, seed: np.random.SeedSequence) -> None:
        self._rng = np.random.default_rng(seed)

    def reset(self) -> None:
        pass

    def choose_action(self, observation: np.ndarray) -> int:
        return self.action_space.sample(self._rng)

    def process_reward(self, observation, new_observation, reward, done) -> None:
        pass

    def store(self) -> Dict[str, Any]:
        return {"rng": self._rng.bit_generator.state}

    def load(self, data: Dict[str, Any]) -> None:
        try:
            rng = np.random.default_rng()
            rng.bit_generator.state = data["rng"]
        except (KeyError, TypeError, ValueError) as exc:
            raise DomainError(f"Invalid RandomAgent state: {exc}") from exc
        self._rng = rng
