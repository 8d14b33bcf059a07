"""Contracts the simulation driver is written against.

Concrete environments, agents and visualisers subclass these; the driver
never looks at anything else.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Tuple

import numpy as np

from ..errors import DomainError

__all__ = [
    "DiscreteSpace",
    "Environment",
    "Agent",
    "Visualiser",
    "KeyboardInput",
    "StepResult",
]

# (new observation, reward, done, diagnostic info)
StepResult = Tuple[np.ndarray, float, bool, Dict[str, Any]]


@dataclass(frozen=True)
class DiscreteSpace:
    """Actions ``0 .. n-1``."""

    n: int

    def sample(self, rng: np.random.Generator) -> int:
        return int(rng.integers(self.n))

    def contains(self, action) -> bool:
        return isinstance(action, (int, np.integer)) and 0 <= int(action) < self.n

    def validate(self, action) -> int:
        if not self.contains(action):
            raise DomainError(f"Action {action!r} is not within Discrete({self.n})")
        return int(action)


class Environment(ABC):
    """Something that can be reset and stepped with actions."""

    action_space: DiscreteSpace
    # None lets the driver fall back to its default frame rate.
    suggested_rendered_steps_per_second: Optional[float] = None

    @abstractmethod
    def reseed(self, seed: np.random.SeedSequence) -> None:
        """Replace the random number generator."""

    @abstractmethod
    def reset(self) -> np.ndarray:
        """Start a new episode and return its first observation."""

    @abstractmethod
    def state(self) -> np.ndarray:
        """Current observation without changing anything."""

    @abstractmethod
    def step(self, action) -> StepResult:
        """Apply *action*; raises DomainError for an invalid one."""

    @abstractmethod
    def store(self) -> Dict[str, Any]:
        """Plain-data snapshot (dicts, lists, numbers, strings)."""

    @abstractmethod
    def load(self, data: Dict[str, Any]) -> None:
        """Restore a snapshot produced by `store`."""

    def close(self) -> None:
        pass

    def draw(self, ax) -> None:
        """Draw the current state on a matplotlib ``Axes``."""
        raise NotImplementedError(f"{type(self).__name__} cannot be drawn")

    def action_from_keys(self, keys: FrozenSet[str]):
        """Map the currently pressed keyboard keys to an action."""
        raise NotImplementedError(f"{type(self).__name__} has no keyboard mapping")


class Agent(ABC):
    """Chooses actions from observations and learns from rewards."""

    @abstractmethod
    def reseed(self, seed: np.random.SeedSequence) -> None:
        ...

    @abstractmethod
    def reset(self) -> None:
        ...

    @abstractmethod
    def choose_action(self, observation: np.ndarray):
        ...

    @abstractmethod
    def process_reward(
        self, observation: np.ndarray, new_observation: np.ndarray, reward: float, done: bool
    ) -> None:
        ...

    @abstractmethod
    def store(self) -> Dict[str, Any]:
        ...

    @abstractmethod
    def load(self, data: Dict[str, Any]) -> None:
        ...

    def close(self) -> None:
        pass


class KeyboardInput:
    """Set of keys currently held down, fed by a visualiser."""

    def __init__(self) -> None:
        self._pressed: set[str] = set()

    def press(self, key: Optional[str]) -> None:
        if key:
            self._pressed.add(key)

    def release(self, key: Optional[str]) -> None:
        if key:
            self._pressed.discard(key)

    def pressed_keys(self) -> FrozenSet[str]:
        return frozenset(self._pressed)


class Visualiser(ABC):
    """Renders an environment once per step."""

    @abstractmethod
    def render(self, environment: Environment) -> None:
        ...

    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def input_provider(self) -> KeyboardInput:
        raise NotImplementedError(f"{type(self).__name__} does not provide keyboard input")
