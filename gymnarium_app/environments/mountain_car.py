"""Classic Gym MountainCar: an underpowered car has to swing up to the flag.

Observation ``[position, velocity]``; actions 0 (push left), 1 (no push),
2 (push right); reward -1 per step. The episode ends at the flag (with at
least `goal_velocity`) or after `MAX_EPISODE_STEPS` steps.
"""
from __future__ import annotations

import math
from typing import Any, Dict, FrozenSet

import numpy as np

from ..errors import DomainError
from ..simulator.base import DiscreteSpace, Environment, StepResult

__all__ = ["MountainCar"]

MIN_POSITION = -1.2
MAX_POSITION = 0.6
MAX_SPEED = 0.07
GOAL_POSITION = 0.5
FORCE = 0.001
GRAVITY = 0.0025
MAX_EPISODE_STEPS = 200


def _height(position):
    return np.sin(3 * position) * 0.45 + 0.55


class MountainCar(Environment):
    action_space = DiscreteSpace(3)
    suggested_rendered_steps_per_second = 60.0

    def __init__(self, goal_velocity: float = 0.0):
        self.goal_velocity = float(goal_velocity)
        self.position = 0.0
        self.velocity = 0.0
        self.steps = 0
        self._rng = np.random.default_rng()

    # ------------------------------------------------------------------
    # Environment interface
    # ------------------------------------------------------------------
    def reseed(self, seed: np.random.SeedSequence) -> None:
        self._rng = np.random.default_rng(seed)

    def reset(self) -> np.ndarray:
        self.position = float(self._rng.uniform(-0.6, -0.4))
        self.velocity = 0.0
        self.steps = 0
        return self.state()

    def state(self) -> np.ndarray:
        return np.array([self.position, self.velocity])

    def step(self, action) -> StepResult:
        action = self.action_space.validate(action)

        velocity = self.velocity + (action - 1) * FORCE + math.cos(3 * self.position) * (-GRAVITY)
        velocity = min(max(velocity, -MAX_SPEED), MAX_SPEED)
        position = min(max(self.position + velocity, MIN_POSITION), MAX_POSITION)
        if position == MIN_POSITION and velocity < 0:
            velocity = 0.0

        self.position, self.velocity = position, velocity
        self.steps += 1

        reached_goal = position >= GOAL_POSITION and velocity >= self.goal_velocity
        truncated = self.steps >= MAX_EPISODE_STEPS
        info = {"reached_goal": reached_goal, "truncated": truncated and not reached_goal}
        return self.state(), -1.0, reached_goal or truncated, info

    def store(self) -> Dict[str, Any]:
        return {
            "goal_velocity": self.goal_velocity,
            "position": self.position,
            "velocity": self.velocity,
            "steps": self.steps,
            "rng": self._rng.bit_generator.state,
        }

    def load(self, data: Dict[str, Any]) -> None:
        try:
            self.goal_velocity = float(data["goal_velocity"])
            self.position = float(data["position"])
            self.velocity = float(data["velocity"])
            self.steps = int(data["steps"])
            rng = np.random.default_rng()
            rng.bit_generator.state = data["rng"]
        except (KeyError, TypeError, ValueError) as exc:
            raise DomainError(f"Invalid MountainCar state: {exc}") from exc
        self._rng = rng

    # ------------------------------------------------------------------
    # Drawing & input
    # ------------------------------------------------------------------
    def draw(self, ax) -> None:
        xs = np.linspace(MIN_POSITION, MAX_POSITION, 100)
        ax.plot(xs, _height(xs), color="black", lw=1.5)
        ax.plot([GOAL_POSITION, GOAL_POSITION], [_height(GOAL_POSITION), _height(GOAL_POSITION) + 0.1], color="black")
        ax.fill(
            [GOAL_POSITION, GOAL_POSITION, GOAL_POSITION + 0.05],
            [_height(GOAL_POSITION) + 0.1, _height(GOAL_POSITION) + 0.07, _height(GOAL_POSITION) + 0.085],
            color="gold",
        )
        ax.scatter([self.position], [_height(self.position)], s=120, color="tab:blue", zorder=3)
        ax.set_xlim(MIN_POSITION, MAX_POSITION)
        ax.set_ylim(0.0, 1.1)
        ax.set_xlabel("position")
        ax.set_title(f"MountainCar (velocity {self.velocity:+.4f})")
        ax.grid(True, ls=":", lw=0.5)

    def action_from_keys(self, keys: FrozenSet[str]) -> int:
        left, right = "left" in keys, "right" in keys
        if left and not right:
            return 0
        if right and not left:
            return 2
        return 1
