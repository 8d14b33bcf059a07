"""Car on an oval track, after Code Bullet's "AI Learns to DRIVE".

The car sees the track only through distance sensors (rays at fixed angles
relative to its heading). Crossing the next reward gate earns 1.0; touching a
wall ends the episode, as does running out of steps.

Observation: ``[speed / MAX_SPEED, sensor_0, ..., sensor_7]`` with every
sensor reading scaled to ``[0, 1]`` (1 means nothing within range).
Actions: ``3 * (steer + 1) + (throttle + 1)`` for steer and throttle in
``{-1, 0, 1}``, i.e. 9 discrete actions.
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet

import numpy as np

from ..errors import DomainError
from ..simulator.base import DiscreteSpace, Environment, StepResult

__all__ = ["AiLearnsToDrive", "encode_action"]

OUTER_RADII = (24.0, 14.0)
INNER_RADII = (14.0, 5.0)
N_TRACK_POINTS = 48
N_GATES = 16
START_GATE = 12  # bottom of the oval, cars drive counter-clockwise

ACCELERATION = 0.05
FRICTION = 0.02
MAX_SPEED = 1.0
TURN_RATE = 0.08
SENSOR_RANGE = 12.0
SENSOR_ANGLES = np.deg2rad([-90.0, -45.0, -22.5, 0.0, 22.5, 45.0, 90.0, 180.0])
MAX_EPISODE_STEPS = 1000


def encode_action(steer: int, throttle: int) -> int:
    return 3 * (steer + 1) + (throttle + 1)


def _ellipse(radii, angles) -> np.ndarray:
    return np.stack([radii[0] * np.cos(angles), radii[1] * np.sin(angles)], axis=-1)


def _closed_polyline_segments(points: np.ndarray) -> np.ndarray:
    return np.stack([points, np.roll(points, -1, axis=0)], axis=1)


def _hit_fractions(origin: np.ndarray, delta: np.ndarray, segments: np.ndarray) -> np.ndarray:
    """Fraction t >= 0 along ``origin + t * delta`` at which each segment is met (inf if never)."""
    start = segments[:, 0, :]
    direction = segments[:, 1, :] - start
    offset = start - origin
    denom = delta[0] * direction[:, 1] - delta[1] * direction[:, 0]
    with np.errstate(divide="ignore", invalid="ignore"):
        t = (offset[:, 0] * direction[:, 1] - offset[:, 1] * direction[:, 0]) / denom
        u = (offset[:, 0] * delta[1] - offset[:, 1] * delta[0]) / denom
    hit = (denom != 0) & (t >= 0) & (u >= 0) & (u <= 1)
    return np.where(hit, t, np.inf)


_TRACK_ANGLES = np.linspace(0.0, 2 * np.pi, N_TRACK_POINTS, endpoint=False)
_GATE_ANGLES = np.linspace(0.0, 2 * np.pi, N_GATES, endpoint=False)
OUTER_WALL = _closed_polyline_segments(_ellipse(OUTER_RADII, _TRACK_ANGLES))
INNER_WALL = _closed_polyline_segments(_ellipse(INNER_RADII, _TRACK_ANGLES))
WALLS = np.concatenate([OUTER_WALL, INNER_WALL])
GATES = np.stack([_ellipse(INNER_RADII, _GATE_ANGLES), _ellipse(OUTER_RADII, _GATE_ANGLES)], axis=1)


class AiLearnsToDrive(Environment):
    action_space = DiscreteSpace(9)

    def __init__(self, sensor_lines_visible: bool = False, track_visible: bool = True):
        self.sensor_lines_visible = sensor_lines_visible
        self.track_visible = track_visible
        self.position = GATES[START_GATE].mean(axis=0)
        self.heading = 0.0
        self.speed = 0.0
        self.next_gate = (START_GATE + 1) % N_GATES
        self.gates_passed = 0
        self.steps = 0
        self.crashed = False
        self._rng = np.random.default_rng()

    # ------------------------------------------------------------------
    # Environment interface
    # ------------------------------------------------------------------
    def reseed(self, seed: np.random.SeedSequence) -> None:
        self._rng = np.random.default_rng(seed)

    def reset(self) -> np.ndarray:
        self.position = GATES[START_GATE].mean(axis=0)
        self.heading = float(self._rng.uniform(-0.05, 0.05))
        self.speed = 0.0
        self.next_gate = (START_GATE + 1) % N_GATES
        self.gates_passed = 0
        self.steps = 0
        self.crashed = False
        return self.state()

    def state(self) -> np.ndarray:
        return np.concatenate([[self.speed / MAX_SPEED], self.sensor_readings() / SENSOR_RANGE])

    def sensor_readings(self) -> np.ndarray:
        """Distance to the nearest wall along every sensor ray, capped at SENSOR_RANGE."""
        readings = np.empty(len(SENSOR_ANGLES))
        for i, angle in enumerate(SENSOR_ANGLES):
            direction = np.array([np.cos(self.heading + angle), np.sin(self.heading + angle)])
            t = _hit_fractions(self.position, direction * SENSOR_RANGE, WALLS).min()
            readings[i] = min(t, 1.0) * SENSOR_RANGE
        return readings

    def step(self, action) -> StepResult:
        action = self.action_space.validate(action)
        if self.crashed:
            # a crashed car stays where it is until the next reset
            self.steps += 1
            return self.state(), 0.0, True, {"crashed": True, "gates_passed": self.gates_passed}
        steer, throttle = action // 3 - 1, action % 3 - 1

        self.heading += steer * TURN_RATE
        self.speed = float(np.clip((self.speed + throttle * ACCELERATION) * (1 - FRICTION), -MAX_SPEED / 2, MAX_SPEED))
        delta = self.speed * np.array([np.cos(self.heading), np.sin(self.heading)])
        self.steps += 1

        reward = 0.0
        wall_t = _hit_fractions(self.position, delta, WALLS).min()
        if wall_t <= 1.0:
            # stop just short of the wall
            self.position = self.position + delta * max(wall_t - 1e-3, 0.0)
            self.crashed = True
        else:
            gate_t = _hit_fractions(self.position, delta, GATES[self.next_gate][None]).min()
            if gate_t <= 1.0:
                reward = 1.0
                self.gates_passed += 1
                self.next_gate = (self.next_gate + 1) % N_GATES
            self.position = self.position + delta

        done = self.crashed or self.steps >= MAX_EPISODE_STEPS
        info = {"crashed": self.crashed, "gates_passed": self.gates_passed}
        return self.state(), reward, done, info

    def store(self) -> Dict[str, Any]:
        return {
            "sensor_lines_visible": self.sensor_lines_visible,
            "track_visible": self.track_visible,
            "position": [float(v) for v in self.position],
            "heading": float(self.heading),
            "speed": self.speed,
            "next_gate": self.next_gate,
            "gates_passed": self.gates_passed,
            "steps": self.steps,
            "crashed": self.crashed,
            "rng": self._rng.bit_generator.state,
        }

    def load(self, data: Dict[str, Any]) -> None:
        try:
            position = np.asarray(data["position"], dtype=float)
            if position.shape != (2,):
                raise ValueError(f"position must hold two numbers, got {data['position']!r}")
            rng = np.random.default_rng()
            rng.bit_generator.state = data["rng"]
            self.sensor_lines_visible = bool(data["sensor_lines_visible"])
            self.track_visible = bool(data["track_visible"])
            self.heading = float(data["heading"])
            self.speed = float(data["speed"])
            self.next_gate = int(data["next_gate"]) % N_GATES
            self.gates_passed = int(data["gates_passed"])
            self.steps = int(data["steps"])
            self.crashed = bool(data["crashed"])
        except (KeyError, TypeError, ValueError) as exc:
            raise DomainError(f"Invalid AiLearnsToDrive state: {exc}") from exc
        self.position = position
        self._rng = rng

    # ------------------------------------------------------------------
    # Drawing & input
    # ------------------------------------------------------------------
    def draw(self, ax) -> None:
        if self.track_visible:
            for wall in (OUTER_WALL, INNER_WALL):
                points = wall[:, 0, :]
                ax.fill(points[:, 0], points[:, 1], fill=False, edgecolor="black", lw=1.5)
            gate = GATES[self.next_gate]
            ax.plot(gate[:, 0], gate[:, 1], color="tab:green", lw=1.0, ls="--")

        if self.sensor_lines_visible:
            for angle, distance in zip(SENSOR_ANGLES, self.sensor_readings()):
                end = self.position + distance * np.array(
                    [np.cos(self.heading + angle), np.sin(self.heading + angle)]
                )
                ax.plot([self.position[0], end[0]], [self.position[1], end[1]], color="tab:red", lw=0.8)

        colour = "tab:gray" if self.crashed else "tab:blue"
        ax.plot(
            self.position[0],
            self.position[1],
            marker=(3, 0, np.rad2deg(self.heading) - 90),
            markersize=12,
            color=colour,
        )
        ax.set_xlim(-OUTER_RADII[0] - 1, OUTER_RADII[0] + 1)
        ax.set_ylim(-OUTER_RADII[1] - 1, OUTER_RADII[1] + 1)
        ax.set_aspect("equal")
        ax.set_title(f"AI Learns to DRIVE (gates passed: {self.gates_passed})")

    def action_from_keys(self, keys: FrozenSet[str]) -> int:
        steer = int("left" in keys) - int("right" in keys)
        throttle = int("up" in keys) - int("down" in keys)
        return encode_action(steer, throttle)
