"""Execution engine that drives one environment/agent pair until an exit predicate fires."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import numpy as np

from ..config import RunOptions, seed_sequence
from ..errors import DriverStateError
from .base import Agent, Environment, Visualiser
from .exit_conditions import ExitCondition
from .persistence import load_state, store_state

__all__ = ["DEFAULT_FPS", "DriverState", "SimulationResult", "SimulationDriver"]

logger = logging.getLogger(__name__)

DEFAULT_FPS = 30.0


class DriverState(Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    DRAINING = "draining"
    TERMINATED = "terminated"


@dataclass
class SimulationResult:
    """Container returned by `SimulationDriver.run`."""

    episodes: int
    steps: int  # within the current, unfinished episode
    total_steps: int
    seed_entropy: object


class SimulationDriver:
    """Steps environment and agent in lockstep.

    Written once against the contracts in `gymnarium_app.simulator.base`; the
    visualiser is optional. Components are owned by the driver for the run
    and closed (agent, environment, visualiser) when it ends, whether it ends
    normally or with an error.
    """

    def __init__(
        self,
        environment: Environment,
        agent: Agent,
        visualiser: Optional[Visualiser],
        exit_condition: ExitCondition,
        options: Optional[RunOptions] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.environment = environment
        self.agent = agent
        self.visualiser = visualiser
        self.exit_condition = exit_condition
        self.options = options or RunOptions()
        self._sleep = sleep

        self.state = DriverState.INITIALIZING
        self.episode = 0
        self.step = 0
        self.total_steps = 0
        self._seed: Optional[np.random.SeedSequence] = None

    # ------------------------------------------------------------------
    # Engine entry-point
    # ------------------------------------------------------------------
    def run(self) -> SimulationResult:
        if self.state is not DriverState.INITIALIZING:
            raise DriverStateError(f"Cannot run a driver that is {self.state.value}")

        try:
            observation = self._initialize()
            self.state = DriverState.RUNNING
            self._loop(observation)
            self.state = DriverState.DRAINING
            self._persist()
        except BaseException:
            self.state = DriverState.DRAINING
            self._close_all()
            self.state = DriverState.TERMINATED
            raise

        close_error = self._close_all()
        self.state = DriverState.TERMINATED
        if close_error is not None:
            raise close_error

        logger.info(
            "Simulation finished after %d episodes (%d steps in total)", self.episode, self.total_steps
        )
        return SimulationResult(
            episodes=self.episode,
            steps=self.step,
            total_steps=self.total_steps,
            seed_entropy=self._seed.entropy if self._seed is not None else None,
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def _initialize(self) -> np.ndarray:
        options = self.options

        if options.environment_load_path:
            load_state(self.environment, options.environment_load_path)
            observation = self.environment.state()
        else:
            self.environment.reseed(self._seed_sequence())
            observation = self.environment.reset()

        if self.visualiser is not None:
            self.visualiser.render(self.environment)

        if options.agent_load_path:
            load_state(self.agent, options.agent_load_path)
        else:
            self.agent.reseed(self._seed_sequence())
            self.agent.reset()

        return observation

    def _loop(self, observation: np.ndarray) -> None:
        options = self.options
        frame_time = 1.0 / self._fps()

        while not self.exit_condition(
            self.environment, self.agent, self.visualiser, self.episode, self.step
        ):
            action = self.agent.choose_action(observation)

            new_observation, reward, done, _info = self.environment.step(action)
            self.step += 1
            self.total_steps += 1

            self.agent.process_reward(observation, new_observation, reward, done)

            if options.reset_environment_on_done and done:
                self.step = 0
                self.episode += 1
                logger.debug("Episode %d done", self.episode)
                observation = self.environment.reset()
            else:
                observation = new_observation

            if options.reset_agent_on_done and done:
                self.agent.reset()

            if self.visualiser is not None:
                self.visualiser.render(self.environment)
                self._sleep(frame_time)

    def _persist(self) -> None:
        if self.options.agent_store_path:
            store_state(self.agent, self.options.agent_store_path)
        if self.options.environment_store_path:
            store_state(self.environment, self.options.environment_store_path)

    def _close_all(self) -> Optional[BaseException]:
        """Close every component; returns the first failure instead of stopping at it."""
        first_error: Optional[BaseException] = None
        for name, component in (
            ("agent", self.agent),
            ("environment", self.environment),
            ("visualiser", self.visualiser),
        ):
            if component is None:
                continue
            try:
                component.close()
            except Exception as exc:  # noqa: BLE001 - remaining components must still close
                logger.exception("Closing the %s failed", name)
                if first_error is None:
                    first_error = exc
        return first_error

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _seed_sequence(self) -> np.random.SeedSequence:
        # environment and agent share one seed, drawn once per run
        if self._seed is None:
            self._seed = seed_sequence(self.options.seed)
        return self._seed

    def _fps(self) -> float:
        fps = getattr(self.environment, "suggested_rendered_steps_per_second", None)
        return float(fps) if fps else DEFAULT_FPS
