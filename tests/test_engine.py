"""SimulationDriver lifecycle with hand-made components."""
import numpy as np
import pytest

from gymnarium_app.config import RunOptions
from gymnarium_app.errors import DomainError, DriverStateError
from gymnarium_app.simulator.base import Agent, DiscreteSpace, Environment, Visualiser
from gymnarium_app.simulator.engine import DEFAULT_FPS, DriverState, SimulationDriver
from gymnarium_app.simulator.exit_conditions import episodes_simulated, visualiser_closed


class CountingEnvironment(Environment):
    """Episode ends after `episode_length` steps; every call is logged."""

    action_space = DiscreteSpace(2)

    def __init__(self, log, episode_length=1, fail_on_step=None):
        self.log = log
        self.episode_length = episode_length
        self.fail_on_step = fail_on_step
        self.resets = 0
        self.steps = 0
        self.counter = 0
        self.seeds = []

    def reseed(self, seed):
        self.seeds.append(seed)

    def reset(self):
        self.resets += 1
        self.counter = 0
        return self.state()

    def state(self):
        return np.array([self.counter])

    def step(self, action):
        self.steps += 1
        if self.fail_on_step == self.steps:
            raise DomainError("boom")
        self.counter += 1
        return self.state(), 1.0, self.counter >= self.episode_length, {}

    def store(self):
        return {"counter": self.counter, "resets": self.resets}

    def load(self, data):
        self.log.append("env.load")
        self.counter = data["counter"]

    def close(self):
        self.log.append("env.close")


class RecordingAgent(Agent):
    def __init__(self, log, fail_on_close=False):
        self.log = log
        self.fail_on_close = fail_on_close
        self.resets = 0
        self.rewards = []
        self.seeds = []

    def reseed(self, seed):
        self.seeds.append(seed)

    def reset(self):
        self.resets += 1

    def choose_action(self, observation):
        return 0

    def process_reward(self, observation, new_observation, reward, done):
        self.rewards.append((int(observation[0]), int(new_observation[0]), reward, done))

    def store(self):
        return {"rewards": len(self.rewards)}

    def load(self, data):
        self.log.append("agent.load")

    def close(self):
        self.log.append("agent.close")
        if self.fail_on_close:
            raise RuntimeError("agent close failed")


class ClosingVisualiser(Visualiser):
    """Reports itself closed after `renders_until_closed` renders."""

    def __init__(self, log, renders_until_closed):
        self.log = log
        self.renders = 0
        self.renders_until_closed = renders_until_closed

    def render(self, environment):
        self.renders += 1

    def is_open(self):
        return self.renders < self.renders_until_closed

    def close(self):
        self.log.append("visualiser.close")


def _driver(env, agent, visualiser=None, exit_condition=None, sleep=None, **options):
    return SimulationDriver(
        env,
        agent,
        visualiser,
        exit_condition or episodes_simulated(3),
        RunOptions(seed="test", **options),
        sleep=sleep or (lambda seconds: pytest.fail("headless runs must not sleep")),
    )


@pytest.mark.parametrize("count", [0, 1, 5])
def test_runs_exactly_count_episodes(count):
    log = []
    env = CountingEnvironment(log)
    driver = _driver(env, RecordingAgent(log), exit_condition=episodes_simulated(count))
    result = driver.run()

    assert result.episodes == count
    assert result.total_steps == count
    assert env.steps == count
    # one reset to start, one per finished episode
    assert env.resets == count + 1
    assert driver.state is DriverState.TERMINATED


def test_step_counter_restarts_each_episode():
    log = []
    env = CountingEnvironment(log, episode_length=4)
    agent = RecordingAgent(log)
    result = _driver(env, agent, exit_condition=episodes_simulated(2)).run()

    assert result.total_steps == 8
    assert result.steps == 0
    assert [done for *_, done in agent.rewards] == [False, False, False, True] * 2
    # observation handed to the agent is the one before the step
    assert agent.rewards[0][:2] == (0, 1)


def test_without_environment_reset_episodes_do_not_advance():
    log = []
    env = CountingEnvironment(log)

    def stop_after_five_steps(environment, agent, visualiser, episode, step):
        return step >= 5

    result = _driver(
        env, RecordingAgent(log), exit_condition=stop_after_five_steps, reset_environment_on_done=False
    ).run()
    assert result.episodes == 0
    assert result.steps == 5
    assert env.resets == 1


def test_agent_reset_policy():
    log = []
    agent = RecordingAgent(log)
    _driver(CountingEnvironment(log), agent, exit_condition=episodes_simulated(3), reset_agent_on_done=True).run()
    assert agent.resets == 1 + 3

    agent = RecordingAgent(log)
    _driver(CountingEnvironment(log), agent, exit_condition=episodes_simulated(3)).run()
    assert agent.resets == 1


def test_environment_and_agent_share_the_seed():
    log = []
    env, agent = CountingEnvironment(log), RecordingAgent(log)
    result = _driver(env, agent).run()
    assert env.seeds[0] is agent.seeds[0]
    assert result.seed_entropy == env.seeds[0].entropy


def test_close_order():
    log = []
    visualiser = ClosingVisualiser(log, renders_until_closed=100)
    _driver(CountingEnvironment(log), RecordingAgent(log), visualiser, sleep=lambda s: None).run()
    assert log == ["agent.close", "env.close", "visualiser.close"]


def test_components_closed_when_step_fails():
    log = []
    driver = _driver(CountingEnvironment(log, fail_on_step=2), RecordingAgent(log))
    with pytest.raises(DomainError):
        driver.run()
    assert log == ["agent.close", "env.close"]
    assert driver.state is DriverState.TERMINATED


def test_close_failure_is_raised_after_every_close():
    log = []
    driver = _driver(CountingEnvironment(log), RecordingAgent(log, fail_on_close=True))
    with pytest.raises(RuntimeError, match="agent close failed"):
        driver.run()
    assert log == ["agent.close", "env.close"]


def test_second_run_is_rejected():
    log = []
    driver = _driver(CountingEnvironment(log), RecordingAgent(log))
    driver.run()
    with pytest.raises(DriverStateError):
        driver.run()


def test_visualiser_renders_and_paces():
    log = []
    sleeps = []
    visualiser = ClosingVisualiser(log, renders_until_closed=100)
    _driver(
        CountingEnvironment(log), RecordingAgent(log), visualiser, exit_condition=episodes_simulated(4), sleep=sleeps.append
    ).run()
    # initial render plus one per step
    assert visualiser.renders == 1 + 4
    assert sleeps == [pytest.approx(1.0 / DEFAULT_FPS)] * 4


def test_suggested_frame_rate_is_used():
    log = []
    sleeps = []
    env = CountingEnvironment(log)
    env.suggested_rendered_steps_per_second = 50
    _driver(env, RecordingAgent(log), ClosingVisualiser(log, 100), sleep=sleeps.append).run()
    assert sleeps and all(s == pytest.approx(0.02) for s in sleeps)


def test_closing_the_visualiser_ends_the_run():
    log = []
    env = CountingEnvironment(log, episode_length=1000)
    visualiser = ClosingVisualiser(log, renders_until_closed=3)
    result = _driver(env, RecordingAgent(log), visualiser, exit_condition=visualiser_closed(), sleep=lambda s: None).run()
    assert result.total_steps == 2


def test_closing_the_visualiser_also_ends_an_episode_count():
    log = []
    env = CountingEnvironment(log, episode_length=1000)
    visualiser = ClosingVisualiser(log, renders_until_closed=3)
    result = _driver(env, RecordingAgent(log), visualiser, exit_condition=episodes_simulated(50), sleep=lambda s: None).run()
    assert result.episodes == 0
    assert result.total_steps == 2


def test_store_and_load_paths(tmp_path):
    log = []
    env_path, agent_path = tmp_path / "env.json", tmp_path / "agent.yaml"
    _driver(
        CountingEnvironment(log, episode_length=10),
        RecordingAgent(log),
        exit_condition=lambda *args: args[4] >= 3,
        environment_store_path=str(env_path),
        agent_store_path=str(agent_path),
    ).run()
    assert env_path.exists() and agent_path.exists()

    log = []
    env, agent = CountingEnvironment(log, episode_length=10), RecordingAgent(log)
    _driver(
        env,
        agent,
        exit_condition=lambda *args: True,
        environment_load_path=str(env_path),
        agent_load_path=str(agent_path),
    ).run()
    assert log[:2] == ["env.load", "agent.load"]
    assert env.counter == 3
    # loaded components are neither reseeded nor reset
    assert env.seeds == [] and agent.seeds == []
    assert env.resets == 0 and agent.resets == 0
