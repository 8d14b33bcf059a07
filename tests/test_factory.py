"""Building components from selections."""
import pytest

from gymnarium_app import factory
from gymnarium_app.agents import InputAgent, RandomAgent
from gymnarium_app.catalog import Category
from gymnarium_app.config import RunOptions
from gymnarium_app.environments import AiLearnsToDrive, MountainCar
from gymnarium_app.errors import CompatibilityError
from gymnarium_app.factory import build_components, register_builder
from gymnarium_app.pipeline import select_batch
from gymnarium_app.selection import GymMountainCar, Matplotlib2dVisualiser
from gymnarium_app.simulator.engine import SimulationDriver


def _selections(env="g_mc", agent="rand", visualiser="none", exit_condition="epsdone", env_cfg="", exit_cfg=""):
    return select_batch(
        {
            Category.ENVIRONMENT: (env, env_cfg),
            Category.AGENT: (agent, ""),
            Category.VISUALISER: (visualiser, ""),
            Category.EXIT_CONDITION: (exit_condition, exit_cfg),
        },
        strict=False,
    )


class FakeVisualiser:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_headless_components():
    components = build_components(_selections(env_cfg="goal_velocity=0.02"))
    assert isinstance(components.environment, MountainCar)
    assert components.environment.goal_velocity == 0.02
    assert isinstance(components.agent, RandomAgent)
    assert components.agent.action_space is MountainCar.action_space
    assert components.visualiser is None
    assert callable(components.exit_condition)


def test_drive_options_reach_the_environment():
    components = build_components(_selections(env="cb_drive", env_cfg="sensor_lines_visible=true;track_visible=false"))
    assert isinstance(components.environment, AiLearnsToDrive)
    assert components.environment.sensor_lines_visible is True
    assert components.environment.track_visible is False


def test_built_components_run_to_completion():
    components = build_components(_selections(exit_cfg="count_of_episodes=2"))
    driver = SimulationDriver(
        components.environment,
        components.agent,
        components.visualiser,
        components.exit_condition,
        RunOptions(seed="factory"),
    )
    result = driver.run()
    assert result.episodes == 2
    # random actions never reach the flag, every episode hits the time limit
    assert result.total_steps == 2 * 200


def test_input_agent_needs_a_visualiser():
    with pytest.raises(CompatibilityError):
        build_components(_selections(agent="input"))


def test_visualiser_closed_needs_a_visualiser():
    with pytest.raises(CompatibilityError):
        build_components(_selections(exit_condition="visclosed"))


def test_window_and_input_agent():
    components = build_components(_selections(agent="input", visualiser="mpl2d", exit_condition="visclosed"))
    try:
        assert isinstance(components.agent, InputAgent)
        assert components.agent.keyboard is components.visualiser.input_provider()
        components.visualiser.input_provider().press("right")
        assert components.agent.choose_action(None) == 2
        assert components.exit_condition(None, None, components.visualiser, 0, 0) is False
    finally:
        components.visualiser.close()
    assert components.exit_condition(None, None, components.visualiser, 0, 0) is True


def test_visualiser_closed_when_later_builder_fails(monkeypatch):
    visualiser = FakeVisualiser()

    def failing_environment(selection, built):
        raise RuntimeError("no environment today")

    monkeypatch.setitem(factory._BUILDERS, Matplotlib2dVisualiser, lambda selection, built: visualiser)
    monkeypatch.setitem(factory._BUILDERS, GymMountainCar, failing_environment)
    with pytest.raises(RuntimeError):
        build_components(_selections(visualiser="mpl2d"))
    assert visualiser.closed


def test_register_builder_rejects_duplicates_and_non_selections():
    with pytest.raises(KeyError):
        register_builder(GymMountainCar)(lambda selection, built: None)
    with pytest.raises(TypeError):
        register_builder(int)
