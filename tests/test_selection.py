"""Resolving variants plus configuration maps into typed selections."""
import pytest

from gymnarium_app.catalog import (
    AvailableAgent,
    AvailableEnvironment,
    AvailableExitCondition,
    AvailableVisualiser,
    Category,
    variants,
)
from gymnarium_app.errors import ParseError
from gymnarium_app.selection import (
    CodeBulletAiLearnsToDrive,
    EpisodesSimulated,
    GymMountainCar,
    Matplotlib2dVisualiser,
    RandomAgentSelection,
    resolve,
)


def test_defaults_when_configuration_empty():
    assert resolve(AvailableEnvironment.GYM_MOUNTAIN_CAR, {}) == GymMountainCar(goal_velocity=0.0)
    assert resolve(AvailableEnvironment.CODE_BULLET_AI_LEARNS_TO_DRIVE, {}) == CodeBulletAiLearnsToDrive(
        sensor_lines_visible=False, track_visible=True
    )
    assert resolve(AvailableVisualiser.MATPLOTLIB_2D, {}) == Matplotlib2dVisualiser(
        window_title="Gymnarium Application", window_dimension=(640, 480)
    )
    assert resolve(AvailableExitCondition.EPISODES_SIMULATED, {}) == EpisodesSimulated(count_of_episodes=20)


def test_configured_values_are_parsed():
    selected = resolve(AvailableExitCondition.EPISODES_SIMULATED, {"count_of_episodes": "3"})
    assert selected.count_of_episodes == 3
    selected = resolve(AvailableVisualiser.MATPLOTLIB_2D, {"window_dimension": "800,600"})
    assert selected.window_dimension == (800, 600)


def test_unknown_keys_are_ignored():
    assert resolve(AvailableAgent.RANDOM, {"speed": "fast"}) == RandomAgentSelection()


def test_every_default_resolves_and_maps_back():
    for category in Category:
        for variant in variants(category):
            assert resolve(variant, {}).corresponding_available is variant


@pytest.mark.parametrize(
    "variant, configuration, option",
    [
        (AvailableEnvironment.GYM_MOUNTAIN_CAR, {"goal_velocity": "fast"}, "goal_velocity"),
        (AvailableEnvironment.CODE_BULLET_AI_LEARNS_TO_DRIVE, {"track_visible": "yes"}, "track_visible"),
        (AvailableExitCondition.EPISODES_SIMULATED, {"count_of_episodes": "-3"}, "count_of_episodes"),
        (AvailableVisualiser.MATPLOTLIB_2D, {"window_dimension": "(640)"}, "window_dimension"),
    ],
)
def test_malformed_value_raises_parse_error(variant, configuration, option):
    with pytest.raises(ParseError) as info:
        resolve(variant, configuration)
    assert info.value.option == option
    assert info.value.raw == configuration[option]
    assert isinstance(info.value.__cause__, ValueError)


def test_first_malformed_option_in_declared_order_wins():
    with pytest.raises(ParseError) as info:
        resolve(
            AvailableEnvironment.CODE_BULLET_AI_LEARNS_TO_DRIVE,
            {"track_visible": "nope", "sensor_lines_visible": "nope"},
        )
    assert info.value.option == "sensor_lines_visible"
