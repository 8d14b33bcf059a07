"""Random and keyboard agents."""
import numpy as np
import pytest

from gymnarium_app.agents import InputAgent, RandomAgent
from gymnarium_app.environments import MountainCar
from gymnarium_app.errors import DomainError
from gymnarium_app.simulator.base import DiscreteSpace, KeyboardInput


def test_random_agent_stays_in_action_space():
    agent = RandomAgent(DiscreteSpace(3))
    agent.reseed(np.random.SeedSequence(0))
    actions = {agent.choose_action(None) for _ in range(200)}
    assert actions == {0, 1, 2}


def test_random_agent_is_reproducible():
    def run():
        agent = RandomAgent(DiscreteSpace(9))
        agent.reseed(np.random.SeedSequence(11))
        return [agent.choose_action(None) for _ in range(30)]

    assert run() == run()


def test_random_agent_rejects_bad_state():
    with pytest.raises(DomainError):
        RandomAgent(DiscreteSpace(2)).load({"rng": "not a state"})


def test_input_agent_follows_keys():
    keyboard = KeyboardInput()
    agent = InputAgent(keyboard, MountainCar().action_from_keys)
    assert agent.choose_action(None) == 1
    keyboard.press("left")
    assert agent.choose_action(None) == 0
    keyboard.release("left")
    keyboard.press(None)
    assert agent.choose_action(None) == 1


def test_input_agent_has_no_state():
    agent = InputAgent(KeyboardInput(), MountainCar().action_from_keys)
    assert agent.store() == {}
    agent.load({})
    agent.load(None)
    with pytest.raises(DomainError):
        agent.load({"weights": [1, 2]})
