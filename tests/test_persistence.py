"""Suffix dispatch and error mapping of state files."""
import pickle

import numpy as np
import pytest

from gymnarium_app.agents import RandomAgent
from gymnarium_app.environments import MountainCar
from gymnarium_app.errors import CodecError, DomainError, PersistenceError, PersistenceIOError, UnknownFormatError
from gymnarium_app.simulator.persistence import SUFFIXES, codec_for, load_state, store_state


class Blob:
    def __init__(self, data=None):
        self.data = data

    def store(self):
        return self.data

    def load(self, data):
        self.data = data


@pytest.mark.parametrize("suffix", [".ron", ".json", ".yaml", ".yml", ".bin"])
def test_store_load_store_is_idempotent(tmp_path, suffix):
    env = MountainCar(goal_velocity=0.01)
    env.reseed(np.random.SeedSequence(1))
    env.reset()
    for _ in range(7):
        env.step(2)

    first, second = tmp_path / f"first{suffix}", tmp_path / f"second{suffix}"
    store_state(env, first)
    restored = MountainCar()
    load_state(restored, first)
    store_state(restored, second)

    assert first.read_bytes() == second.read_bytes()
    assert restored.store() == env.store()


def test_loaded_generator_continues_identically(tmp_path):
    agent = RandomAgent(MountainCar.action_space)
    agent.reseed(np.random.SeedSequence(7))
    store_state(agent, tmp_path / "agent.json")
    expected = [agent.choose_action(None) for _ in range(20)]

    restored = RandomAgent(MountainCar.action_space)
    load_state(restored, tmp_path / "agent.json")
    assert [restored.choose_action(None) for _ in range(20)] == expected


def test_suffix_is_case_insensitive():
    assert codec_for("state.JSON").name == "json"
    assert codec_for("state.Yml").name == "yaml"
    assert codec_for("state.RON").name == "ron"
    assert set(SUFFIXES) == {".ron", ".json", ".yaml", ".yml", ".bin"}


@pytest.mark.parametrize("operation", [load_state, store_state])
def test_unknown_suffix(tmp_path, operation):
    path = tmp_path / "x.unknown"
    with pytest.raises(UnknownFormatError) as info:
        operation(Blob({}), path)
    assert info.value.path == str(path)
    assert str(path) in str(info.value)
    assert not path.exists()


def test_missing_file_is_io_error(tmp_path):
    with pytest.raises(PersistenceIOError) as info:
        load_state(Blob(), tmp_path / "missing.json")
    assert isinstance(info.value.cause, OSError)
    assert isinstance(info.value, PersistenceError)


def test_unwritable_target_is_io_error(tmp_path):
    with pytest.raises(PersistenceIOError):
        store_state(Blob({}), tmp_path / "no" / "such" / "dir.json")


@pytest.mark.parametrize(
    "name, payload",
    [
        ("broken.json", b"{not json"),
        ("broken.yaml", b"a: [1, 2"),
        ("broken.ron", b"{\"a\": [1, 2"),
        ("broken.bin", b"\x00not a pickle"),
        ("missing_module.bin", b"cnosuchmod\nx\n."),
        ("empty_stack.bin", b"0."),
        ("latin.json", b"\xff\xfe\xfa"),
    ],
)
def test_malformed_payload_is_codec_error(tmp_path, name, payload):
    path = tmp_path / name
    path.write_bytes(payload)
    with pytest.raises(CodecError):
        load_state(Blob(), path)


def test_unserialisable_state_is_codec_error(tmp_path):
    with pytest.raises(CodecError):
        store_state(Blob({"rng": object()}), tmp_path / "state.json")


def test_binary_uses_pickle(tmp_path):
    store_state(Blob({"a": [1, 2]}), tmp_path / "state.bin")
    assert pickle.loads((tmp_path / "state.bin").read_bytes()) == {"a": [1, 2]}


def test_domain_error_from_target_propagates(tmp_path):
    path = tmp_path / "state.json"
    path.write_text('{"position": 1.0}', encoding="utf-8")
    with pytest.raises(DomainError):
        load_state(MountainCar(), path)


def test_ron_state_file_is_text(tmp_path):
    store_state(Blob({"name": "car", "position": -0.5, "goal": None}), tmp_path / "state.ron")
    assert (tmp_path / "state.ron").read_text(encoding="utf-8") == '{"goal": None, "name": "car", "position": -0.5}\n'
