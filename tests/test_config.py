"""HarnessConfig YAML handling and seeding."""
from pathlib import Path

import numpy as np
import pytest

from gymnarium_app.config import HarnessConfig, RunOptions, seed_sequence
from gymnarium_app.errors import ConfigError, HarnessError

CFGS = Path(__file__).resolve().parents[1] / "cfgs"


def test_yaml_round_trip(tmp_path):
    cfg = HarnessConfig(
        environment="cb_drive",
        environment_configuration="track_visible=false",
        visualiser="mpl2d",
        exit_condition="visclosed",
        seed="abc",
        agent_store_path="agent.bin",
        strict_compatibility=False,
    )
    path = tmp_path / "run.yaml"
    cfg.to_yaml(path)
    loaded = HarnessConfig.from_yaml(path)
    assert loaded == cfg
    assert loaded._yaml_path == path
    assert "_yaml_path" not in path.read_text(encoding="utf-8")


def test_numeric_seed_becomes_string(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("environment: g_mc\nseed: 42\n", encoding="utf-8")
    cfg = HarnessConfig.from_yaml(path)
    assert cfg.seed == "42"
    assert cfg.agent == "random"


def test_unknown_key_is_config_error(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("environmnt: g_mc\n", encoding="utf-8")
    with pytest.raises(ConfigError) as info:
        HarnessConfig.from_yaml(path)
    assert isinstance(info.value, HarnessError)
    assert info.value.path == str(path)
    assert "environmnt" in str(info.value)


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError) as info:
        HarnessConfig.from_yaml(tmp_path / "missing.yaml")
    assert isinstance(info.value.cause, OSError)


@pytest.mark.parametrize("content", ["environment: [g_mc\n", "- g_mc\n- random\n", "just text\n"])
def test_malformed_config_file(tmp_path, content):
    path = tmp_path / "run.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        HarnessConfig.from_yaml(path)


def test_example_configs_load():
    for path in sorted(CFGS.glob("*.yaml")):
        cfg = HarnessConfig.from_yaml(path)
        assert cfg.environment


def test_to_run_options():
    cfg = HarnessConfig(seed="s", reset_environment_on_done=False, environment_load_path="env.json")
    assert cfg.to_run_options() == RunOptions(
        seed="s", reset_environment_on_done=False, environment_load_path="env.json"
    )


def test_seed_sequence_is_deterministic():
    first = np.random.default_rng(seed_sequence("hello")).integers(1000, size=5)
    second = np.random.default_rng(seed_sequence("hello")).integers(1000, size=5)
    other = np.random.default_rng(seed_sequence("world")).integers(1000, size=5)
    assert np.array_equal(first, second)
    assert not np.array_equal(first, other)


def test_missing_seed_draws_fresh_entropy():
    assert seed_sequence(None).entropy != seed_sequence("").entropy


def test_describe():
    text = RunOptions(seed="7", agent_store_path="a.json").describe()
    assert "using seed '7'" in text
    assert 'storing agent to "a.json"' in text
    assert "not loading environment from file" in text
