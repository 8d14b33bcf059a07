"""Run configuration.

`RunOptions` holds the policy the simulation driver applies (seed, reset on
done, load/store paths). `HarnessConfig` additionally names the four chosen
variants with their configuration strings, so that a whole run can be kept in
a YAML file and replayed with ``gymnarium-app command_line --config``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np
import yaml

from .errors import ConfigError

__all__ = [
    "RunOptions",
    "HarnessConfig",
    "seed_sequence",
]

DEFAULT_YAML_INDENT = 2

logger = logging.getLogger(__name__)


def seed_sequence(seed: Optional[str]) -> np.random.SeedSequence:
    """Turn a seed string into a SeedSequence (its UTF-8 bytes are the entropy).

    ``None`` or an empty string draws fresh entropy from the operating system.
    """
    if not seed:
        sequence = np.random.SeedSequence()
        logger.info("No seed given, using random entropy %d", sequence.entropy)
        return sequence
    return np.random.SeedSequence(list(seed.encode("utf-8")))


@dataclass
class RunOptions:
    """Policy applied by `SimulationDriver` for one run."""

    seed: Optional[str] = None
    reset_environment_on_done: bool = True
    reset_agent_on_done: bool = False
    environment_load_path: Optional[str] = None
    environment_store_path: Optional[str] = None
    agent_load_path: Optional[str] = None
    agent_store_path: Optional[str] = None

    def describe(self) -> str:
        """One sentence summary for the start-up banner."""
        parts = [
            f"using seed {self.seed!r}" if self.seed else "using a random seed",
            ("" if self.reset_environment_on_done else "not ") + "resetting the environment on done",
            ("" if self.reset_agent_on_done else "not ") + "resetting the agent on done",
        ]
        for what, load, store in (
            ("environment", self.environment_load_path, self.environment_store_path),
            ("agent", self.agent_load_path, self.agent_store_path),
        ):
            parts.append(f'loading {what} from "{load}"' if load else f"not loading {what} from file")
            parts.append(f'storing {what} to "{store}"' if store else f"not storing {what} to file")
        return ", ".join(parts)


@dataclass
class HarnessConfig:
    """Everything needed for a non-interactive run.

    Attributes
    ----------
    environment, agent, visualiser, exit_condition
        Any alias of the chosen variant (nice, long or short name).
    *_configuration
        ``key=value;key=value`` option strings, see
        `gymnarium_app.catalog.parse_configuration`.
    strict_compatibility
        Reject combinations the compatibility matrix does not allow before
        anything is built. When false only a warning is logged.
    """

    environment: str = "gym_mountaincar"
    environment_configuration: str = ""
    agent: str = "random"
    agent_configuration: str = ""
    visualiser: str = "none"
    visualiser_configuration: str = ""
    exit_condition: str = "episodes_done_simulating"
    exit_condition_configuration: str = ""

    seed: Optional[str] = None
    reset_environment_on_done: bool = True
    reset_agent_on_done: bool = False
    environment_load_path: Optional[str] = None
    environment_store_path: Optional[str] = None
    agent_load_path: Optional[str] = None
    agent_store_path: Optional[str] = None

    strict_compatibility: bool = True

    # Automatically filled, not expected to be loaded from file.
    _yaml_path: Optional[Path] = field(default=None, repr=False, compare=False)

    # ---------------------------------------------------------------------
    # YAML helpers
    # ---------------------------------------------------------------------
    @classmethod
    def from_yaml(cls, path: os.PathLike | str) -> "HarnessConfig":
        """Load a configuration from a YAML file.

        A missing or unreadable file, malformed YAML and unknown keys all raise
        `ConfigError`.
        """
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
            if not isinstance(data, dict):
                raise TypeError(f"expected a mapping, got {type(data).__name__}")
            cfg = cls(**data)
        except (OSError, UnicodeDecodeError, yaml.YAMLError, TypeError) as exc:
            raise ConfigError(path, exc) from exc
        cfg._yaml_path = Path(path)
        return cfg

    def to_yaml(self, path: os.PathLike | str) -> None:
        """Save the config to YAML."""
        data = asdict(self)
        data.pop("_yaml_path")
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(data, fh, indent=DEFAULT_YAML_INDENT, sort_keys=False)

    def to_run_options(self) -> RunOptions:
        return RunOptions(
            seed=self.seed,
            reset_environment_on_done=self.reset_environment_on_done,
            reset_agent_on_done=self.reset_agent_on_done,
            environment_load_path=self.environment_load_path,
            environment_store_path=self.environment_store_path,
            agent_load_path=self.agent_load_path,
            agent_store_path=self.agent_store_path,
        )

    def __post_init__(self):
        # YAML reads an unquoted numeric seed as int
        if self.seed is not None and not isinstance(self.seed, str):
            self.seed = str(self.seed)
