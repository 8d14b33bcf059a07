"""Selection pipeline: from user choices to four resolved selections.

Two front-ends feed the same resolution steps (`find_variant`,
`parse_configuration`, `resolve`):

* `select_batch` takes all four choices up front, e.g. from the command line
  or a `HarnessConfig` YAML file;
* `select_interactively` asks a `Prompter` for one category after the other,
  offering only what the compatibility matrix still allows.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .catalog import (
    Available,
    Category,
    OptionDescriptor,
    find_variant,
    parse_configuration,
    variants,
)
from .compatibility import INTERACTIVE_ORDER, CompatibilityMatrix, default_matrix
from .config import HarnessConfig, RunOptions
from .errors import CompatibilityError, NotFoundError, SelectionError
from .selection import (
    Selected,
    SelectedAgent,
    SelectedEnvironment,
    SelectedExitCondition,
    SelectedVisualiser,
    resolve,
)

__all__ = [
    "Selections",
    "select",
    "select_batch",
    "selections_from_config",
    "Prompter",
    "ConsolePrompter",
    "select_interactively",
    "prompt_run_options",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selections:
    environment: SelectedEnvironment
    agent: SelectedAgent
    visualiser: SelectedVisualiser
    exit_condition: SelectedExitCondition

    def variants(self) -> List[Available]:
        return [s.corresponding_available for s in self.by_category().values()]

    def by_category(self) -> Dict[Category, Selected]:
        return {
            Category.ENVIRONMENT: self.environment,
            Category.AGENT: self.agent,
            Category.VISUALISER: self.visualiser,
            Category.EXIT_CONDITION: self.exit_condition,
        }

    @classmethod
    def from_mapping(cls, selected: Mapping[Category, Selected]) -> "Selections":
        return cls(
            environment=selected[Category.ENVIRONMENT],
            agent=selected[Category.AGENT],
            visualiser=selected[Category.VISUALISER],
            exit_condition=selected[Category.EXIT_CONDITION],
        )


# ------------------------------------------------------------------
# Batch front-end
# ------------------------------------------------------------------

def select(category: Category, name: str, configuration: str = "") -> Selected:
    """Resolve one category from a variant alias and a raw configuration string."""
    variant = find_variant(category, name)
    return resolve(variant, parse_configuration(configuration))


def select_batch(
    choices: Mapping[Category, Tuple[str, str]],
    strict: bool = True,
    matrix: Optional[CompatibilityMatrix] = None,
) -> Selections:
    """Resolve ``{category: (name, configuration)}`` for all four categories.

    With *strict* an incompatible combination raises `CompatibilityError`;
    otherwise it is only logged and left to the builders to reject.
    """
    missing = [c.name for c in Category if c not in choices]
    if missing:
        raise ValueError(f"No choice given for {missing}")

    selections = Selections.from_mapping(
        {category: select(category, *choices[category]) for category in Category}
    )

    matrix = matrix or default_matrix()
    if strict:
        matrix.check(selections.variants())
    else:
        conflict = matrix.first_conflict(selections.variants())
        if conflict is not None:
            logger.warning('"%s" and "%s" are not meant to be combined', *conflict)
    return selections


def selections_from_config(cfg: HarnessConfig, matrix: Optional[CompatibilityMatrix] = None) -> Selections:
    return select_batch(
        {
            Category.ENVIRONMENT: (cfg.environment, cfg.environment_configuration),
            Category.AGENT: (cfg.agent, cfg.agent_configuration),
            Category.VISUALISER: (cfg.visualiser, cfg.visualiser_configuration),
            Category.EXIT_CONDITION: (cfg.exit_condition, cfg.exit_condition_configuration),
        },
        strict=cfg.strict_compatibility,
        matrix=matrix,
    )


# ------------------------------------------------------------------
# Interactive front-end
# ------------------------------------------------------------------

class Prompter(ABC):
    """Whatever asks the user; the pipeline only sees answers as text."""

    @abstractmethod
    def choose(self, headline: str, offered: Sequence[str], unavailable: Sequence[str]) -> str:
        """Present *offered* (indexable) and return the raw answer."""

    @abstractmethod
    def ask_option(self, descriptor: OptionDescriptor) -> str:
        """Raw answer for one option; an empty string keeps the default."""

    @abstractmethod
    def ask_yes_no(self, question: str, default: bool) -> bool:
        ...

    @abstractmethod
    def ask_text(self, question: str, default: Optional[str], none_text: str) -> Optional[str]:
        """Free text; an empty answer returns *default*."""


class ConsolePrompter(Prompter):
    """Line based prompts on stdin/stdout."""

    def __init__(self, read: Callable[[str], str] = input, write: Callable[[str], None] = print):
        self._read = read
        self._write = write

    def choose(self, headline: str, offered: Sequence[str], unavailable: Sequence[str]) -> str:
        self._write("")
        self._write(headline)
        self._write("-" * len(headline))
        for index, name in enumerate(offered):
            self._write(f"<{index}> {name}")
        if unavailable:
            self._write(
                "(Because of your previous choices following elements are not available: "
                f"{', '.join(unavailable)})"
            )
        return self._read("Your choice: ")

    def ask_option(self, descriptor: OptionDescriptor) -> str:
        self._write("")
        self._write(descriptor.help_line())
        self._write(descriptor.description)
        return self._read("Your answer: ")

    def ask_yes_no(self, question: str, default: bool) -> bool:
        self._write("")
        answer = self._read(f"{question} ({'YES/no' if default else 'yes/NO'}) ").strip()
        if not answer:
            return default
        return answer.lower().startswith("y")

    def ask_text(self, question: str, default: Optional[str], none_text: str) -> Optional[str]:
        self._write("")
        self._write(f"{question} (Default: {default if default is not None else none_text})")
        answer = self._read("> ").strip()
        return answer or default


def _choose_variant(
    prompter: Prompter, category: Category, offered: List[Available], unavailable: List[Available]
) -> Available:
    raw = prompter.choose(
        category.headline, [v.nice_name for v in offered], [v.nice_name for v in unavailable]
    )
    answer = raw.strip()
    if answer.isdecimal():
        index = int(answer)
        if index >= len(offered):
            raise SelectionError(raw)
        return offered[index]
    try:
        variant = find_variant(category, answer)
    except NotFoundError as exc:
        raise SelectionError(raw) from exc
    if variant not in offered:
        raise CompatibilityError(
            f'"{variant.nice_name}" is not available because of your previous choices'
        )
    return variant


def select_interactively(prompter: Prompter, matrix: Optional[CompatibilityMatrix] = None) -> Selections:
    """Ask for environment, visualiser, agent and exit condition, in that order."""
    matrix = matrix or default_matrix()
    chosen: List[Available] = []
    selected: Dict[Category, Selected] = {}

    for category in INTERACTIVE_ORDER:
        offered = matrix.offered(category, chosen)
        unavailable = [v for v in variants(category) if v not in offered]
        if not offered:
            raise CompatibilityError(
                f"There are no {category.headline.lower()} with the previous selections!"
            )
        variant = _choose_variant(prompter, category, offered, unavailable)

        configuration = {}
        for descriptor in variant.options:
            answer = prompter.ask_option(descriptor).strip()
            if answer:
                configuration[descriptor.name] = answer
        selected[category] = resolve(variant, configuration)
        chosen.append(variant)
        logger.debug("Selected %s: %r", category.name, selected[category])

    return Selections.from_mapping(selected)


def prompt_run_options(prompter: Prompter) -> RunOptions:
    """Ask for reset policy, seed and load/store paths."""
    reset_environment_on_done = prompter.ask_yes_no(
        "Should the ENVIRONMENT be reset when the environment is done after a step?", True
    )
    reset_agent_on_done = prompter.ask_yes_no(
        "Should the AGENT be reset when the environment is done after a step?", False
    )
    seed = prompter.ask_text("Seed for random number generator", None, "randomly chosen")
    environment_load_path = prompter.ask_text(
        "From which file should the ENVIRONMENT be loaded?", None, "Do not load"
    )
    agent_load_path = prompter.ask_text("From which file should the AGENT be loaded?", None, "Do not load")
    environment_store_path = prompter.ask_text(
        "To which file should the ENVIRONMENT be stored?", environment_load_path, "Do not store"
    )
    agent_store_path = prompter.ask_text(
        "To which file should the AGENT be stored?", agent_load_path, "Do not store"
    )
    return RunOptions(
        seed=seed,
        reset_environment_on_done=reset_environment_on_done,
        reset_agent_on_done=reset_agent_on_done,
        environment_load_path=environment_load_path,
        environment_store_path=environment_store_path,
        agent_load_path=agent_load_path,
        agent_store_path=agent_store_path,
    )
