"""Static enumeration of every variant of the four component categories."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple, Type

from ..errors import NotFoundError
from .options import OptionDescriptor, OptionType

__all__ = [
    "Category",
    "VariantInfo",
    "Available",
    "AvailableEnvironment",
    "AvailableAgent",
    "AvailableVisualiser",
    "AvailableExitCondition",
    "register_category",
    "available_type",
]


class Category(Enum):
    """The closed set of pluggable component families."""

    ENVIRONMENT = "Available Environments"
    AGENT = "Available Agents"
    VISUALISER = "Available Visualisers"
    EXIT_CONDITION = "Available Exit Conditions"

    @property
    def headline(self) -> str:
        return self.value


@dataclass(frozen=True)
class VariantInfo:
    nice_name: str
    long_name: str
    short_name: str
    options: Tuple[OptionDescriptor, ...] = ()


# Category -> enum of its variants
_CATALOG: Dict[Category, Type["Available"]] = {}


def register_category(category: Category):
    """Class decorator binding an `Available` enum to its category."""

    def decorator(cls: Type["Available"]) -> Type["Available"]:
        if not issubclass(cls, Available):
            raise TypeError("Registered class must inherit from Available")
        if category in _CATALOG:
            raise KeyError(f"Category '{category.name}' is already registered")
        _CATALOG[category] = cls
        return cls

    return decorator


def available_type(category: Category) -> Type["Available"]:
    return _CATALOG[category]


class Available(Enum):
    """Metadata-only variant of a category.

    Members carry a `VariantInfo` value; subclasses must be registered with
    `register_category`.
    """

    @property
    def info(self) -> VariantInfo:
        return self.value

    @property
    def nice_name(self) -> str:
        return self.value.nice_name

    @property
    def long_name(self) -> str:
        return self.value.long_name

    @property
    def short_name(self) -> str:
        return self.value.short_name

    @property
    def options(self) -> Tuple[OptionDescriptor, ...]:
        return self.value.options

    @property
    def aliases(self) -> Tuple[str, str, str]:
        return self.nice_name, self.long_name, self.short_name

    @property
    def category(self) -> Category:
        for category, cls in _CATALOG.items():
            if cls is type(self):
                return category
        raise LookupError(f"{type(self).__name__} is not registered with a category")

    @classmethod
    def values(cls) -> List["Available"]:
        return list(cls)

    @classmethod
    def from_alias(cls, alias: str) -> "Available":
        """Case-insensitive lookup by nice, long or short name."""
        lowered = alias.lower()
        for member in cls:
            if any(name.lower() == lowered for name in member.aliases):
                return member
        category = next(cat for cat, registered in _CATALOG.items() if registered is cls)
        raise NotFoundError(alias, category.headline)

    def __str__(self) -> str:
        return self.nice_name


# ------------------------------------------------------------------
# Environments
# ------------------------------------------------------------------

@register_category(Category.ENVIRONMENT)
class AvailableEnvironment(Available):
    GYM_MOUNTAIN_CAR = VariantInfo(
        "Gym MountainCar",
        "gym_mountaincar",
        "g_mc",
        (
            OptionDescriptor(
                name="goal_velocity",
                description=(
                    "The velocity which the agent has to have at least when he reaches the "
                    "flag. Because the velocity never is negative a value of 0.0 is the "
                    "off-switch for this."
                ),
                default="0.0",
                type=OptionType.FLOAT,
            ),
        ),
    )
    CODE_BULLET_AI_LEARNS_TO_DRIVE = VariantInfo(
        "Code Bullet AI Learns to DRIVE",
        "code_bullet_ai_learns_to_drive",
        "cb_drive",
        (
            OptionDescriptor(
                name="sensor_lines_visible",
                description=(
                    "Whether the given sensor lines should be drawn in the visualiser. "
                    "Sometimes it's nice to see what an agent sees."
                ),
                default="false",
                type=OptionType.BOOL,
            ),
            OptionDescriptor(
                name="track_visible",
                description=(
                    "Whether the track should be drawn in the visualiser. This set to false in "
                    'addition to "sensor_lines_visible" to true simulates the view the agent has.'
                ),
                default="true",
                type=OptionType.BOOL,
            ),
        ),
    )


# ------------------------------------------------------------------
# Agents
# ------------------------------------------------------------------

@register_category(Category.AGENT)
class AvailableAgent(Available):
    RANDOM = VariantInfo("Random", "random", "rand")
    INPUT = VariantInfo("Input", "input", "inp")


# ------------------------------------------------------------------
# Visualisers
# ------------------------------------------------------------------

@register_category(Category.VISUALISER)
class AvailableVisualiser(Available):
    NONE = VariantInfo("None", "none", "none")
    MATPLOTLIB_2D = VariantInfo(
        "Matplotlib in 2D",
        "matplotlib2d",
        "mpl2d",
        (
            OptionDescriptor(
                name="window_title",
                description="Sets the window title.",
                default="Gymnarium Application",
                type=OptionType.STRING,
            ),
            OptionDescriptor(
                name="window_dimension",
                description=(
                    "Sets the window dimensions in pixels with which it should start. The "
                    "parentheses are optional, the comma is not."
                ),
                default="(640, 480)",
                type=OptionType.UINT_PAIR,
            ),
        ),
    )


# ------------------------------------------------------------------
# Exit conditions
# ------------------------------------------------------------------

@register_category(Category.EXIT_CONDITION)
class AvailableExitCondition(Available):
    EPISODES_SIMULATED = VariantInfo(
        "episodes done simulating",
        "episodes_done_simulating",
        "epsdone",
        (
            OptionDescriptor(
                name="count_of_episodes",
                description="The number of episodes to run through before exiting.",
                default="20",
                type=OptionType.UINT,
            ),
        ),
    )
    VISUALISER_CLOSED = VariantInfo("visualiser is closed", "visualiser_is_closed", "visclosed")
