"""Concrete environments offered by the catalog."""
from .ai_learns_to_drive import AiLearnsToDrive
from .mountain_car import MountainCar

__all__ = ["MountainCar", "AiLearnsToDrive"]
