"""Concrete agents offered by the catalog."""
from .input_agent import InputAgent
from .random_agent import RandomAgent

__all__ = ["RandomAgent", "InputAgent"]
