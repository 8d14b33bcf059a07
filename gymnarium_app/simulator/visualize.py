"""Visualisation (Matplotlib): one figure, redrawn by the environment every step."""
from __future__ import annotations

import logging
from typing import Tuple

import matplotlib.pyplot as plt

from .base import Environment, KeyboardInput, Visualiser

__all__ = ["MatplotlibVisualiser"]

logger = logging.getLogger(__name__)

DEFAULT_DPI = 100


class MatplotlibVisualiser(Visualiser):
    """Two-dimensional visualiser backed by a Matplotlib figure.

    Environments draw themselves through ``Environment.draw(ax)``. Key press
    and release events of the window feed a `KeyboardInput` that the input
    agent reads.
    """

    def __init__(self, window_title: str, window_dimension: Tuple[int, int]):
        width, height = window_dimension
        plt.ion()
        self.figure, self.ax = plt.subplots(figsize=(width / DEFAULT_DPI, height / DEFAULT_DPI), dpi=DEFAULT_DPI)
        manager = self.figure.canvas.manager
        if manager is not None:
            manager.set_window_title(window_title)
        self._keyboard = KeyboardInput()
        self._open = True

        canvas = self.figure.canvas
        canvas.mpl_connect("close_event", self._on_close)
        canvas.mpl_connect("key_press_event", lambda event: self._keyboard.press(event.key))
        canvas.mpl_connect("key_release_event", lambda event: self._keyboard.release(event.key))
        logger.debug("Opened visualiser window %r (%dx%d)", window_title, width, height)

    def _on_close(self, _event) -> None:
        self._open = False

    def input_provider(self) -> KeyboardInput:
        return self._keyboard

    def render(self, environment: Environment) -> None:
        if not self.is_open():
            return
        self.ax.clear()
        environment.draw(self.ax)
        self.figure.canvas.draw_idle()
        self.figure.canvas.flush_events()

    def is_open(self) -> bool:
        return self._open and plt.fignum_exists(self.figure.number)

    def close(self) -> None:
        if plt.fignum_exists(self.figure.number):
            plt.close(self.figure)
        self._open = False
