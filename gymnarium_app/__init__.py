"""Gymnarium application: pick an environment, an agent, a visualiser and an exit condition, then run them."""
from __future__ import annotations

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version("gymnarium-app")
except _metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = ["catalog", "config", "errors", "pipeline", "simulator"]

# Import to bind every variant to its selection type
from . import catalog, selection
