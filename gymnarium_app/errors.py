"""Exception hierarchy shared by the catalog, the pipeline and the simulator.

Every error raised on purpose by this package derives from `HarnessError` so
that the command-line interface can turn it into a readable message.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

__all__ = [
    "HarnessError",
    "NotFoundError",
    "ParseError",
    "SelectionError",
    "CompatibilityError",
    "UnknownFormatError",
    "PersistenceError",
    "PersistenceIOError",
    "CodecError",
    "DomainError",
    "DriverStateError",
    "ConfigError",
]


class HarnessError(Exception):
    """Base class of all errors raised by the harness."""


class NotFoundError(HarnessError, LookupError):
    """No variant of a category answers to the given alias."""

    def __init__(self, alias: str, category_headline: str):
        self.alias = alias
        self.category_headline = category_headline
        super().__init__(f'Did not find "{alias}" in {category_headline.lower()}.')


class ParseError(HarnessError, ValueError):
    """An option value could not be parsed according to its declared type."""

    def __init__(self, option: str, raw: str, cause: Exception | str):
        self.option = option
        self.raw = raw
        self.cause = cause
        super().__init__(
            f'ParseError occurred while selecting option "{option}" from "{raw}" ({cause})'
        )


class SelectionError(HarnessError):
    """An interactive answer could not be understood as an index or a name."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f'Could not parse "{raw}" as a choice')


class CompatibilityError(HarnessError):
    """The chosen variants are not mutually supported."""


class UnknownFormatError(HarnessError):
    """A load or store path has a suffix no codec is registered for."""

    def __init__(self, path: str | Path):
        self.path = str(path)
        super().__init__(f'The file "{self.path}" has an unknown file ending')


class PersistenceError(HarnessError):
    """Loading or storing a state blob failed; `cause` holds the original error."""

    def __init__(self, path: str | Path, cause: Optional[BaseException]):
        self.path = str(path)
        self.cause = cause
        super().__init__(f'{self._kind} for "{self.path}" ({cause})')

    _kind = "Persistence error"


class PersistenceIOError(PersistenceError):
    _kind = "Received IoError"


class CodecError(PersistenceError):
    _kind = "Received CodecError"


class DomainError(HarnessError):
    """Raised by environments and agents themselves, e.g. for an invalid action."""


class DriverStateError(HarnessError):
    """The simulation driver was used outside of its allowed state."""


class ConfigError(HarnessError):
    """A run configuration file could not be read or holds unknown keys."""

    def __init__(self, path: str | Path, cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f'Could not read configuration "{self.path}" ({cause})')
