"""Option descriptors, typed value parsers and the configuration-string grammar.

A configuration string is a sequence of ``key=value`` pairs separated by ``;``.
Literal ``;`` and ``\\`` are escaped with a preceding ``\\``, so the text
``k=val\\;ue;ke\\;y=va\\\\lue`` holds the keys ``k`` and ``ke;y`` with the
values ``val;ue`` and ``va\\lue``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Tuple

__all__ = [
    "OptionType",
    "OptionDescriptor",
    "parse_configuration",
    "format_configuration",
    "parse_uint_pair",
]

_UINT_RE = re.compile(r"[0-9]+")


def _parse_float(text: str) -> float:
    return float(text)


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"provided string was not `true` or `false`: {text!r}")


def _parse_uint(text: str) -> int:
    stripped = text.strip()
    if not _UINT_RE.fullmatch(stripped):
        raise ValueError(f"invalid digit found in string: {text!r}")
    return int(stripped)


def _parse_string(text: str) -> str:
    return text


def parse_uint_pair(text: str) -> Tuple[int, int]:
    """Parse ``"(640, 480)"`` or ``"640,480"`` into a pair of unsigned integers."""
    stripped = text.strip()
    if stripped.startswith("(") and stripped.endswith(")"):
        stripped = stripped[1:-1]
    numbers = [_parse_uint(part) for part in stripped.split(",")]
    if len(numbers) != 2:
        raise ValueError(f"expected exactly two numbers, found {len(numbers)} in {text!r}")
    return numbers[0], numbers[1]


class OptionType(Enum):
    """Declared type tag of an option, with its label and parser."""

    FLOAT = ("float", _parse_float)
    BOOL = ("bool", _parse_bool)
    UINT = ("uint", _parse_uint)
    STRING = ("str", _parse_string)
    UINT_PAIR = ("(uint, uint)", parse_uint_pair)

    def __init__(self, label: str, parser: Callable[[str], Any]):
        self.label = label
        self._parser = parser

    def parse(self, text: str) -> Any:
        """Parse *text*; raises ``ValueError`` when it is malformed."""
        return self._parser(text)


@dataclass(frozen=True)
class OptionDescriptor:
    """Describes one configurable option of a variant.

    Purely descriptive: the resolver reads `default` and `type`, the help
    output reads everything.
    """

    name: str
    description: str
    default: str
    type: OptionType

    def help_line(self) -> str:
        return f"{self.name} [{self.type.label}; default: {self.default}]"


# ------------------------------------------------------------------
# Configuration-string grammar
# ------------------------------------------------------------------

def parse_configuration(text: str) -> Dict[str, str]:
    """Split an escaped ``key=value;key=value`` string into a mapping.

    Single left-to-right scan. ``=`` switches from key to value, ``;`` ends a
    value. A backslash makes the following character literal; a trailing
    backslash is dropped. A trailing key without ``=`` is discarded.
    """
    output: Dict[str, str] = {}
    key: list[str] = []
    value: list[str] = []
    in_value = False
    escaped = False
    for char in text:
        if not escaped and char == "\\":
            escaped = True
        elif not escaped and not in_value and char == "=":
            in_value = True
        elif not escaped and in_value and char == ";":
            output["".join(key)] = "".join(value)
            key, value = [], []
            in_value = False
        else:
            escaped = False
            (value if in_value else key).append(char)
    if in_value:
        output["".join(key)] = "".join(value)
    return output


_KEY_SPECIALS = "\\=;"
_VALUE_SPECIALS = "\\;"


def _escape(text: str, specials: str) -> str:
    return "".join("\\" + char if char in specials else char for char in text)


def format_configuration(mapping: Mapping[str, str]) -> str:
    """Inverse of `parse_configuration`."""
    return ";".join(
        _escape(key, _KEY_SPECIALS) + "=" + _escape(value, _VALUE_SPECIALS)
        for key, value in mapping.items()
    )
