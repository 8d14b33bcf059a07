"""Rusty Object Notation (RON) text codec for state blobs.

Covers the data state blobs are made of: maps ``{"k": v}``, lists ``[a, b]``,
tuples ``(a, b)`` (read as lists), strings with Rust escapes, integers,
floats (including ``inf`` and ``NaN``), ``true``/``false`` and the option
forms ``None``/``Some(x)``. ``//`` and ``/* */`` comments are skipped.
Named structs and enum variants other than ``Some``/``None`` are rejected.

`dumps` sorts map keys so equal data always produces equal text.
"""
from __future__ import annotations

import math
import numbers
import re
from typing import Any, List

__all__ = ["RonError", "dumps", "loads"]

_NUMBER_RE = re.compile(r"[+-]?(?:0x[0-9a-fA-F_]+|0b[01_]+|0o[0-7_]+|[0-9][0-9_]*(?:\.[0-9_]*)?(?:[eE][+-]?[0-9_]+)?|\.[0-9][0-9_]*(?:[eE][+-]?[0-9_]+)?)")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_ESCAPES = {'"': '"', "\\": "\\", "/": "/", "n": "\n", "r": "\r", "t": "\t", "0": "\0"}


class RonError(ValueError):
    """Malformed RON text, or a value RON cannot represent."""

    def __init__(self, message: str, position: int | None = None):
        if position is not None:
            message = f"{message} at offset {position}"
        super().__init__(message)
        self.position = position


# ------------------------------------------------------------------
# Writing
# ------------------------------------------------------------------

def _dump_string(text: str) -> str:
    out = ['"']
    for char in text:
        if char == '"':
            out.append('\\"')
        elif char == "\\":
            out.append("\\\\")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\t":
            out.append("\\t")
        elif not char.isprintable():
            out.append(f"\\u{{{ord(char):x}}}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def _dump_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = float.__repr__(value)
    # RON tells floats from integers by their spelling
    if "." not in text and "e" not in text:
        text += ".0"
    return text


def _dump(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        return _dump_float(float(value))
    if isinstance(value, str):
        return _dump_string(value)
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda item: _dump(item[0]))
        return "{" + ", ".join(f"{_dump(k)}: {_dump(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_dump(item) for item in value) + "]"
    raise RonError(f"Cannot represent {type(value).__name__} in RON")


def dumps(value: Any) -> str:
    return _dump(value) + "\n"


# ------------------------------------------------------------------
# Reading
# ------------------------------------------------------------------

class _Reader:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    raise RonError("Unterminated block comment", self.pos)
                self.pos = end + 2
            else:
                break

    def peek(self) -> str:
        self.skip()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            raise RonError(f"Expected {char!r}", self.pos)
        self.pos += 1

    def sequence(self, close: str) -> List[Any]:
        """Comma separated values up to *close*; a trailing comma is allowed."""
        items = []
        while self.peek() != close:
            items.append(self.value())
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != close:
                raise RonError(f"Expected ',' or {close!r}", self.pos)
        self.pos += 1
        return items

    def mapping(self) -> dict:
        result = {}
        while self.peek() != "}":
            key = self.value()
            self.expect(":")
            result[key] = self.value()
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != "}":
                raise RonError("Expected ',' or '}'", self.pos)
        self.pos += 1
        return result

    def string(self) -> str:
        self.pos += 1
        out = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise RonError("Unterminated string", self.pos)
            char = text[self.pos]
            self.pos += 1
            if char == '"':
                return "".join(out)
            if char != "\\":
                out.append(char)
                continue
            if self.pos >= len(text):
                raise RonError("Unterminated escape", self.pos)
            code = text[self.pos]
            self.pos += 1
            if code in _ESCAPES:
                out.append(_ESCAPES[code])
            elif code == "u":
                out.append(self._unicode_escape())
            else:
                raise RonError(f"Unknown escape \\{code}", self.pos - 2)

    def _unicode_escape(self) -> str:
        text = self.text
        if text.startswith("{", self.pos):
            end = text.find("}", self.pos)
            digits, self.pos = (text[self.pos + 1 : end], end + 1) if end > 0 else ("", self.pos)
        else:
            digits, self.pos = text[self.pos : self.pos + 4], self.pos + 4
        try:
            return chr(int(digits, 16))
        except ValueError as exc:
            raise RonError(f"Invalid unicode escape {digits!r}", self.pos) from exc

    def number(self) -> Any:
        match = _NUMBER_RE.match(self.text, self.pos)
        if not match or not match.group(0).lstrip("+-"):
            raise RonError("Expected a value", self.pos)
        token = match.group(0).replace("_", "")
        self.pos = match.end()
        sign = -1 if token.startswith("-") else 1
        body = token.lstrip("+-")
        if body[:2] in ("0x", "0b", "0o"):
            return sign * int(body, 0)
        if any(c in body for c in ".eE"):
            return float(token)
        return int(token)

    def identifier(self) -> Any:
        start = self.pos
        match = _IDENT_RE.match(self.text, self.pos)
        name = match.group(0)
        self.pos = match.end()
        if name == "true":
            return True
        if name == "false":
            return False
        if name == "None":
            return None
        if name in ("inf", "NaN"):
            return float(name.lower())
        if name == "Some":
            self.expect("(")
            items = self.sequence(")")
            if len(items) != 1:
                raise RonError("Some(...) takes exactly one value", start)
            return items[0]
        raise RonError(f"Unsupported identifier {name!r}", start)

    def value(self) -> Any:
        char = self.peek()
        if char == "{":
            self.pos += 1
            return self.mapping()
        if char == "[":
            self.pos += 1
            return self.sequence("]")
        if char == "(":
            self.pos += 1
            return self.sequence(")")
        if char == '"':
            return self.string()
        if char and char in "+-" and self.text.startswith(("inf", "NaN"), self.pos + 1):
            self.pos += 1
            value = self.identifier()
            return -value if char == "-" else value
        if _IDENT_RE.match(self.text, self.pos):
            return self.identifier()
        return self.number()


def loads(text: str) -> Any:
    reader = _Reader(text)
    value = reader.value()
    if reader.peek():
        raise RonError("Trailing characters", reader.pos)
    return value
