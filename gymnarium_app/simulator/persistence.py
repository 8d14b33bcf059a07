"""Load and store environment/agent state blobs, codec chosen by file suffix.

Supported suffixes: ``.ron`` (RON text, see `ron`), ``.json`` (json),
``.yaml``/``.yml`` (PyYAML) and ``.bin`` (pickle). Anything else is an
`UnknownFormatError`.
"""
from __future__ import annotations

import json
import logging
import os
import pickle
from pathlib import Path
from typing import Any, Callable, Dict, NamedTuple

import yaml

from ..errors import CodecError, PersistenceIOError, UnknownFormatError
from . import ron

__all__ = ["Codec", "codec_for", "load_state", "store_state", "SUFFIXES"]

logger = logging.getLogger(__name__)

DEFAULT_YAML_INDENT = 2


class Codec(NamedTuple):
    name: str
    binary: bool
    dumps: Callable[[Any], Any]
    loads: Callable[[Any], Any]
    errors: tuple


_RON = Codec("ron", False, ron.dumps, ron.loads, (ron.RonError, TypeError, ValueError))
_JSON = Codec(
    "json",
    False,
    lambda data: json.dumps(data, sort_keys=True),
    json.loads,
    (TypeError, ValueError),
)
_YAML = Codec(
    "yaml",
    False,
    lambda data: yaml.safe_dump(data, indent=DEFAULT_YAML_INDENT, sort_keys=True),
    yaml.safe_load,
    (yaml.YAMLError,),
)
_BINARY = Codec(
    "bin",
    True,
    lambda data: pickle.dumps(data, protocol=pickle.HIGHEST_PROTOCOL),
    pickle.loads,
    # unpickling may look up modules and attributes that no longer exist
    (pickle.PickleError, EOFError, AttributeError, ImportError, IndexError, KeyError, TypeError, ValueError),
)

_CODECS: Dict[str, Codec] = {
    ".ron": _RON,
    ".json": _JSON,
    ".yaml": _YAML,
    ".yml": _YAML,
    ".bin": _BINARY,
}
SUFFIXES = tuple(_CODECS)


def codec_for(path: os.PathLike | str) -> Codec:
    try:
        return _CODECS[Path(path).suffix.lower()]
    except KeyError as exc:
        raise UnknownFormatError(path) from exc


def store_state(target, path: os.PathLike | str) -> None:
    """Serialise ``target.store()`` to *path* (overwritten)."""
    codec = codec_for(path)
    data = target.store()
    try:
        payload = codec.dumps(data)
    except codec.errors as exc:
        raise CodecError(path, exc) from exc
    try:
        if codec.binary:
            Path(path).write_bytes(payload)
        else:
            Path(path).write_text(payload, encoding="utf-8")
    except OSError as exc:
        raise PersistenceIOError(path, exc) from exc
    logger.info("Stored %s state to %s (%s)", type(target).__name__, path, codec.name)


def load_state(target, path: os.PathLike | str) -> None:
    """Read *path* and hand the decoded blob to ``target.load``."""
    codec = codec_for(path)
    try:
        if codec.binary:
            payload = Path(path).read_bytes()
        else:
            payload = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise PersistenceIOError(path, exc) from exc
    except UnicodeDecodeError as exc:
        raise CodecError(path, exc) from exc
    try:
        data = codec.loads(payload)
    except codec.errors as exc:
        raise CodecError(path, exc) from exc
    target.load(data)
    logger.info("Loaded %s state from %s (%s)", type(target).__name__, path, codec.name)
