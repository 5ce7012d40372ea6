"""Escaping of field names that collide with MongoDB reserved characters.

MongoDB treats a leading ``$`` as an operator and ``.`` as nested-field
addressing. Paths use ``.`` as the segment separator and ``\\.`` for a literal
dot inside a segment. Inside a stored key the literal dot becomes ``\\_`` and a
leading ``$`` becomes ``\\$``.
"""

from __future__ import annotations

import re
from typing import Any

_UNESCAPED_DOT = re.compile(r"(?<!\\)\.")


def escape_key(key: str) -> str:
    """Escape a single key (no separators) for storage."""
    escaped = key.replace(".", "\\_")
    if escaped.startswith("$"):
        return "\\" + escaped
    return escaped


def unescape_key(key: str) -> str:
    """Reverse :func:`escape_key`."""
    if key.startswith("\\$"):
        key = key[1:]
    return key.replace("\\_", ".")


def escape_path(path: str) -> str:
    """Escape every segment of a path, keeping unescaped dots as separators.

    ``personalia\\.age`` becomes ``personalia\\_age`` (one field) while
    ``meta.$type`` becomes ``meta.\\$type`` (nested field).
    """
    return ".".join(
        escape_key(segment.replace("\\.", "."))
        for segment in _UNESCAPED_DOT.split(path)
    )


def unescape_path(path: str) -> str:
    """Reverse :func:`escape_path`, restoring ``\\.`` for literal dots."""
    return ".".join(
        unescape_key(segment).replace(".", "\\.") for segment in path.split(".")
    )


def escape_keys(value: Any) -> Any:
    """Recursively escape the keys of a document before it is written."""
    if isinstance(value, dict):
        return {escape_key(str(k)): escape_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [escape_keys(v) for v in value]
    return value


def unescape_keys(value: Any) -> Any:
    """Recursively unescape the keys of a document read from the store."""
    if isinstance(value, dict):
        return {unescape_key(str(k)): unescape_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [unescape_keys(v) for v in value]
    return value
