"""Item <-> stored document conversion.

Payloads are passed through as-is apart from key escaping and the derived
``_id`` primary key.
"""

from __future__ import annotations

from typing import Any, cast

from .escaping import escape_keys, unescape_keys
from .exceptions import TransporterValidationError
from .models import primary_key


def item_key(item: Any) -> str:
    """Return the primary key of an item that must carry ``type`` and ``id``."""
    if not isinstance(item, dict):
        raise TransporterValidationError("Item must be a mapping")
    if item.get("type") is None or item.get("id") is None:
        raise TransporterValidationError("Item must have both 'type' and 'id'")
    return primary_key(item["type"], item["id"])


def item_to_doc(item: dict[str, Any]) -> dict[str, Any]:
    """Convert an item to a document ready for ``replace_one``.

    The ``_id`` is derived from ``type`` and ``id``; both must be present.
    """
    key = item_key(item)
    doc = cast("dict[str, Any]", escape_keys(item))
    doc["_id"] = key
    return doc


def doc_to_item(doc: dict[str, Any]) -> dict[str, Any]:
    """Convert a stored document back to an item.

    A string ``_id`` is the derived primary key and is dropped; any other
    ``_id`` (e.g. a group key from an aggregation) is kept.
    """
    if not isinstance(doc, dict):
        raise TransporterValidationError("Document must be a mapping")
    item = cast("dict[str, Any]", unescape_keys(doc))
    if isinstance(item.get("_id"), str):
        del item["_id"]
    return item
