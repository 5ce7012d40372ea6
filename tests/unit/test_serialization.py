"""Unit tests for item <-> document conversion."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from mongo_transporter.exceptions import TransporterValidationError
from mongo_transporter.serialization import doc_to_item, item_to_doc


def test_item_to_doc_derives_primary_key() -> None:
    doc = item_to_doc({"type": "entry", "id": "ent1", "title": "One"})

    assert doc == {"type": "entry", "id": "ent1", "title": "One", "_id": "entry:ent1"}


def test_item_to_doc_escapes_keys() -> None:
    doc = item_to_doc({"type": "entry", "id": "ent1", "$meta": {"x.y": 1}})

    assert doc["\\$meta"] == {"x\\_y": 1}


def test_item_to_doc_does_not_mutate_item() -> None:
    item = {"type": "entry", "id": "ent1"}

    item_to_doc(item)

    assert item == {"type": "entry", "id": "ent1"}


def test_item_to_doc_requires_type_and_id() -> None:
    with pytest.raises(TransporterValidationError):
        item_to_doc({"type": "entry"})
    with pytest.raises(TransporterValidationError):
        item_to_doc({"id": "ent1"})


def test_doc_to_item_drops_primary_key() -> None:
    created = datetime(2025, 1, 1, tzinfo=timezone.utc)
    doc = {"_id": "entry:ent1", "id": "ent1", "type": "entry", "created": created}

    assert doc_to_item(doc) == {"id": "ent1", "type": "entry", "created": created}


def test_doc_to_item_keeps_group_key() -> None:
    doc = {"_id": {"account": "acc1"}, "personalia\\_age": 40}

    assert doc_to_item(doc) == {"_id": {"account": "acc1"}, "personalia.age": 40}


def test_round_trip() -> None:
    item = {"type": "entry", "id": "ent1", "attributes": {"$ref": "x", "a.b": [1]}}

    assert doc_to_item(item_to_doc(item)) == item
