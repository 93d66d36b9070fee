from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..models.document import Document
from ..models.record import AttributeValue, Entity, Record, to_text

"""JSON collaborator: benefitRequest document <-> Document.

Expected shape::

    {"benefitRequest": {
        "transactionID": ..., "clientCode": ..., "data": ...,
        "dataSet": {"CVS": {
            "<Entity>": {"keyValue": [{"attribute": ..., "value": ...}, ...]}
                      | [{"keyValue": [...]}, ...]
        }}}}

Entity values that match neither shape are skipped with a warning.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "MalformedDocumentError",
    "parse_document",
    "document_from_json",
    "document_to_json",
    "serialize_document",
    "load_document",
    "dump_document",
]

ROOT_KEY = "benefitRequest"
KEY_VALUE = "keyValue"


class MalformedDocumentError(Exception):
    """Raised when the JSON lacks benefitRequest / dataSet / CVS or a keyValue entry is unusable."""


def _require_object(parent: dict[str, Any], key: str, where: str) -> dict[str, Any]:
    value = parent.get(key)
    if not isinstance(value, dict):
        raise MalformedDocumentError(f"no '{key}' object found in {where}")
    return value


def _parse_record(entity_name: str, obj: dict[str, Any]) -> Record:
    raw_pairs = obj[KEY_VALUE]
    pairs: list[AttributeValue] = []
    for i, kv in enumerate(raw_pairs):
        if not isinstance(kv, dict) or "attribute" not in kv:
            raise MalformedDocumentError(
                f"entity '{entity_name}' keyValue[{i}] is not an attribute/value object"
            )
        pairs.append(AttributeValue(attribute=to_text(kv["attribute"]), value=to_text(kv.get("value"))))
    return Record(tuple(pairs))


def _has_key_value(obj: Any) -> bool:
    return isinstance(obj, dict) and isinstance(obj.get(KEY_VALUE), list)


def _parse_entity(name: str, value: Any) -> Entity | None:
    if isinstance(value, dict):
        if not _has_key_value(value):
            logger.warning("skipping entity=%s: no 'keyValue' found", name)
            return None
        return Entity.single(name, _parse_record(name, value))
    if isinstance(value, list):
        records: list[Record] = []
        for i, element in enumerate(value):
            if not _has_key_value(element):
                logger.warning("entity=%s element[%d] has no 'keyValue' -> skipped", name, i)
                continue
            records.append(_parse_record(name, element))
        return Entity.collection(name, records)
    logger.warning("skipping entity=%s: unrecognized type %s (not object/array)", name, type(value).__name__)
    return None


def document_from_json(root: Any, source: str = "document") -> Document:
    """Build a Document from an already-decoded JSON value."""
    if not isinstance(root, dict):
        raise MalformedDocumentError(f"{source} is not a JSON object")
    request = _require_object(root, ROOT_KEY, source)
    data_set = _require_object(request, "dataSet", source)
    cvs = _require_object(data_set, "CVS", source)

    entities = []
    for name, value in cvs.items():
        entity = _parse_entity(name, value)
        if entity is not None:
            entities.append(entity)

    return Document(
        transaction_id=request.get("transactionID"),
        client_code=request.get("clientCode"),
        data=request.get("data"),
        entities=tuple(entities),
    )


def parse_document(text: str, source: str = "document") -> Document:
    try:
        root = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDocumentError(f"invalid JSON in {source}: {e}") from e
    return document_from_json(root, source)


def _record_to_json(record: Record) -> dict[str, Any]:
    return {KEY_VALUE: [{"attribute": p.attribute, "value": p.value} for p in record.pairs]}


def document_to_json(document: Document) -> dict[str, Any]:
    """Document -> plain JSON structure (insertion order = output order)."""
    cvs: dict[str, Any] = {}
    for entity in document.entities:
        if entity.singleton:
            cvs[entity.name] = _record_to_json(entity.records[0])
        else:
            cvs[entity.name] = [_record_to_json(r) for r in entity.records]
    return {
        ROOT_KEY: {
            "transactionID": document.transaction_id,
            "clientCode": document.client_code,
            "data": document.data,
            "dataSet": {"CVS": cvs},
        }
    }


def serialize_document(document: Document) -> str:
    return json.dumps(document_to_json(document), indent=4, ensure_ascii=False)


def load_document(path: Path) -> Document:
    """Read and parse a JSON file. I/O errors propagate as OSError."""
    text = path.read_text(encoding="utf-8")
    return parse_document(text, source=path.name)


def dump_document(document: Document, path: Path) -> Path:
    path.write_text(serialize_document(document) + "\n", encoding="utf-8")
    return path
