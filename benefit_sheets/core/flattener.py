from __future__ import annotations

from ..models.record import Entity, Grid, Record

"""Flattener: one Entity -> one Grid.

Columns are the union of attribute names across all records in first-seen
order. Records lacking an attribute render that cell as "". Within a record a
repeated attribute keeps its first column position and its last value.
"""

__all__ = [
    "AttributeLookupError",
    "derive_columns",
    "flatten",
]


class AttributeLookupError(LookupError):
    """A record attribute has no column in the derived header.

    Headers are derived from the same records, so this signals an internal fault.
    """


def derive_columns(records: tuple[Record, ...] | list[Record]) -> list[str]:
    """Union of attribute names across records, in first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        for pair in record.pairs:
            seen.setdefault(pair.attribute, None)
    return list(seen)


def _flatten_record(record: Record, index: dict[str, int], width: int) -> tuple[str, ...]:
    row = [""] * width
    for attribute, value in record.as_mapping().items():
        col = index.get(attribute)
        if col is None:
            raise AttributeLookupError(f"attribute '{attribute}' missing from derived header")
        row[col] = value
    return tuple(row)


def flatten(entity: Entity) -> Grid:
    """Convert an Entity into a Grid named after it.

    An entity with zero records yields a Grid with no columns and no rows; the
    caller decides whether to emit it.
    """
    columns = derive_columns(entity.records)
    index = {name: i for i, name in enumerate(columns)}
    rows = tuple(_flatten_record(r, index, len(columns)) for r in entity.records)
    return Grid(name=entity.name, header=tuple(columns), rows=rows)
