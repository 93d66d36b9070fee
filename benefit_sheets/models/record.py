from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

"""Record / Entity / Grid value objects.

A Record keeps the source encoding of a mapping: an ordered list of
(attribute, value) pairs in which names may repeat. Collapsing to a mapping
(last value wins, first position wins for order) only happens at flatten time.

All objects are frozen; every transformation builds new instances.
"""

__all__ = [
    "AttributeValue",
    "Record",
    "Entity",
    "Grid",
    "to_text",
]


def to_text(value: Any) -> str:
    """Coerce a JSON value to cell text. ``None`` renders as the empty string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    # nested object / array: 文字列化して保持
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


@dataclass(frozen=True)
class AttributeValue:
    attribute: str
    value: str = ""


@dataclass(frozen=True)
class Record:
    """One row of data: ordered attribute/value pairs (duplicates tolerated)."""
    pairs: tuple[AttributeValue, ...] = ()

    @staticmethod
    def of(items: Iterable[tuple[str, Any]] | Mapping[str, Any]) -> Record:
        """Build a Record from ``(name, value)`` tuples or a mapping, coercing values to text."""
        if isinstance(items, Mapping):
            items = items.items()
        return Record(tuple(AttributeValue(str(k), to_text(v)) for k, v in items))

    def attributes(self) -> list[str]:
        """Unique attribute names in first-seen order."""
        return list(dict.fromkeys(p.attribute for p in self.pairs))

    def as_mapping(self) -> dict[str, str]:
        """Collapse pairs into a mapping: first position kept, last value wins."""
        out: dict[str, str] = {}
        for p in self.pairs:
            out[p.attribute] = p.value
        return out

    def __len__(self) -> int:
        return len(self.pairs)


@dataclass(frozen=True)
class Entity:
    """Named domain object: a singleton record or a collection of records."""
    name: str
    records: tuple[Record, ...] = ()
    singleton: bool = False

    def __post_init__(self) -> None:
        if self.singleton and len(self.records) != 1:
            raise ValueError(
                f"singleton entity '{self.name}' must hold exactly one record, got {len(self.records)}"
            )

    @staticmethod
    def single(name: str, record: Record) -> Entity:
        return Entity(name=name, records=(record,), singleton=True)

    @staticmethod
    def collection(name: str, records: Iterable[Record] = ()) -> Entity:
        return Entity(name=name, records=tuple(records), singleton=False)

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass(frozen=True)
class Grid:
    """Rectangular header + rows table representing one Entity.

    ``rows`` may be ragged: a cell is absent when the row is shorter than the
    header or holds ``None``. Absent cells read as ``""`` through :meth:`cell`.
    """
    name: str
    header: tuple[str, ...] = ()
    rows: tuple[tuple[str | None, ...], ...] = field(default_factory=tuple)

    @property
    def has_header(self) -> bool:
        return bool(self.header)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def is_absent(self, row: int, col: int) -> bool:
        cells = self.rows[row]
        return col >= len(cells) or cells[col] is None

    def cell(self, row: int, col: int) -> str:
        if self.is_absent(row, col):
            return ""
        return self.rows[row][col]  # type: ignore[return-value]

    def to_matrix(self) -> list[list[str]]:
        """Header row followed by data rows, padded to header width with ``""``."""
        width = len(self.header)
        matrix = [list(self.header)]
        for r in range(len(self.rows)):
            matrix.append([self.cell(r, c) for c in range(width)])
        return matrix
