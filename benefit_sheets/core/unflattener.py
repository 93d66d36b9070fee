from __future__ import annotations

from ..models.record import AttributeValue, Entity, Grid, Record

"""Unflattener: one Grid -> one Entity.

Cardinality is inferred from the number of data rows:

* 0 rows (or no header) -> empty collection, callers omit it
* 1 row                 -> singleton
* 2+ rows               -> collection, one record per row

The rule is lossy by nature: a one-element collection comes back as a
singleton after a round trip.

Blank header cells are dropped in both branches, and only the first column
carrying a given header name is read. Absent cells (short rows) omit the
attribute from that record; present empty cells keep it with value "".
"""

__all__ = [
    "addressable_columns",
    "unflatten",
]


def _is_blank(name: str | None) -> bool:
    return name is None or not name.strip()


def addressable_columns(header: tuple[str, ...]) -> list[tuple[int, str]]:
    """(column index, name) pairs that map to attributes, in header order."""
    seen: set[str] = set()
    out: list[tuple[int, str]] = []
    for col, name in enumerate(header):
        if _is_blank(name) or name in seen:
            continue
        seen.add(name)
        out.append((col, name))
    return out


def _row_to_record(grid: Grid, row: int, columns: list[tuple[int, str]]) -> Record:
    pairs = [
        AttributeValue(attribute=name, value=grid.cell(row, col))
        for col, name in columns
        if not grid.is_absent(row, col)
    ]
    return Record(tuple(pairs))


def unflatten(grid: Grid) -> Entity:
    """Convert a Grid into an Entity named after it.

    Never raises for a well-formed Grid: a header-less or header-only grid
    produces an empty collection.
    """
    if not grid.has_header or grid.row_count == 0:
        return Entity.collection(grid.name)

    columns = addressable_columns(grid.header)
    if grid.row_count == 1:
        return Entity.single(grid.name, _row_to_record(grid, 0, columns))
    return Entity.collection(
        grid.name,
        (_row_to_record(grid, r, columns) for r in range(grid.row_count)),
    )
