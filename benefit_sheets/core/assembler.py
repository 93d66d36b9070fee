from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models.document import PLACEHOLDER, CarriedFields, Document
from ..models.record import Entity, Grid
from .flattener import flatten
from .unflattener import unflatten

"""Document Assembler.

Forward: Document -> (CarriedFields, grids) by flattening every CVS entity in
map order. Reverse: (CarriedFields | None, grids) -> Document by unflattening
every grid in the given order and re-wrapping with the carried fields.

Carried fields are passed by value. With ``carried=None`` (stateless batch
mode, e.g. a workbook with no matching JSON source) the placeholder is used
for ``transactionID`` / ``clientCode`` and ``data`` becomes null.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "disassemble",
    "reassemble",
    "is_emittable",
]


def is_emittable(grid: Grid) -> bool:
    """A grid is emitted only when it has at least one column and one data row."""
    return grid.has_header and grid.row_count > 0


def disassemble(document: Document) -> tuple[CarriedFields, list[Grid]]:
    """Split a Document into its carried fields and one Grid per non-empty entity."""
    grids: list[Grid] = []
    for entity in document.entities:
        if entity.is_empty:
            logger.debug("entity=%s has no records -> skipped", entity.name)
            continue
        grid = flatten(entity)
        if not is_emittable(grid):
            # keyValue が空のレコードのみ: 列が無いので表にできない
            logger.debug("entity=%s has no attributes -> skipped", entity.name)
            continue
        grids.append(grid)
    return document.carried, grids


def reassemble(
    carried: CarriedFields | None,
    grids: Iterable[Grid],
    *,
    placeholder: str = PLACEHOLDER,
) -> Document:
    """Rebuild a Document from grids plus carried fields.

    Later grids with a name already present replace the earlier entity in place.
    """
    entities: dict[str, Entity] = {}
    for grid in grids:
        entity = unflatten(grid)
        if entity.is_empty:
            logger.debug("grid=%s has no data rows -> no entity", grid.name)
            continue
        entities[grid.name] = entity

    if carried is None:
        carried = CarriedFields()
    return Document(
        transaction_id=carried.transaction_id if carried.transaction_id is not None else placeholder,
        client_code=carried.client_code if carried.client_code is not None else placeholder,
        data=carried.data,
        entities=tuple(entities.values()),
    )
