from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .record import Entity

"""Document and CarriedFields value objects.

CarriedFields are threaded explicitly between disassemble and reassemble
calls; nothing is held in module-level state.
"""

__all__ = [
    "PLACEHOLDER",
    "CarriedFields",
    "Document",
]

PLACEHOLDER = "PLACEHOLDER"


@dataclass(frozen=True)
class CarriedFields:
    """Document-level values that never appear in any Grid.

    ``transaction_id`` / ``client_code`` are ``None`` when the source had none;
    ``data`` is an opaque JSON value (object, array, scalar or null).
    """
    transaction_id: str | None = None
    client_code: str | None = None
    data: Any = None


@dataclass(frozen=True)
class Document:
    """``benefitRequest`` document. ``entities`` order is the CVS map order."""
    transaction_id: str | None
    client_code: str | None
    data: Any
    entities: tuple[Entity, ...] = ()

    @property
    def carried(self) -> CarriedFields:
        return CarriedFields(
            transaction_id=self.transaction_id,
            client_code=self.client_code,
            data=self.data,
        )

    def entity_names(self) -> list[str]:
        return [e.name for e in self.entities]

    def entity(self, name: str) -> Entity:
        for e in self.entities:
            if e.name == name:
                return e
        raise KeyError(name)
