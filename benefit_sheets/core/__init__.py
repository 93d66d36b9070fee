"""Bidirectional schema-translation engine (Entity <-> Grid, Document <-> Grids)."""

from .assembler import disassemble, reassemble
from .flattener import flatten
from .unflattener import unflatten

__all__ = [
    "flatten",
    "unflatten",
    "disassemble",
    "reassemble",
]
