from __future__ import annotations

from benefit_sheets.core.assembler import disassemble, is_emittable, reassemble
from benefit_sheets.models.document import PLACEHOLDER, CarriedFields, Document
from benefit_sheets.models.record import Entity, Grid, Record


def _doc(*entities: Entity, data=None) -> Document:
    return Document(transaction_id="TX", client_code="CC", data=data, entities=tuple(entities))


def test_disassemble_in_map_order_and_carried_verbatim():
    data = [1, {"nested": True}, None]
    doc = _doc(
        Entity.single("B", Record.of([("x", "1")])),
        Entity.collection("A", [Record.of([("y", "2")]), Record.of([("y", "3")])]),
        data=data,
    )
    carried, grids = disassemble(doc)
    assert carried == CarriedFields("TX", "CC", data)
    assert carried.data is data
    assert [g.name for g in grids] == ["B", "A"]


def test_disassemble_skips_empty_entities():
    doc = _doc(
        Entity.collection("Empty"),
        Entity.single("NoAttrs", Record()),
        Entity.single("Kept", Record.of([("k", "v")])),
    )
    _, grids = disassemble(doc)
    assert [g.name for g in grids] == ["Kept"]


def test_reassemble_without_carried_state_uses_placeholders():
    doc = reassemble(None, [Grid("Plan", ("A",), (("1",),))])
    assert doc.transaction_id == PLACEHOLDER
    assert doc.client_code == PLACEHOLDER
    assert doc.data is None
    assert doc.entity_names() == ["Plan"]


def test_reassemble_custom_placeholder_and_partial_carried():
    doc = reassemble(CarriedFields(transaction_id="TX", client_code=None, data=0), [], placeholder="N/A")
    assert doc.transaction_id == "TX"
    assert doc.client_code == "N/A"
    assert doc.data == 0
    assert doc.entities == ()


def test_reassemble_omits_header_only_grids():
    doc = reassemble(None, [Grid("Empty", ("A",), ()), Grid("NoHeader"), Grid("Ok", ("A",), (("1",), ("2",)))])
    assert doc.entity_names() == ["Ok"]


def test_example_end_to_end():
    doc = _doc(
        Entity.single("GeneralPlanDetails", Record.of([("MobInd", "N")])),
        Entity.collection("Copay", [Record.of([("Channel", "RTL")]), Record.of([("Channel", "MAIL")])]),
    )
    carried, grids = disassemble(doc)
    assert grids == [
        Grid("GeneralPlanDetails", ("MobInd",), (("N",),)),
        Grid("Copay", ("Channel",), (("RTL",), ("MAIL",))),
    ]
    assert reassemble(carried, grids) == doc


def test_is_emittable():
    assert not is_emittable(Grid("A"))
    assert not is_emittable(Grid("A", ("x",), ()))
    assert is_emittable(Grid("A", ("x",), (("1",),)))
