import typing

import pytest

from recordmapper.descriptor import ColumnDescriptor, type_keyword
from recordmapper.extractor import build_descriptor
from recordmapper.orm_types import (
    Boolean, Collection, Column, Embedded, Float, Identifier, JoinSpec, Number, Reference, Text, Timestamp,
    FieldKind, field_kind,
)


class Customer:
    id = Identifier("id", primary_key=True)


class Audit:
    created = Timestamp("created")


def describe(column, name="field"):
    column.__set_name__(object, name)
    return build_descriptor(name, column)


def test_identifier_primary_key_renders_varchar35_and_primary_key():
    d = describe(Identifier("id", primary_key=True, null="false")).render()
    assert d.sql_type == "varchar(35)"
    assert "varchar(35)" in d.definition
    assert d.definition.endswith("PRIMARY KEY")
    assert d.definition == "id varchar(35) NOT NULL PRIMARY KEY"


@pytest.mark.parametrize("null", ["true", "false", True, False])
def test_any_declared_nullability_renders_not_null(null):
    d = describe(Text("name", null=null)).render()
    assert "NOT NULL" in d.definition


def test_nullability_values_are_normalized():
    assert describe(Text("a", null="true")).null == "null"
    assert describe(Text("a", null="false")).null == "not null"
    assert describe(Text("a")).null is None
    assert "NOT NULL" not in describe(Text("a")).render().definition


def test_malformed_nullability_raises():
    with pytest.raises(ValueError):
        describe(Number("a", null=3))


def test_timestamp_with_default():
    d = describe(Timestamp("created", null="false", default="NOW()")).render()
    assert d.sql_type == "datetime"
    assert d.definition == "created DATETIME NOT NULL DEFAULT NOW()"


@pytest.mark.parametrize("column, sql_type, keyword", [
    (Text("name"), "varchar(255)", "varchar(255)"),
    (Text("body", datatype="long"), "long", "TEXT"),
    (Text("code", datatype="char(3)"), "char(3)", "varchar(255)"),
    (Number("qty"), "integer", "INT"),
    (Number("ttl", datatype="duration"), "duration", "INT"),
    (Boolean("active"), "tinyint(1)", "TINYINT(1)"),
    (Float("price"), "float(8,2)", "FLOAT(8,2)"),
])
def test_resolved_types_and_keywords(column, sql_type, keyword):
    d = describe(column).render()
    assert d.sql_type == sql_type
    assert d.definition.split(" ")[1] == keyword


def test_skip_beats_every_other_annotation():
    col = Identifier("id", primary_key=True, null="false", references="customer", dbskip=True)
    d = describe(col)
    assert d.is_sentinel
    assert d.render().definition == ""


def test_missing_column_annotation_is_not_persisted():
    assert describe(Text()).is_sentinel


def test_primary_key_ignored_outside_identifier_types():
    d = describe(Column(str, "name", primary_key=True, references="x", foreign_key="y"))
    assert not d.primary_key
    assert d.references == ""
    assert d.foreign_key == ""


def test_pointer_to_record_propagates_reference():
    d = describe(Reference(Customer, "customer_id", references="customer", foreign_key="customer_id"))
    assert d.sql_type == "varchar(35)"
    assert d.references == "customer"
    assert d.foreign_key == "customer_id"
    assert d.render().definition == "customer_id varchar(35)"


def test_collections_only_carry_join_spec():
    d = describe(Collection(Customer, "customers", join="Order:order_id,Customer:customer_id"))
    assert d.sql_type == ""
    assert d.join == JoinSpec("Order", "order_id", "Customer", "customer_id")
    assert not d.renders_column

    pointer = describe(Collection(Customer, "customers", join="A:a,B:b", pointer=True))
    assert pointer.join == JoinSpec("A", "a", "B", "b")


def test_unsupported_kinds_are_not_persisted():
    assert describe(Column(dict, "meta")).is_sentinel
    assert describe(Column(typing.Callable, "hook")).is_sentinel
    assert describe(Column(typing.Optional[int], "maybe")).is_sentinel


def test_field_kinds():
    assert field_kind(bool) is FieldKind.BOOLEAN
    assert field_kind(int) is FieldKind.INTEGER
    assert field_kind(typing.List[Customer]) is FieldKind.ARRAY
    assert field_kind(typing.Optional[typing.List[Customer]]) is FieldKind.POINTER_ARRAY
    assert field_kind(Customer | None) is FieldKind.POINTER_RECORD
    assert field_kind(Audit) is FieldKind.RECORD
    assert Embedded(Audit).kind is FieldKind.RECORD
    assert field_kind(typing.Optional["Customer"]) is FieldKind.POINTER_RECORD
    assert Reference("Customer", "parent_id").kind is FieldKind.POINTER_RECORD


def test_join_spec_parse_rejects_malformed():
    with pytest.raises(ValueError):
        JoinSpec.parse("A:id,B:id")
    with pytest.raises(ValueError):
        JoinSpec.parse("Order:order_id")
    with pytest.raises(ValueError):
        JoinSpec.parse("Order:order_id,Product")
    with pytest.raises(ValueError):
        JoinSpec.parse("A:a,B:b,C:c")


def test_type_keyword_ignores_spacing_and_case():
    assert type_keyword("FLOAT(8, 2)") == "FLOAT(8,2)"
    assert type_keyword("Integer") == "INT"


def test_sentinel_descriptor():
    assert ColumnDescriptor.sentinel("x").is_sentinel
