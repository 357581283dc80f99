import pytest

from recordmapper import Record, SchemaGenerator
from recordmapper.descriptor import SchemaMap
from recordmapper.extractor import extract, extract_columns, extract_schema
from recordmapper.orm_types import Collection, Embedded, Identifier, Number, Reference, Text, Timestamp


class Product(Record):
    id = Identifier("id", primary_key=True)
    name = Text("name", null="false")


class Order(Record):
    id = Identifier("id", primary_key=True)
    products = Collection(Product, "products", join="Order:order_id,Product:product_id")


class Customer(Record):
    id = Identifier("id", primary_key=True)
    name = Text("name")


class Invoice(Record):
    id = Identifier("id", primary_key=True)
    customer = Reference(Customer, "customer_id", references="customer")
    total = Number("total", default=0)


class Audit:
    created = Timestamp("created", null="false", default="CURRENT_TIMESTAMP")
    author = Text("author")


class Note(Record):
    id = Identifier("id", primary_key=True)
    body = Text("body", datatype="long")
    audit = Embedded(Audit)


class Broken(Record):
    id = Identifier("id", primary_key=True)
    weight = Number("weight", null=3.5)


class Renamed(Record):
    class Meta:
        table_name = "LineItem"

    id = Identifier("id", primary_key=True)
    tags = Collection(Product, "tags", join="LineItem:line_item_id,Product:product_id", table_name="line_tags")


def plan_for(*types):
    schema_map, errors = extract_schema(types)
    return SchemaGenerator().synthesize(schema_map), errors


def test_join_tag_yields_join_table_and_two_constraints():
    plan, errors = plan_for(Order)
    assert errors == []
    assert len(plan.joins) == 1
    join = plan.joins[0]
    assert join.table_name == "order__product"
    assert "order_id varchar(35) not null" in join.statement
    assert "product_id varchar(35) not null" in join.statement
    assert len(plan.alters) == 2
    assert plan.alters[0].referenced_table == "Order"
    assert plan.alters[1].referenced_table == "Product"
    assert "FOREIGN KEY (order_id) REFERENCES order (id)" in plan.alters[0].statement
    assert "FOREIGN KEY (product_id) REFERENCES product (id)" in plan.alters[1].statement


def test_join_table_override():
    plan, _ = plan_for(Renamed)
    assert [j.table_name for j in plan.joins] == ["line_tags"]
    assert plan.tables == ["CREATE TABLE IF NOT EXISTS line_item (\n    id varchar(35) PRIMARY KEY\n)"]
    assert all(a.statement.startswith("ALTER TABLE line_tags ") for a in plan.alters)


def test_create_table_lists_columns_in_declaration_order():
    plan, _ = plan_for(Product)
    assert plan.tables == [
        "CREATE TABLE IF NOT EXISTS product (\n"
        "    id varchar(35) PRIMARY KEY,\n"
        "    name varchar(255) NOT NULL\n"
        ")"
    ]
    assert plan.joins == []
    assert plan.alters == []


def test_reference_produces_constraint_on_owning_table():
    plan, _ = plan_for(Invoice)
    assert "customer_id varchar(35)" in plan.tables[0]
    assert "total INT DEFAULT 0" in plan.tables[0]
    assert [a.statement for a in plan.alters] == [
        "ALTER TABLE invoice ADD CONSTRAINT fk_invoice_customer FOREIGN KEY (customer_id) REFERENCES customer (id)"
    ]


def test_embedded_record_columns_land_under_its_own_key():
    result = extract(Note)
    assert result.ok
    assert [d.column_name for d in result.fragment["Note"]] == ["id", "body"]
    assert [d.column_name for d in result.fragment["Audit"]] == ["created", "author"]

    plan = SchemaGenerator().synthesize(result.fragment)
    assert "CREATE TABLE IF NOT EXISTS audit (\n    created DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP" in plan.tables[1]
    assert "body TEXT" in plan.tables[0]


def test_malformed_type_is_contained():
    plan, errors = plan_for(Product, Broken, Customer)
    assert len(errors) == 1
    assert errors[0].type_name == "Broken"
    assert len(plan.tables) == 2
    assert not any("broken" in sql for sql in plan.tables)


def test_failed_walk_contributes_nothing_to_shared_map():
    schema_map = SchemaMap()
    errors = extract_columns(Broken, schema_map)
    assert len(errors) == 1
    assert schema_map == {}


def test_shared_key_appends_descriptors():
    class Extra:
        id = Identifier("id", primary_key=True)

    schema_map = SchemaMap()
    extract_columns(Customer, schema_map, "Customer")
    extract_columns(Extra, schema_map, "Customer")
    assert [d.column_name for d in schema_map["Customer"]] == ["id", "name", "id"]


def test_skipped_fields_and_sentinels_are_not_rendered():
    class Draft(Record):
        id = Identifier("id", primary_key=True)
        scratch = Text("scratch", dbskip=True)
        label = Text()

    plan, _ = plan_for(Draft)
    assert plan.tables == ["CREATE TABLE IF NOT EXISTS draft (\n    id varchar(35) PRIMARY KEY\n)"]


def test_populate_schema_uses_table_key():
    schema_map = SchemaMap()
    assert Renamed.populate_schema(schema_map) == []
    assert list(schema_map) == ["LineItem"]


def test_create_table_sql_field_list():
    sql = SchemaGenerator().create_table_sql("users", [("id", "uuidpk"), ("name", "string"), ("age", "int")])
    assert sql == (
        "CREATE TABLE users (\n"
        "    ID varchar(35) not null primary key,\n"
        "    NAME varchar(255) not null,\n"
        "    AGE int not null default 0\n"
        ")"
    )


@pytest.mark.parametrize("code, rendered", [("uuid", "varchar(35) not null"), ("long", "text")])
def test_create_table_sql_type_codes(code, rendered):
    assert SchemaGenerator().create_table_sql("t", [("f", code)]) == f"CREATE TABLE t (\n    F {rendered}\n)"


class Category(Record):
    id = Identifier("id", primary_key=True)
    parent = Reference("Category", "parent_id", references="category")
    name = Text("name")


def test_self_reference_keeps_its_column_and_constraint():
    result = extract(Category)
    assert result.ok
    assert [d.column_name for d in result.fragment["Category"]] == ["id", "parent_id", "name"]

    plan = SchemaGenerator().synthesize(result.fragment)
    assert "parent_id varchar(35)" in plan.tables[0]
    assert [a.statement for a in plan.alters] == [
        "ALTER TABLE category ADD CONSTRAINT fk_category_category FOREIGN KEY (parent_id) REFERENCES category (id)"
    ]


def test_join_with_shared_key_name_is_reported():
    class Tagged(Record):
        id = Identifier("id", primary_key=True)
        tags = Collection(Product, "tags", join="Tagged:id,Product:id")

    plan, errors = plan_for(Tagged, Product)
    assert len(errors) == 1
    assert "distinct keys" in str(errors[0])
    assert plan.joins == []
