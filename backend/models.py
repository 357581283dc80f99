from recordmapper import Record
from recordmapper.orm_types import (
    Boolean, Collection, Embedded, Float, Identifier, Number, Reference, Text, Timestamp,
)


class Customer(Record):
    id = Identifier("id", primary_key=True)
    name = Text("name", null="false")
    email = Text("email")


class Product(Record):
    id = Identifier("id", primary_key=True)
    name = Text("name", null="false")
    price = Float("price", default=0)
    in_stock = Boolean("in_stock", default=1)


class Purchase(Record):
    id = Identifier("id", primary_key=True)
    customer = Reference(Customer, "customer_id", references="customer")
    note = Text("note", datatype="long")
    quantity = Number("quantity", default=1)
    products = Collection(Product, "products", join="Purchase:purchase_id,Product:product_id")


# stored in its own "audit" table, not inside invoice
class Audit:
    created_at = Timestamp("created_at", null="false", default="CURRENT_TIMESTAMP")
    created_by = Text("created_by")


class Invoice(Record):
    id = Identifier("id", primary_key=True)
    purchase = Reference(Purchase, "purchase_id", references="purchase")
    total = Float("total")
    audit = Embedded(Audit)
