from dataclasses import dataclass, field, replace
from typing import Tuple

OPERATORS = ("=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "IN")
JOIN_TYPES = ("INNER", "LEFT", "RIGHT", "CROSS")


@dataclass(frozen=True)
class TableRef:
    name: str
    alias: str
    key: str = "id"


@dataclass(frozen=True)
class SelectQuery:
    """Chainable SELECT text. Every call returns a new query; nothing is shared.

        q = (SelectQuery()
             .select("purchase", "p", "p", ["id", "total"])
             .join("inner", TableRef("customer", "c", "id"), TableRef("purchase", "p", "customer_id"))
             .where(TableRef("customer", "c", "name"), "=", "Ada"))
        sql, params = q.build()
    """
    sql: str = ""
    params: Tuple = field(default=())
    placeholder: str = "?"

    def select(self, table, table_alias, column_alias, columns):
        cols = ", ".join(f"{column_alias}.{c}" for c in columns)
        return replace(self, sql=f"SELECT {cols} FROM {table} {table_alias}", params=())

    def join(self, join_type, table, other):
        join_type = join_type.upper()
        if join_type not in JOIN_TYPES:
            raise ValueError(f"Unknown join type: {join_type}")
        clause = (f" {join_type} JOIN {table.name} {table.alias} "
                  f"ON {table.alias}.{table.key} = {other.alias}.{other.key}")
        return replace(self, sql=self.sql + clause)

    def where(self, table, operator, value):
        operator = operator.upper()
        if operator not in OPERATORS:
            raise ValueError(f"Unknown operator: {operator}")
        if self.sql.endswith((" AND", " OR")):
            keyword = ""
        elif " WHERE " in self.sql:
            # consecutive conditions default to AND
            keyword = " AND"
        else:
            keyword = " WHERE"
        if operator == "IN":
            values = tuple(value)
            marks = ", ".join([self.placeholder] * len(values))
            clause = f"{keyword} {table.alias}.{table.key} IN ({marks})"
            return replace(self, sql=self.sql + clause, params=self.params + values)
        clause = f"{keyword} {table.alias}.{table.key} {operator} {self.placeholder}"
        return replace(self, sql=self.sql + clause, params=self.params + (value,))

    def and_(self):
        return replace(self, sql=self.sql + " AND")

    def or_(self):
        return replace(self, sql=self.sql + " OR")

    def build(self):
        if not self.sql:
            raise ValueError("Query has no SELECT clause")
        return self.sql, self.params
