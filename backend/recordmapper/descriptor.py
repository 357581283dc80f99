from dataclasses import dataclass, replace
from typing import Optional

from recordmapper.orm_types import JoinSpec

# resolved sql type (lower-cased) -> rendered type keyword
TYPE_KEYWORDS = {
    "varchar(35)": "varchar(35)",
    "identifier": "varchar(35)",
    "datetime": "DATETIME",
    "timestamp": "DATETIME",
    "tinyint(1)": "TINYINT(1)",
    "bool": "TINYINT(1)",
    "boolean": "TINYINT(1)",
    "float(8,2)": "FLOAT(8,2)",
    "float": "FLOAT(8,2)",
    "integer": "INT",
    "int": "INT",
    "duration": "INT",
    "long": "TEXT",
    "text": "TEXT",
}
DEFAULT_TYPE_KEYWORD = "varchar(255)"


def type_keyword(sql_type):
    return TYPE_KEYWORDS.get(sql_type.replace(" ", "").lower(), DEFAULT_TYPE_KEYWORD)


@dataclass(frozen=True)
class ColumnDescriptor:
    attribute_name: str = ""
    column_name: str = ""
    sql_type: str = ""
    foreign_key: str = ""
    references: str = ""
    primary_key: bool = False
    null: Optional[str] = None
    default: Optional[str] = None
    join: Optional[JoinSpec] = None
    table_name: str = ""
    definition: str = ""

    @classmethod
    def sentinel(cls, attribute_name=""):
        return cls(attribute_name=attribute_name)

    @property
    def is_sentinel(self):
        return not self.column_name

    @property
    def renders_column(self):
        return bool(self.column_name) and self.join is None and bool(self.sql_type)

    def render(self):
        """Return a copy carrying the rendered column definition.

        NOT NULL follows any non-empty nullability value, so ``null="true"``
        renders NOT NULL exactly like ``null="false"``. Generated schemas
        depend on this.
        """
        if not self.renders_column:
            return self
        parts = [self.column_name, type_keyword(self.sql_type)]
        if self.null:
            parts.append("NOT NULL")
        if self.default:
            parts.append(f"DEFAULT {self.default}")
        if self.primary_key:
            parts.append("PRIMARY KEY")
        return replace(self, definition=" ".join(parts))


class SchemaMap(dict):
    """Table key -> column descriptors in declaration order. Merging only appends."""

    def add(self, key, descriptor):
        self.setdefault(key, []).append(descriptor)

    def merge(self, other):
        for key, descriptors in other.items():
            self.setdefault(key, []).extend(descriptors)
        return self
