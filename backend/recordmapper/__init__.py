# recordmapper - declarative records to SQL schema and linked-row persistence
from recordmapper.base import Record, Entity, JoinDescriptor, AssociationRow
from recordmapper.orm_types import (
    Column, Text, Identifier, Timestamp, Number, Boolean, Float, Reference, Collection, Embedded, JoinSpec,
)
from recordmapper.database import DatabaseEngine
from recordmapper.settings import DatabaseSettings
from recordmapper.generator import SchemaGenerator
from recordmapper.repository import Repository
from recordmapper.query import SelectQuery, TableRef
from recordmapper.naming import camel_to_snake

__version__ = "0.1.0"
__all__ = [
    "Record", "Entity", "JoinDescriptor", "AssociationRow",
    "Column", "Text", "Identifier", "Timestamp", "Number", "Boolean", "Float",
    "Reference", "Collection", "Embedded", "JoinSpec",
    "DatabaseEngine", "DatabaseSettings", "SchemaGenerator", "Repository",
    "SelectQuery", "TableRef", "camel_to_snake",
]
