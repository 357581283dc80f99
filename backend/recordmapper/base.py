import uuid
from abc import ABC, abstractmethod

from recordmapper.errors import RecordError
from recordmapper.extractor import extract_columns
from recordmapper.mapper import Mapper
from recordmapper.naming import camel_to_snake
from recordmapper.orm_types import IDENTIFIER, FieldKind


class Entity(ABC):
    """Anything the repository can write as a row."""

    @abstractmethod
    def get_table(self):
        pass

    @abstractmethod
    def get_id(self):
        pass

    @abstractmethod
    def row_data(self):
        """Column name -> value for this entity's row."""
        pass

    def get_children(self):
        return []


class JoinDescriptor:
    def __init__(self, table, parent_table, child_table):
        self.table = table
        self.parent_table = parent_table
        self.child_table = child_table

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.parent_table}->{self.child_table} table={self.table or None}>"

    def get_table(self):
        return self.table

    def get_id(self):
        return None

    def get_parent_table(self):
        return self.parent_table

    def get_child_table(self):
        return self.child_table


class AssociationRow(JoinDescriptor, Entity):
    """A join-table row pairing a parent with one of its children."""

    def __init__(self, table, keys, parent_table, child_table):
        super().__init__(table, parent_table, child_table)
        self.keys = dict(keys)

    def get_id(self):
        return ":".join(str(v) for v in self.keys.values())

    def row_data(self):
        return dict(self.keys)


class Record(Entity):
    def __repr__(self):
        pk = self._mapper.pk
        pk_val = getattr(self, pk, None) if pk else None
        return f"<{self.__class__.__name__}(id={pk_val if pk_val is not None else 'New'})>"

    def __init__(self, **kwargs):
        for name, col in self._mapper.columns.items():
            if col.kind in (FieldKind.ARRAY, FieldKind.POINTER_ARRAY):
                object.__setattr__(self, name, [])
            else:
                object.__setattr__(self, name, None)
        for key, value in kwargs.items():
            setattr(self, key, value)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        meta_cls = cls.__dict__.get("Meta")
        meta_attrs = {}
        if meta_cls:
            for attr in dir(meta_cls):
                if not attr.startswith('_'):
                    meta_attrs[attr] = getattr(meta_cls, attr)

        cls._mapper = Mapper(cls, meta_attrs)

    @classmethod
    def table_name(cls):
        return cls._mapper.table_name

    def get_table(self):
        return self._mapper.table_name

    def get_id(self):
        pk = self._mapper.pk
        if pk is None:
            raise RecordError(f"{self.__class__.__name__} declares no primary key")
        return getattr(self, pk)

    def ensure_id(self):
        """Give identifier-typed primary keys a fresh value when unset."""
        pk = self._mapper.pk
        if pk is None or getattr(self, pk) is not None:
            return
        if self._mapper.columns[pk].datatype == IDENTIFIER:
            object.__setattr__(self, pk, uuid.uuid4().hex)

    def row_data(self):
        return self._mapper.row_data(self)

    def get_children(self):
        children = []
        for name, _ in self._mapper.collection_columns():
            for item in getattr(self, name) or []:
                if isinstance(item, Entity):
                    children.append(item)
        return children

    def _is_table(self, name):
        return name == self.__class__.__name__ or camel_to_snake(name) == self.get_table()

    def join_keys(self, spec):
        """(own key, other key) of a join as seen from this record."""
        if self._is_table(spec.second_table) and not self._is_table(spec.first_table):
            return spec.second_key, spec.first_key
        return spec.first_key, spec.second_key

    def get_join(self, child):
        for name, col in self._mapper.collection_columns():
            items = getattr(self, name) or []
            if not any(item is child for item in items):
                continue
            spec = col.join_spec
            own_key, other_key = self.join_keys(spec)
            values = {own_key: self.get_id(), other_key: child.get_id()}
            keys = {spec.first_key: values[spec.first_key], spec.second_key: values[spec.second_key]}
            return AssociationRow(col.join_table, keys, self.get_table(), child.get_table())
        return JoinDescriptor("", self.get_table(), child.get_table())

    @classmethod
    def from_row(cls, row):
        return cls._mapper.hydrate(row)

    @classmethod
    def populate_schema(cls, schema_map):
        return extract_columns(cls, schema_map, cls._mapper.table_key)
