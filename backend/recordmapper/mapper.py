from recordmapper.extractor import build_descriptor
from recordmapper.naming import camel_to_snake
from recordmapper.orm_types import FieldKind, declared_columns


class Mapper:
    def __init__(self, cls, meta_attrs):
        self.cls = cls
        self.meta = meta_attrs or {}
        self.table_key = self.meta.get("table_name") or cls.__name__
        self.table_name = camel_to_snake(self.table_key)
        self.columns = declared_columns(cls)
        self.pk = None
        self.pk_column = None
        self._row_descriptors = None
        self._resolve_pk()

    def __repr__(self):
        cols = ", ".join(self.columns.keys())
        return f"<Mapper class={self.cls.__name__} table={self.table_name} columns=[{cols}] pk={self.pk}>"

    def _resolve_pk(self):
        pk_cols = [name for name, col in self.columns.items() if col.primary_key and col.column]
        if not pk_cols and "id" in self.columns and self.columns["id"].column:
            pk_cols = ["id"]
        if pk_cols:
            self.pk = pk_cols[0]
            self.pk_column = self.columns[self.pk].column

    @property
    def row_descriptors(self):
        """Descriptors of the fields written into this record's own row."""
        if self._row_descriptors is None:
            descriptors = []
            for name, col in self.columns.items():
                if col.kind is FieldKind.RECORD:
                    continue
                descriptor = build_descriptor(name, col)
                if descriptor.renders_column:
                    descriptors.append(descriptor)
            self._row_descriptors = descriptors
        return self._row_descriptors

    def collection_columns(self):
        return [
            (name, col) for name, col in self.columns.items()
            if col.kind in (FieldKind.ARRAY, FieldKind.POINTER_ARRAY) and col.join is not None and not col.dbskip
        ]

    def row_data(self, entity):
        from recordmapper.base import Entity

        data = {}
        for descriptor in self.row_descriptors:
            value = getattr(entity, descriptor.attribute_name, None)
            if isinstance(value, Entity):
                value = value.get_id()
            data[descriptor.column_name] = value
        return data

    def hydrate(self, row):
        obj = self.cls()
        for descriptor in self.row_descriptors:
            if descriptor.column_name in row:
                object.__setattr__(obj, descriptor.attribute_name, row[descriptor.column_name])
        return obj
