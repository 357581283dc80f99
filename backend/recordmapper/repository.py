import logging

from recordmapper.base import Entity, Record
from recordmapper.builder import QueryBuilder
from recordmapper.errors import CyclicGraphError, RecordError, RecordNotFoundError, RowOperationError
from recordmapper.generator import SchemaGenerator
from recordmapper.query import SelectQuery

logger = logging.getLogger("recordmapper.repository")


def _mapper_of(record):
    cls = record if isinstance(record, type) else type(record)
    mapper = getattr(cls, "_mapper", None)
    if mapper is None:
        raise RecordError(f"{cls.__name__} is not a Record type")
    return mapper


def _id_column(record):
    mapper = _mapper_of(record)
    if mapper.pk_column is None:
        raise RecordError(f"{mapper.cls.__name__} declares no primary key")
    return mapper.pk_column


def _holds(col, child_type):
    item_type = getattr(col, "item_type", None)
    if isinstance(item_type, str):
        return item_type == child_type.__name__
    return isinstance(item_type, type) and issubclass(child_type, item_type)


class Repository:
    def __init__(self, engine, tables=None):
        self.engine = engine
        self.builder = QueryBuilder.for_engine(engine)
        self.generator = SchemaGenerator()
        self.tables = []
        self.register_table(*(tables or []))

    def register_table(self, *record_types):
        for record_type in record_types:
            if record_type not in self.tables:
                self.tables.append(record_type)

    def create_tables(self, max_workers=None):
        return self.generator.create_all(self.engine, self.tables, max_workers)

    def query(self):
        return SelectQuery(placeholder=self.engine.placeholder)

    def _run(self, table, action, sql, params, record_id=None):
        try:
            return self.engine.execute(sql, params)
        except Exception as e:
            raise RowOperationError(table, action, e, record_id) from e

    # reads

    def select(self, record_type, record_id):
        mapper = _mapper_of(record_type)
        sql, params = self.builder.build_select_by_id(mapper.table_name, _id_column(record_type), record_id)
        rows = self._run(mapper.table_name, "SELECT", sql, params, record_id)
        return [mapper.cls.from_row(row) for row in rows]

    def select_in(self, record_type, ids):
        mapper = _mapper_of(record_type)
        ids = list(ids)
        if not ids:
            return []
        sql, params = self.builder.build_select_in(mapper.table_name, _id_column(record_type), ids)
        rows = self._run(mapper.table_name, "SELECT", sql, params)
        return [mapper.cls.from_row(row) for row in rows]

    def take(self, record_type, record_id):
        mapper = _mapper_of(record_type)
        sql, params = self.builder.build_take(mapper.table_name, _id_column(record_type), record_id)
        rows = self._run(mapper.table_name, "SELECT", sql, params, record_id)
        if not rows:
            raise RecordNotFoundError(mapper.table_name, record_id)
        return mapper.cls.from_row(rows[0])

    def find(self, entity):
        return self.select(type(entity), entity.get_id())

    def fetch(self, query, record_type=None):
        sql, params = query.build()
        table = _mapper_of(record_type).table_name if record_type else "query"
        rows = self._run(table, "SELECT", sql, params)
        if record_type is None:
            return rows
        return [record_type.from_row(row) for row in rows]

    def _join_for(self, parent, child_type):
        for _, col in parent._mapper.collection_columns():
            if _holds(col, child_type):
                own_key, other_key = parent.join_keys(col.join_spec)
                return col.join_table, own_key, other_key
        parent_table = parent.get_table()
        child_table = _mapper_of(child_type).table_name
        return f"{parent_table}_{child_table}", f"{parent_table}_id", f"{child_table}_id"

    def get_child_ids(self, parent, child_type):
        table, parent_key, child_key = self._join_for(parent, child_type)
        parent_id = parent.get_id()
        sql, params = self.builder.build_select_column(table, child_key, parent_key, parent_id)
        rows = self._run(table, "SELECT", sql, params, parent_id)
        return [row[child_key] for row in rows]

    def get_children(self, parent, child_type):
        return self.select_in(child_type, self.get_child_ids(parent, child_type))

    # writes

    def _identity(self, entity):
        try:
            record_id = entity.get_id()
        except RecordError:
            record_id = None
        return record_id

    def insert(self, entity):
        if isinstance(entity, Record):
            entity.ensure_id()
        table = entity.get_table()
        sql, params = self.builder.build_insert(table, entity.row_data())
        self._run(table, "INSERT", sql, params, self._identity(entity))

    def upsert(self, entity):
        """Insert ``entity``, overwriting the row already stored under its key.

        Rows without a key (join rows) are written only when no identical row exists.
        """
        if isinstance(entity, Record):
            entity.ensure_id()
        table = entity.get_table()
        data = entity.row_data()
        pk_column = entity._mapper.pk_column if isinstance(entity, Record) else None
        if pk_column in data:
            sql, params = self.builder.build_upsert(table, data, pk_column)
        else:
            sql, params = self.builder.build_insert_missing(table, data)
        self._run(table, "INSERT", sql, params, self._identity(entity))

    def update(self, entity, record_id, updates):
        table = _mapper_of(entity).table_name
        if hasattr(updates, "items"):
            updates = updates.items()
        sql, params = self.builder.build_update(table, updates, _id_column(entity), record_id)
        self._run(table, "UPDATE", sql, params, record_id)

    def delete(self, entity):
        record_id = entity.get_id()
        table = entity.get_table()
        sql, params = self.builder.build_delete(table, _id_column(entity), record_id)
        self._run(table, "DELETE", sql, params, record_id)

    # graph saving. Rows are upserted; not transactional, rows written before a failure stay written.

    def _enter(self, entity, path):
        if isinstance(entity, Record):
            entity.ensure_id()
        record_id = self._identity(entity)
        key = (entity.get_table(), record_id if record_id is not None else id(entity))
        if key in path:
            raise CyclicGraphError(entity.get_table(), key[1])
        return path | {key}

    def save(self, root):
        path = self._enter(root, frozenset())
        self.upsert(root)
        self.save_all(root.get_children(), _path=path)

    def save_all(self, records, _path=frozenset()):
        for record in records:
            path = self._enter(record, _path)
            self.upsert(record)
            self.save_children(record, record.get_children(), _path=path)

    def save_children(self, parent, children, _path=None):
        path = _path if _path is not None else self._enter(parent, frozenset())
        for child in children:
            child_path = self._enter(child, path)
            logger.debug("saving %r under %r", child, parent)
            self.upsert(child)
            join = parent.get_join(child)
            if isinstance(join, Entity):
                self.upsert(join)
            grandchildren = child.get_children()
            if grandchildren:
                self.save_children(child, grandchildren, _path=child_path)

    def save_graph(self, root):
        """Save ``root``, every reachable child, and the join rows linking them."""
        self.save_all([root])
