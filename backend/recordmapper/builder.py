import re


class QueryBuilder:
    def __init__(self, placeholder="?", quote_char='"', dialect="sqlite"):
        self.placeholder = placeholder
        self.quote_char = quote_char
        self.dialect = dialect
        self._safe_ident_pattern = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')

    @classmethod
    def for_engine(cls, engine):
        return cls(engine.placeholder, engine.quote_char, engine.dialect)

    def _quote(self, identifier):
        if not identifier or not self._safe_ident_pattern.match(str(identifier)):
            raise ValueError(f"Unsafe SQL identifier: {identifier}")
        return f"{self.quote_char}{identifier}{self.quote_char}"

    def _placeholders(self, count):
        return ", ".join([self.placeholder] * count)

    def build_insert(self, table_name, data):
        """Build INSERT SQL from table name and data dict."""
        table = self._quote(table_name)
        fields = list(data.keys())
        quoted_fields = [self._quote(f) for f in fields]
        values = [data[f] for f in fields]
        sql = f"INSERT INTO {table} ({', '.join(quoted_fields)}) VALUES ({self._placeholders(len(fields))})"
        return sql, tuple(values)

    def build_upsert(self, table_name, data, id_column):
        """INSERT that overwrites the row already stored under ``id_column``."""
        sql, values = self.build_insert(table_name, data)
        columns = [self._quote(f) for f in data if f != id_column]
        key = self._quote(id_column)
        if self.dialect == "mysql":
            assignments = ", ".join(f"{c} = VALUES({c})" for c in columns) or f"{key} = {key}"
            return f"{sql} ON DUPLICATE KEY UPDATE {assignments}", values
        if not columns:
            return f"{sql} ON CONFLICT ({key}) DO NOTHING", values
        assignments = ", ".join(f"{c} = excluded.{c}" for c in columns)
        return f"{sql} ON CONFLICT ({key}) DO UPDATE SET {assignments}", values

    def build_insert_missing(self, table_name, data):
        """INSERT that is skipped when an identical row already exists (join rows have no key)."""
        table = self._quote(table_name)
        fields = list(data.keys())
        quoted_fields = [self._quote(f) for f in fields]
        values = tuple(data[f] for f in fields)
        source = " FROM DUAL" if self.dialect == "mysql" else ""
        match = " AND ".join(f"{f} = {self.placeholder}" for f in quoted_fields)
        sql = (f"INSERT INTO {table} ({', '.join(quoted_fields)}) "
               f"SELECT {self._placeholders(len(fields))}{source} "
               f"WHERE NOT EXISTS (SELECT 1 FROM {table} WHERE {match})")
        return sql, values + values

    def build_update(self, table_name, updates, id_column, record_id):
        updates = list(updates)
        if not updates:
            raise ValueError(f"No columns to update in {table_name}")
        assignments = ", ".join(f"{self._quote(key)} = {self.placeholder}" for key, _ in updates)
        params = [value for _, value in updates] + [record_id]
        sql = (f"UPDATE {self._quote(table_name)} SET {assignments} "
               f"WHERE {self._quote(id_column)} = {self.placeholder}")
        return sql, tuple(params)

    def build_delete(self, table_name, id_column, record_id):
        sql = f"DELETE FROM {self._quote(table_name)} WHERE {self._quote(id_column)} = {self.placeholder}"
        return sql, (record_id,)

    def build_select_by_id(self, table_name, id_column, record_id):
        sql = f"SELECT * FROM {self._quote(table_name)} WHERE {self._quote(id_column)} = {self.placeholder}"
        return sql, (record_id,)

    def build_take(self, table_name, id_column, record_id):
        sql, params = self.build_select_by_id(table_name, id_column, record_id)
        return f"{sql} LIMIT 1", params

    def build_select_in(self, table_name, id_column, ids):
        ids = list(ids)
        sql = (f"SELECT * FROM {self._quote(table_name)} "
               f"WHERE {self._quote(id_column)} IN ({self._placeholders(len(ids))})")
        return sql, tuple(ids)

    def build_select_column(self, table_name, column, where_column, value):
        sql = (f"SELECT {self._quote(column)} FROM {self._quote(table_name)} "
               f"WHERE {self._quote(where_column)} = {self.placeholder}")
        return sql, (value,)
