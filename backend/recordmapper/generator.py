import logging
from dataclasses import dataclass, field
from typing import List

from recordmapper.executor import DDLExecutor
from recordmapper.extractor import extract_schema
from recordmapper.naming import camel_to_snake

logger = logging.getLogger("recordmapper.generator")

# short type codes accepted by create_table_sql
FIELD_TYPES = {
    "string": "varchar(255) not null",
    "uuid": "varchar(35) not null",
    "uuidpk": "varchar(35) not null primary key",
    "int": "int not null default 0",
    "long": "text",
}


@dataclass
class JoinTableSpec:
    table_name: str
    first_table: str
    first_key: str
    second_table: str
    second_key: str
    statement: str = ""

    def render(self):
        self.statement = (
            f"CREATE TABLE IF NOT EXISTS {self.table_name} "
            f"({self.first_key} varchar(35) not null, {self.second_key} varchar(35) not null)"
        )
        return self


@dataclass
class AlterSpec:
    table: str
    key: str
    foreign_key: str
    referenced_table: str
    statement: str = ""

    def render(self):
        table = camel_to_snake(self.table)
        reference = camel_to_snake(self.referenced_table)
        self.statement = (
            f"ALTER TABLE {table} ADD CONSTRAINT fk_{table}_{reference} "
            f"FOREIGN KEY ({self.foreign_key or self.key}) REFERENCES {reference} (id)"
        )
        return self


@dataclass
class SchemaPlan:
    tables: List[str] = field(default_factory=list)
    joins: List[JoinTableSpec] = field(default_factory=list)
    alters: List[AlterSpec] = field(default_factory=list)

    def create_statements(self):
        return self.tables + [j.statement for j in self.joins]

    def alter_statements(self):
        return [a.statement for a in self.alters]


class SchemaGenerator:
    def generate_create_table(self, key, definitions):
        table_name = camel_to_snake(key)
        body = ",\n    ".join(definitions)
        return f"CREATE TABLE IF NOT EXISTS {table_name} (\n    {body}\n)"

    def generate_join_table(self, descriptor):
        spec = descriptor.join
        table_name = descriptor.table_name or spec.default_table_name()
        join = JoinTableSpec(
            table_name=table_name,
            first_table=spec.first_table,
            first_key=spec.first_key,
            second_table=spec.second_table,
            second_key=spec.second_key,
        ).render()
        alters = [
            AlterSpec(table_name, spec.first_key, spec.first_key, spec.first_table).render(),
            AlterSpec(table_name, spec.second_key, spec.second_key, spec.second_table).render(),
        ]
        return join, alters

    def generate_reference(self, key, descriptor):
        return AlterSpec(
            table=descriptor.table_name or camel_to_snake(key),
            key=descriptor.column_name,
            foreign_key=descriptor.foreign_key,
            referenced_table=descriptor.references,
        ).render()

    def synthesize(self, schema_map):
        plan = SchemaPlan()
        for key, descriptors in schema_map.items():
            definitions = []
            for descriptor in descriptors:
                if descriptor.is_sentinel:
                    continue
                if descriptor.renders_column:
                    definitions.append(descriptor.render().definition)
                if descriptor.join is not None:
                    join, alters = self.generate_join_table(descriptor)
                    plan.joins.append(join)
                    plan.alters.extend(alters)
                if descriptor.references:
                    plan.alters.append(self.generate_reference(key, descriptor))
            if definitions:
                plan.tables.append(self.generate_create_table(key, definitions))
        return plan

    def create_table_sql(self, table, fields):
        """CREATE statement from an explicit ``[(name, type_code), ...]`` list."""
        lines = []
        for name, datatype in fields:
            lines.append(f"{name.upper()} {FIELD_TYPES.get(datatype, datatype)}")
        body = ",\n    ".join(lines)
        return f"CREATE TABLE {table} (\n    {body}\n)"

    def create_all(self, engine, record_types, max_workers=None):
        schema_map, errors = extract_schema(record_types, max_workers)
        for err in errors:
            logger.error("%s", err)
        plan = self.synthesize(schema_map)
        logger.info(
            "applying %d table(s), %d join table(s), %d constraint(s)",
            len(plan.tables), len(plan.joins), len(plan.alters),
        )
        return DDLExecutor(engine, max_workers).apply(plan)
