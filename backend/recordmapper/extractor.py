import logging
from dataclasses import dataclass, field
from typing import List

from recordmapper.descriptor import ColumnDescriptor, SchemaMap
from recordmapper.errors import ExtractionError
from recordmapper.executor import TaskGroup
from recordmapper.orm_types import IDENTIFIER, TIMESTAMP, FieldKind, declared_columns, table_key

logger = logging.getLogger("recordmapper.extractor")

DEFAULT_SQL_TYPES = {
    FieldKind.INTEGER: "integer",
    FieldKind.BOOLEAN: "tinyint(1)",
    FieldKind.FLOAT: "float(8,2)",
}


def _nullability(value):
    if value is None or value == "":
        return None
    if value is True or value == "true":
        return "null"
    if value is False or value == "false":
        return "not null"
    if isinstance(value, str):
        return value
    raise ValueError(f"null annotation must be 'true' or 'false', got {value!r}")


def _text_type(datatype):
    if datatype == IDENTIFIER:
        return "varchar(35)"
    if datatype == TIMESTAMP:
        return "datetime"
    return datatype or "varchar(255)"


def build_descriptor(attribute_name, column):
    """Describe how one declared field is stored.

    Returns the sentinel descriptor for fields that are not persisted.
    Embedded records are not handled here; the walk recurses into them.
    """
    if column.dbskip or not column.column:
        return ColumnDescriptor.sentinel(attribute_name)

    kind = column.kind
    common = dict(
        attribute_name=attribute_name,
        column_name=column.column,
        table_name=column.table_name or "",
    )
    default = None if column.default is None else str(column.default)

    if kind is FieldKind.TEXT:
        sql_type = _text_type(column.datatype)
        if column.datatype == IDENTIFIER:
            return ColumnDescriptor(
                sql_type=sql_type,
                primary_key=bool(column.primary_key),
                foreign_key=column.foreign_key or "",
                references=column.references or "",
                null=_nullability(column.null),
                default=default,
                **common,
            )
        return ColumnDescriptor(sql_type=sql_type, null=_nullability(column.null), default=default, **common)

    if kind in DEFAULT_SQL_TYPES:
        return ColumnDescriptor(
            sql_type=column.datatype or DEFAULT_SQL_TYPES[kind],
            null=_nullability(column.null),
            default=default,
            **common,
        )

    if kind in (FieldKind.ARRAY, FieldKind.POINTER_ARRAY):
        return ColumnDescriptor(join=column.join_spec, **common)

    if kind is FieldKind.POINTER_RECORD:
        return ColumnDescriptor(
            sql_type="varchar(35)",
            primary_key=bool(column.primary_key),
            foreign_key=column.foreign_key or "",
            references=column.references or "",
            null=_nullability(column.null),
            default=default,
            **common,
        )

    return ColumnDescriptor.sentinel(attribute_name)


@dataclass
class ExtractionResult:
    type_name: str
    fragment: SchemaMap = field(default_factory=SchemaMap)
    errors: List[ExtractionError] = field(default_factory=list)

    @property
    def ok(self):
        return not self.errors


def _walk(record_type, schema_map, key, errors, type_name, stack):
    if record_type in stack:
        raise ValueError(f"{record_type.__name__} embeds itself")
    stack = stack + (record_type,)
    for name, column in declared_columns(record_type).items():
        if column.kind is FieldKind.RECORD and column.column and not column.dbskip:
            _walk_subtree(column.dtype, schema_map, table_key(column.dtype), errors, type_name, stack)
            continue
        schema_map.add(key, build_descriptor(name, column))


def _walk_subtree(record_type, schema_map, key, errors, type_name, stack=()):
    scratch = SchemaMap()
    try:
        _walk(record_type, scratch, key, errors, type_name, stack)
    except Exception as e:
        logger.error("panic at %s:%s", key, e)
        errors.append(ExtractionError(type_name, key, e))
        return
    schema_map.merge(scratch)


def extract_columns(record_type, schema_map, key=None):
    """Walk ``record_type`` into the shared ``schema_map``; returns the faults met on the way."""
    errors = []
    _walk_subtree(record_type, schema_map, key or table_key(record_type), errors, record_type.__name__)
    return errors


def extract(record_type):
    result = ExtractionResult(record_type.__name__)
    result.errors = extract_columns(record_type, result.fragment)
    return result


def extract_schema(record_types, max_workers=None):
    """Extract every type in parallel and merge the fragments.

    A type whose walk fails contributes nothing; its errors are returned
    alongside the merged map.
    """
    record_types = list(record_types)
    outcomes = TaskGroup(max_workers).run(
        (t.__name__, lambda t=t: extract(t)) for t in record_types
    )
    merged = SchemaMap()
    errors = []
    for outcome in outcomes:
        if not outcome.ok:
            errors.append(ExtractionError(outcome.label, outcome.label, outcome.error))
            continue
        merged.merge(outcome.value.fragment)
        errors.extend(outcome.value.errors)
    logger.debug("extracted %d table key(s) from %d type(s)", len(merged), len(record_types))
    return merged, errors
