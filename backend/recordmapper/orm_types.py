import types
import typing
from dataclasses import dataclass
from enum import Enum, auto

from recordmapper.naming import camel_to_snake

IDENTIFIER = "identifier"
TIMESTAMP = "timestamp"


class FieldKind(Enum):
    TEXT = auto()
    INTEGER = auto()
    BOOLEAN = auto()
    FLOAT = auto()
    ARRAY = auto()
    POINTER_ARRAY = auto()
    POINTER_RECORD = auto()
    RECORD = auto()
    UNSUPPORTED = auto()


@dataclass(frozen=True)
class JoinSpec:
    """Two participants of a join table, e.g. ``JoinSpec("Order", "order_id", "Product", "product_id")``."""
    first_table: str
    first_key: str
    second_table: str
    second_key: str

    @classmethod
    def parse(cls, text):
        """Parse the ``"Table:key,Table:key"`` form."""
        parts = [p.strip() for p in str(text).split(",")]
        if len(parts) != 2:
            raise ValueError(f"join '{text}' must name exactly two participants")
        pairs = []
        for part in parts:
            table, sep, key = part.partition(":")
            if not sep or not table.strip() or not key.strip():
                raise ValueError(f"join participant '{part}' must have the form Table:key")
            pairs.append((table.strip(), key.strip()))
        (t1, k1), (t2, k2) = pairs
        return cls(t1, k1, t2, k2)

    def __post_init__(self):
        if self.first_key == self.second_key:
            raise ValueError(f"join participants must use distinct keys, both use '{self.first_key}'")

    def default_table_name(self):
        return camel_to_snake(f"{self.first_table}_{self.second_table}")

    def __str__(self):
        return f"{self.first_table}:{self.first_key},{self.second_table}:{self.second_key}"


class Column:
    def __init__(self, dtype, column=None, datatype=None, primary_key=False, foreign_key=None,
                 references=None, null=None, default=None, join=None, table_name=None, dbskip=False):
        self.dtype = dtype
        self.column = column
        self.datatype = datatype
        self.primary_key = primary_key
        self.foreign_key = foreign_key
        self.references = references
        self.null = null
        self.default = default
        self.join = join
        self.table_name = table_name
        self.dbskip = dbskip
        self.name = None
        self._join_spec = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.__dict__.get(self.name)

    def __repr__(self):
        return f"<Column {self.name} column={self.column} kind={self.kind.name}>"

    @property
    def kind(self):
        return field_kind(self.dtype)

    @property
    def join_spec(self):
        if self.join is None:
            return None
        if self._join_spec is None:
            self._join_spec = self.join if isinstance(self.join, JoinSpec) else JoinSpec.parse(self.join)
        return self._join_spec

    @property
    def join_table(self):
        spec = self.join_spec
        if spec is None:
            return None
        return self.table_name or spec.default_table_name()


class Text(Column):
    def __init__(self, column=None, datatype=None, null=None, default=None, table_name=None, dbskip=False):
        super().__init__(str, column, datatype=datatype, null=null, default=default,
                         table_name=table_name, dbskip=dbskip)


class Identifier(Column):
    def __init__(self, column=None, primary_key=False, foreign_key=None, references=None, null=None,
                 default=None, table_name=None, dbskip=False):
        super().__init__(str, column, datatype=IDENTIFIER, primary_key=primary_key, foreign_key=foreign_key,
                         references=references, null=null, default=default, table_name=table_name, dbskip=dbskip)


class Timestamp(Column):
    def __init__(self, column=None, null=None, default=None, dbskip=False):
        super().__init__(str, column, datatype=TIMESTAMP, null=null, default=default, dbskip=dbskip)


class Number(Column):
    def __init__(self, column=None, datatype=None, null=None, default=None, dbskip=False):
        super().__init__(int, column, datatype=datatype, null=null, default=default, dbskip=dbskip)


class Boolean(Column):
    def __init__(self, column=None, datatype=None, null=None, default=None, dbskip=False):
        super().__init__(bool, column, datatype=datatype, null=null, default=default, dbskip=dbskip)


class Float(Column):
    def __init__(self, column=None, datatype=None, null=None, default=None, dbskip=False):
        super().__init__(float, column, datatype=datatype, null=null, default=default, dbskip=dbskip)


class Reference(Column):
    """Pointer to another record, stored as the target's identifier.

    ``target`` may be the class or its name; a record pointing at its own
    type has to use the name.
    """
    def __init__(self, target, column=None, foreign_key=None, references=None, null=None,
                 table_name=None, dbskip=False):
        super().__init__(typing.Optional[target], column, foreign_key=foreign_key, references=references,
                         null=null, table_name=table_name, dbskip=dbskip)
        self.target = target


class Collection(Column):
    def __init__(self, item_type, column=None, join=None, table_name=None, pointer=False, dbskip=False):
        dtype = typing.List[item_type]
        if pointer:
            dtype = typing.Optional[dtype]
        super().__init__(dtype, column, join=join, table_name=table_name, dbskip=dbskip)
        self.item_type = item_type


class Embedded(Column):
    """Nested record whose columns land in a table keyed by the record's class name."""
    def __init__(self, record_type, column=None, dbskip=False):
        super().__init__(record_type, column, dbskip=dbskip)

    def __set_name__(self, owner, name):
        super().__set_name__(owner, name)
        if self.column is None:
            self.column = name


def declared_columns(cls):
    """Columns of ``cls`` in declaration order, base classes first."""
    columns = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, Column):
                columns[name] = value
    return columns


def is_record_type(dtype):
    return isinstance(dtype, type) and bool(declared_columns(dtype))


def pointee(dtype):
    """Target of an ``Optional[X]`` declaration, or None."""
    origin = typing.get_origin(dtype)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(dtype) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return None


def field_kind(dtype):
    target = pointee(dtype)
    if target is not None:
        # named target, e.g. a record pointing at its own type
        if isinstance(target, (str, typing.ForwardRef)):
            return FieldKind.POINTER_RECORD
        inner = field_kind(target)
        if inner in (FieldKind.ARRAY, FieldKind.POINTER_ARRAY):
            return FieldKind.POINTER_ARRAY
        if inner is FieldKind.RECORD:
            return FieldKind.POINTER_RECORD
        return FieldKind.UNSUPPORTED

    origin = typing.get_origin(dtype)
    if origin is not None:
        dtype = origin

    # bool before int: bool is an int subclass
    if dtype is bool:
        return FieldKind.BOOLEAN
    if dtype is str:
        return FieldKind.TEXT
    if dtype is int:
        return FieldKind.INTEGER
    if dtype is float:
        return FieldKind.FLOAT
    if isinstance(dtype, type) and issubclass(dtype, (list, tuple, set, frozenset)):
        return FieldKind.ARRAY
    if is_record_type(dtype):
        return FieldKind.RECORD
    return FieldKind.UNSUPPORTED


def table_key(record_type):
    """Key a record type's columns are extracted under: ``Meta.table_name`` or the class name."""
    meta = vars(record_type).get("Meta")
    return getattr(meta, "table_name", None) or record_type.__name__
