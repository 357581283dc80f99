from dataclasses import dataclass


class RecordMapperError(Exception):
    pass


class RecordError(RecordMapperError, ValueError):
    pass


class ExtractionError(RecordMapperError):
    def __init__(self, type_name, key, cause):
        self.type_name = type_name
        self.key = key
        self.cause = cause
        super().__init__(f"extracting {type_name} at {key}: {cause}")


@dataclass(frozen=True)
class StatementError:
    statement: str
    message: str

    def __str__(self):
        return f"{self.statement}:{self.message}"


class SchemaApplyError(RecordMapperError):
    def __init__(self, errors):
        self.errors = frozenset(errors)
        lines = "\n".join(sorted(str(e) for e in self.errors))
        super().__init__(f"{len(self.errors)} schema statement(s) failed:\n{lines}")


class RowOperationError(RecordMapperError):
    def __init__(self, table, action, cause, record_id=None):
        self.table = table
        self.action = action
        self.cause = cause
        self.record_id = record_id
        if record_id is None or record_id == "":
            msg = f"{table} {action}: {cause}"
        else:
            msg = f"{table} {action} '{record_id}': {cause}"
        super().__init__(msg)


class RecordNotFoundError(RowOperationError):
    def __init__(self, table, record_id):
        super().__init__(table, "SELECT", "0 results found", record_id)


class CyclicGraphError(RecordMapperError):
    def __init__(self, table, record_id):
        self.table = table
        self.record_id = record_id
        super().__init__(f"Cycle detected while saving graph: {table} '{record_id}' is its own ancestor")
