import threading
import time


class RecordingEngine:
    """Engine stand-in that records every statement instead of running it.

    ``fail_on`` maps a substring to the exception raised by statements
    containing it; ``delays`` maps a substring to seconds to sleep first.
    """
    placeholder = "?"
    quote_char = '"'
    dialect = "sqlite"

    def __init__(self, fail_on=None, delays=None, rows=None):
        self.fail_on = fail_on or {}
        self.delays = delays or {}
        self.rows = rows or {}
        self.statements = []
        self.events = []
        self._lock = threading.Lock()

    def _event(self, kind, sql):
        with self._lock:
            self.events.append((kind, sql))

    def execute(self, sql, params=None):
        self._event("start", sql)
        for fragment, seconds in self.delays.items():
            if fragment in sql:
                time.sleep(seconds)
        with self._lock:
            self.statements.append((sql, tuple(params or ())))
        for fragment, error in self.fail_on.items():
            if fragment in sql:
                self._event("end", sql)
                raise error
        self._event("end", sql)
        for fragment, rows in self.rows.items():
            if fragment in sql:
                return [dict(r) for r in rows]
        return []

    def inserts(self):
        return [(sql, params) for sql, params in self.statements if sql.startswith("INSERT")]

    def inserted_tables(self):
        return [sql.split('"')[1] for sql, _ in self.inserts()]
