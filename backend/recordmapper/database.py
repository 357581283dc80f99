import sqlite3
import logging
import threading

import pymysql
import pymysql.cursors

from recordmapper.settings import DatabaseSettings


class DatabaseEngine:
    logger = logging.getLogger("recordmapper")
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    def __init__(self, settings=None, db_path=None):
        if settings is None:
            settings = DatabaseSettings(path=db_path or ":memory:")
        self.settings = settings
        self.connection = None
        self._lock = threading.Lock()
        self.dialect = settings.driver
        if settings.driver == "mysql":
            self.placeholder = "%s"
            self.quote_char = "`"
        else:
            self.placeholder = "?"
            self.quote_char = '"'
        self.connect()

    def connect(self):
        s = self.settings
        if s.driver == "mysql":
            self.connection = pymysql.connect(
                host=s.host,
                port=s.port,
                user=s.user,
                password=s.password,
                database=s.dbname or None,
                autocommit=True,
                cursorclass=pymysql.cursors.DictCursor,
            )
        else:
            self.connection = sqlite3.connect(s.path, check_same_thread=False, isolation_level=None)
            self.connection.row_factory = sqlite3.Row
        self.ping()
        return self.connection

    def ping(self):
        if self.settings.driver == "mysql":
            self.connection.ping(reconnect=True)
        else:
            self.connection.execute("SELECT 1")

    def _log(self, sql, params=None):
        msg = f"[SQL EXECUTE]: {sql}"
        if params:
            msg += f" | [PARAMS]: {params}"
        self.logger.info(msg)

    def execute(self, sql, params=None):
        self._log(sql, params)
        with self._lock:
            cursor = self.connection.cursor()
            try:
                cursor.execute(sql, params or ())
                return [dict(row) for row in cursor.fetchall()]
            finally:
                cursor.close()

    def close(self):
        if self.connection is not None:
            self.connection.close()
            self.connection = None
