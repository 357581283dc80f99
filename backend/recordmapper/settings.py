import os

from pydantic import BaseModel, field_validator

ENV_PREFIX = "RECORDMAPPER_"


class DatabaseSettings(BaseModel):
    driver: str = "sqlite"
    path: str = ":memory:"
    user: str = ""
    password: str = ""
    net: str = "tcp"
    addr: str = "127.0.0.1:3306"
    dbname: str = ""

    @field_validator("driver")
    @classmethod
    def _known_driver(cls, value):
        value = value.lower()
        if value not in ("sqlite", "mysql"):
            raise ValueError(f"Unsupported database driver: {value}")
        return value

    @property
    def host(self):
        return self.addr.rsplit(":", 1)[0]

    @property
    def port(self):
        _, sep, port = self.addr.rpartition(":")
        return int(port) if sep and port else 3306

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = environ[key]
        return cls(**values)
