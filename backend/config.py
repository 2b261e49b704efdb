import os
import logging
from dataclasses import dataclass

from backend.errors import ConfigError

COUNTER_ID = "visitor-count"


@dataclass(frozen=True)
class Settings:
    table_name: str
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        table_name = env.get("TABLE_NAME", "").strip()
        if not table_name:
            raise ConfigError("TABLE_NAME environment variable is required")
        return cls(table_name=table_name, log_level=env.get("LOG_LEVEL", "INFO").upper())


def configure_logging(level=None):
    # Lambda installs a root handler already; only the level is ours to set.
    level = level or os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.getLogger("backend").setLevel(level)
