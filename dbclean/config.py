"""Connection and clean settings, read from the environment and the CLI."""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_placeholders(items) -> dict[str, str]:
    """Turn `["KEY=VALUE", ...]` into a dict."""
    placeholders = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid placeholder {item!r}, expected KEY=VALUE")
        placeholders[key.strip()] = value
    return placeholders


@dataclass
class CleanConfig:
    host: str = "127.0.0.1"
    port: int = 5432
    dbname: str = "postgres"
    user: str = "postgres"
    password: str = "postgres"
    # Resolved by the caller; the first schema is the home schema.
    schemas: list[str] = field(default_factory=list)
    history_table: str = "schema_history"
    callback_locations: list[Path] = field(default_factory=list)
    placeholders: dict[str, str] = field(default_factory=dict)
    clean_disabled: bool = False

    @classmethod
    def from_env(cls) -> "CleanConfig":
        defaults = cls()
        return cls(
            host=os.getenv("DBCLEAN_DB_HOST", defaults.host),
            port=int(os.getenv("DBCLEAN_DB_PORT", str(defaults.port))),
            dbname=os.getenv("DBCLEAN_DB_NAME", defaults.dbname),
            user=os.getenv("DBCLEAN_DB_USER", defaults.user),
            password=os.getenv("DBCLEAN_DB_PASSWORD", defaults.password),
            schemas=_split(os.getenv("DBCLEAN_SCHEMAS")),
            history_table=os.getenv("DBCLEAN_HISTORY_TABLE", defaults.history_table),
            callback_locations=[Path(p) for p in _split(os.getenv("DBCLEAN_CALLBACKS"))],
            placeholders=parse_placeholders(_split(os.getenv("DBCLEAN_PLACEHOLDERS"))),
            clean_disabled=os.getenv("DBCLEAN_CLEAN_DISABLED", "false").lower() == "true",
        )
