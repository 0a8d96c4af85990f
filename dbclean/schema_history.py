"""Migration ledger stored in a table of the home schema."""

import datetime
from dataclasses import dataclass

import psycopg2
from psycopg2 import sql

from dbclean.exceptions import HistoryQueryFailed
from dbclean.log import get_logger

logger = get_logger(__name__)

SCHEMA_MARKER_TYPE = "SCHEMA"


@dataclass
class AppliedMigration:
    installed_rank: int
    version: str | None
    description: str
    type: str
    script: str
    checksum: int | None
    installed_by: str
    installed_on: datetime.datetime
    execution_time: int
    success: bool


class SchemaHistory:
    """The schema history table.

    Rows read through `all_applied_migrations()` are cached until
    `clear_cache()` is called.
    """

    def __init__(self, connection, schema, table: str = "schema_history"):
        self.connection = connection
        self.schema = schema
        self.table = table
        self._cache: list[AppliedMigration] | None = None

    def __str__(self):
        return f"{self.schema}.\"{self.table}\""

    @property
    def _identifier(self):
        return sql.Identifier(self.schema.name, self.table)

    def _query(self, query, params=None):
        try:
            with self.connection.raw.cursor() as cursor:
                cursor.execute(query, params)
                return cursor.fetchall()
        except psycopg2.Error as e:
            raise HistoryQueryFailed(str(self), e) from e

    def exists(self) -> bool:
        rows = self._query(
            "SELECT to_regclass(%s) IS NOT NULL",
            (self._identifier.as_string(self.connection.raw),),
        )
        return rows[0][0]

    def create(self) -> None:
        logger.info("Creating schema history table %s ...", self)
        with self.connection.raw.cursor() as cursor:
            cursor.execute(
                sql.SQL(
                    """
                    CREATE TABLE IF NOT EXISTS {} (
                        installed_rank INT NOT NULL PRIMARY KEY,
                        version VARCHAR(50),
                        description VARCHAR(200) NOT NULL,
                        type VARCHAR(20) NOT NULL,
                        script VARCHAR(1000) NOT NULL,
                        checksum INTEGER,
                        installed_by VARCHAR(100) NOT NULL DEFAULT current_user,
                        installed_on TIMESTAMP NOT NULL DEFAULT now(),
                        execution_time INTEGER NOT NULL DEFAULT 0,
                        success BOOLEAN NOT NULL
                    )
                    """
                ).format(self._identifier)
            )

    def add_schemas_marker(self, schemas) -> None:
        """Record that `schemas` were created by the migration tool itself."""
        with self.connection.raw.cursor() as cursor:
            cursor.execute(
                sql.SQL(
                    "INSERT INTO {} (installed_rank, version, description, type, script, success)"
                    " VALUES (0, NULL, %s, %s, %s, TRUE)"
                ).format(self._identifier),
                (
                    "<< Schema Creation >>",
                    SCHEMA_MARKER_TYPE,
                    ",".join(str(schema) for schema in schemas),
                ),
            )
        self.clear_cache()

    def all_applied_migrations(self) -> list[AppliedMigration]:
        if self._cache is None:
            if not self.exists():
                return []
            rows = self._query(
                sql.SQL(
                    "SELECT installed_rank, version, description, type, script, checksum,"
                    " installed_by, installed_on, execution_time, success"
                    " FROM {} ORDER BY installed_rank"
                ).format(self._identifier)
            )
            self._cache = [AppliedMigration(*row) for row in rows]
        return self._cache

    def has_schemas_marker(self) -> bool:
        if not self.exists():
            return False
        rows = self._query(
            sql.SQL("SELECT COUNT(*) FROM {} WHERE type = %s").format(self._identifier),
            (SCHEMA_MARKER_TYPE,),
        )
        return rows[0][0] > 0

    def clear_cache(self) -> None:
        self._cache = None
