"""Session wrapper around a psycopg2 connection."""

from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from psycopg2 import sql

from dbclean.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class TransactionTemplate:
    """Runs a unit of work inside a single transaction.

    The connection is expected to be in autocommit mode outside of templates.
    """

    def __init__(self, raw):
        self.raw = raw

    def execute(self, callback: Callable[[], T]) -> T:
        previous = self.raw.autocommit
        self.raw.autocommit = False
        try:
            result = callback()
            self.raw.commit()
            return result
        except Exception:
            self.raw.rollback()
            raise
        finally:
            self.raw.autocommit = previous


class Connection:
    """Live database session with a switchable `search_path`."""

    def __init__(self, raw):
        self.raw = raw
        self._original_search_path: str | None = None

    def _fetchone(self, query, params=None):
        with self.raw.cursor() as cursor:
            cursor.execute(query, params)
            return cursor.fetchone()

    def current_schema(self) -> str | None:
        return self._fetchone("SELECT current_schema()")[0]

    def change_current_schema_to(self, schema) -> None:
        if self._original_search_path is None:
            self._original_search_path = self._fetchone("SHOW search_path")[0]
            logger.debug("Captured original search_path: %s", self._original_search_path)
        with self.raw.cursor() as cursor:
            cursor.execute(
                sql.SQL("SET search_path TO {}").format(sql.Identifier(schema.name))
            )

    def restore_current_schema(self) -> None:
        if self._original_search_path is None:
            return
        with self.raw.cursor() as cursor:
            cursor.execute(
                "SELECT set_config('search_path', %s, false)", (self._original_search_path,)
            )
        logger.debug("Restored search_path to %s", self._original_search_path)
        self._original_search_path = None

    @contextmanager
    def schema_context(self) -> Iterator["Connection"]:
        """Yield the session and restore the original schema on every exit path."""
        try:
            yield self
        finally:
            self.restore_current_schema()

    def transaction(self) -> TransactionTemplate:
        return TransactionTemplate(self.raw)
