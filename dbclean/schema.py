"""Schema handles: existence checks, clean and drop."""

from abc import ABC, abstractmethod

from psycopg2 import sql

from dbclean.log import get_logger

logger = get_logger(__name__)

# Objects created by an extension belong to it and are dropped with it.
_NOT_EXTENSION_MEMBER = """
    NOT EXISTS (
        SELECT 1 FROM pg_depend d
        WHERE d.objid = {oid} AND d.deptype = 'e'
    )
"""


class Schema(ABC):
    """A named namespace in the database."""

    def __init__(self, connection, name: str):
        self.connection = connection
        self.name = name

    @abstractmethod
    def exists(self) -> bool: ...

    @abstractmethod
    def clean(self) -> None:
        """Drop every object in the schema, keeping the schema itself."""

    @abstractmethod
    def drop(self) -> None:
        """Drop the schema together with its contents."""

    def __str__(self):
        return '"' + self.name.replace('"', '""') + '"'

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"

    def __eq__(self, other):
        return isinstance(other, Schema) and other.name == self.name

    def __hash__(self):
        return hash(self.name)


class PostgresSchema(Schema):
    def _fetchall(self, query, params=None):
        with self.connection.raw.cursor() as cursor:
            cursor.execute(query, params)
            return cursor.fetchall()

    def _execute(self, statement):
        with self.connection.raw.cursor() as cursor:
            cursor.execute(statement)

    def _qualified(self, name):
        return sql.Identifier(self.name, name)

    def exists(self) -> bool:
        rows = self._fetchall(
            "SELECT EXISTS (SELECT 1 FROM pg_namespace WHERE nspname = %s)", (self.name,)
        )
        return rows[0][0]

    def drop(self) -> None:
        self._execute(sql.SQL("DROP SCHEMA {} CASCADE").format(sql.Identifier(self.name)))

    def clean(self) -> None:
        for statement in self._clean_statements():
            logger.debug("Executing: %s", statement.as_string(self.connection.raw))
            self._execute(statement)

    def _clean_statements(self):
        yield from self._drop_relations(
            "MATERIALIZED VIEW",
            "SELECT matviewname FROM pg_matviews WHERE schemaname = %s",
        )
        yield from self._drop_relations(
            "VIEW",
            "SELECT viewname FROM pg_views WHERE schemaname = %s",
        )
        yield from self._drop_relations(
            "TABLE",
            f"""
            SELECT c.relname FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE n.nspname = %s AND c.relkind IN ('r', 'p', 'f')
              AND {_NOT_EXTENSION_MEMBER.format(oid="c.oid")}
            """,
        )
        yield from self._drop_relations(
            "SEQUENCE",
            f"""
            SELECT c.relname FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE n.nspname = %s AND c.relkind = 'S'
              AND {_NOT_EXTENSION_MEMBER.format(oid="c.oid")}
            """,
        )
        yield from self._drop_routines()
        yield from self._drop_relations(
            "DOMAIN",
            f"""
            SELECT t.typname FROM pg_type t
            JOIN pg_namespace n ON n.oid = t.typnamespace
            WHERE n.nspname = %s AND t.typtype = 'd'
              AND {_NOT_EXTENSION_MEMBER.format(oid="t.oid")}
            """,
        )
        # Composite types backing a table have already gone with the table.
        yield from self._drop_relations(
            "TYPE",
            f"""
            SELECT t.typname FROM pg_type t
            JOIN pg_namespace n ON n.oid = t.typnamespace
            LEFT JOIN pg_class c ON c.oid = t.typrelid
            WHERE n.nspname = %s AND t.typtype IN ('e', 'r', 'c')
              AND (t.typrelid = 0 OR c.relkind = 'c')
              AND {_NOT_EXTENSION_MEMBER.format(oid="t.oid")}
            """,
        )

    def _drop_relations(self, kind, query):
        for (name,) in self._fetchall(query, (self.name,)):
            yield sql.SQL("DROP {} IF EXISTS {} CASCADE").format(
                sql.SQL(kind), self._qualified(name)
            )

    def _drop_routines(self):
        rows = self._fetchall(
            f"""
            SELECT p.proname, pg_get_function_identity_arguments(p.oid), p.prokind
            FROM pg_proc p
            JOIN pg_namespace n ON n.oid = p.pronamespace
            WHERE n.nspname = %s
              AND {_NOT_EXTENSION_MEMBER.format(oid="p.oid")}
            """,
            (self.name,),
        )
        kinds = {"a": "AGGREGATE", "p": "PROCEDURE"}
        for name, arguments, prokind in rows:
            yield sql.SQL("DROP {} IF EXISTS {}({}) CASCADE").format(
                sql.SQL(kinds.get(prokind, "FUNCTION")),
                self._qualified(name),
                sql.SQL(arguments),
            )
