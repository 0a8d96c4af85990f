"""Database operations for cleaning PostgreSQL schemas."""

from contextlib import contextmanager

import psycopg2
from rich.console import Console
from rich.table import Table

from dbclean.callbacks import SqlScriptCallback
from dbclean.clean import DbClean, resolve_policy
from dbclean.config import CleanConfig
from dbclean.connection import Connection
from dbclean.schema import PostgresSchema
from dbclean.schema_history import SchemaHistory


class Database:
    """Wires a `CleanConfig` into a live session and the clean workflow."""

    def __init__(self, config: CleanConfig, callbacks=(), console: Console | None = None):
        self.config = config
        self.extra_callbacks = list(callbacks)
        self.console = console or Console()

    def _get_connection(self):
        """Get a database connection."""
        conn = psycopg2.connect(
            host=self.config.host,
            port=self.config.port,
            dbname=self.config.dbname,
            user=self.config.user,
            password=self.config.password,
        )
        conn.autocommit = True
        return conn

    @contextmanager
    def session(self):
        raw = self._get_connection()
        try:
            yield Connection(raw)
        finally:
            raw.close()

    def schemas(self, connection: Connection) -> list[PostgresSchema]:
        names = self.config.schemas or [connection.current_schema()]
        return [PostgresSchema(connection, name) for name in names if name]

    def callbacks(self) -> list:
        callbacks = []
        if self.config.callback_locations:
            callbacks.append(
                SqlScriptCallback(self.config.callback_locations, self.config.placeholders)
            )
        return callbacks + self.extra_callbacks

    def _schema_history(self, connection, schemas):
        home = schemas[0] if schemas else PostgresSchema(connection, "public")
        return SchemaHistory(connection, home, self.config.history_table)

    def clean(self) -> None:
        """Drop or empty every configured schema."""
        with self.session() as connection:
            schemas = self.schemas(connection)
            DbClean(
                connection,
                self._schema_history(connection, schemas),
                schemas,
                self.callbacks(),
                self.config.clean_disabled,
            ).clean()
        self.console.print(
            f"[green]✓[/green] Cleaned {', '.join(str(s) for s in schemas)} successfully!"
        )

    def status(self) -> None:
        """Display the target schemas and the policy a clean would apply."""
        with self.session() as connection:
            schemas = self.schemas(connection)
            history = self._schema_history(connection, schemas)
            policy = resolve_policy(history)

            applied = history.all_applied_migrations()

            table = Table(
                title=f"Clean targets (history: {history})",
                caption=f"{len(applied)} applied migration(s)",
            )
            table.add_column("Schema", style="cyan")
            table.add_column("Exists")
            table.add_column("Action")
            for schema in schemas:
                exists = schema.exists()
                table.add_row(
                    schema.name,
                    "[green]yes[/green]" if exists else "[red]no[/red]",
                    policy.value if exists else "skip",
                )
        self.console.print(table)
        if self.config.clean_disabled:
            self.console.print("[yellow]Clean is disabled for this configuration.[/yellow]")
