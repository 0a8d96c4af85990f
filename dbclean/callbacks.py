"""Lifecycle callbacks notified around a clean."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from dbclean.log import get_logger

logger = get_logger(__name__)

BEFORE_CLEAN = "beforeClean"
AFTER_CLEAN = "afterClean"


class Callback:
    """Base class for clean callbacks. Both hooks are no-ops by default.

    Each hook receives the raw psycopg2 connection. It runs inside the
    transaction opened for the hook, with `search_path` set to the home schema.
    """

    def before_clean(self, connection) -> None:
        pass

    def after_clean(self, connection) -> None:
        pass


class SqlScriptCallback(Callback):
    """Runs `beforeClean.sql` / `afterClean.sql` scripts found in `locations`.

    Scripts ending in `.sql.j2` are rendered as Jinja2 templates with
    `placeholders` as their variables.
    """

    def __init__(self, locations, placeholders=None):
        self.locations = [Path(location) for location in locations]
        self.placeholders = dict(placeholders or {})

    def __repr__(self):
        return f"SqlScriptCallback({[str(location) for location in self.locations]})"

    def scripts_for(self, event: str) -> list[Path]:
        scripts = []
        for location in self.locations:
            if not location.is_dir():
                logger.warning("Skipping callback location %s: not a directory", location)
                continue
            for name in (f"{event}.sql", f"{event}.sql.j2"):
                script = location / name
                if script.is_file():
                    scripts.append(script)
        return scripts

    def render(self, script: Path) -> str:
        if script.suffix == ".j2":
            env = Environment(loader=FileSystemLoader(script.parent))
            template = env.get_template(script.name)
            return template.render(**self.placeholders)
        return script.read_text()

    def _run(self, event, connection):
        for script in self.scripts_for(event):
            logger.info("Executing SQL callback: %s", script.name)
            with connection.cursor() as cursor:
                cursor.execute(self.render(script))

    def before_clean(self, connection) -> None:
        self._run(BEFORE_CLEAN, connection)

    def after_clean(self, connection) -> None:
        self._run(AFTER_CLEAN, connection)
