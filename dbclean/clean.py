"""Main workflow for cleaning the database."""

import enum

from dbclean.callbacks import AFTER_CLEAN, BEFORE_CLEAN
from dbclean.exceptions import HookFailed, OperationDisabled, SchemaOperationFailed
from dbclean.log import get_logger
from dbclean.utils import StopWatch, format_duration

logger = get_logger(__name__)


class CleanPolicy(enum.Enum):
    """What happens to each existing target schema."""

    DROP = "drop"
    CLEAN = "clean"


def resolve_policy(schema_history) -> CleanPolicy:
    """Drop schemas when the history carries the schemas marker, clean them otherwise.

    A failing marker query falls back to the less destructive CLEAN policy.
    """
    try:
        has_marker = schema_history.has_schemas_marker()
    except Exception:
        logger.error("Error while checking whether the schemas should be dropped", exc_info=True)
        return CleanPolicy.CLEAN
    return CleanPolicy.DROP if has_marker else CleanPolicy.CLEAN


class DbClean:
    """Drops or empties the target schemas, notifying callbacks around it.

    Args:
        connection: The session whose `search_path` is switched and restored.
        schema_history: The schema history table.
        schemas: The schemas to clean. The first one is the home schema.
        callbacks: Callbacks fired before and after the clean, in order.
        clean_disabled: Refuse to run at all.
        transaction_template: Runs each unit of work atomically. Defaults to
            `connection.transaction()`.
    """

    def __init__(
        self,
        connection,
        schema_history,
        schemas,
        callbacks=(),
        clean_disabled: bool = False,
        transaction_template=None,
    ):
        self.connection = connection
        self.schema_history = schema_history
        self.schemas = list(schemas)
        self.callbacks = list(callbacks)
        self.clean_disabled = clean_disabled
        self._transaction_template = transaction_template

    @property
    def transaction_template(self):
        if self._transaction_template is None:
            self._transaction_template = self.connection.transaction()
        return self._transaction_template

    def _switch_to_home(self) -> None:
        if self.schemas:
            self.connection.change_current_schema_to(self.schemas[0])

    def clean(self) -> None:
        if self.clean_disabled:
            raise OperationDisabled()

        with self.connection.schema_context():
            self._notify(BEFORE_CLEAN)

            self._switch_to_home()
            policy = resolve_policy(self.schema_history)

            for schema in self.schemas:
                try:
                    exists = schema.exists()
                except Exception as e:
                    raise SchemaOperationFailed(schema, "inspect", e) from e
                if not exists:
                    logger.warning("Unable to clean unknown schema: %s", schema)
                    continue
                self._apply(policy, schema)

            self._notify(AFTER_CLEAN)
            self.schema_history.clear_cache()

    def _notify(self, phase: str) -> None:
        for callback in self.callbacks:
            hook = callback.before_clean if phase == BEFORE_CLEAN else callback.after_clean

            def unit_of_work():
                self._switch_to_home()
                hook(self.connection.raw)

            try:
                self.transaction_template.execute(unit_of_work)
            except Exception as e:
                raise HookFailed(callback, phase, e) from e

    def _apply(self, policy: CleanPolicy, schema) -> None:
        if policy is CleanPolicy.DROP:
            self._drop_schema(schema)
        else:
            self._clean_schema(schema)

    def _drop_schema(self, schema) -> None:
        logger.debug("Dropping schema %s ...", schema)
        stop_watch = StopWatch()
        stop_watch.start()
        try:
            self.transaction_template.execute(schema.drop)
        except Exception as e:
            raise SchemaOperationFailed(schema, "drop", e) from e
        stop_watch.stop()
        logger.info(
            "Successfully dropped schema %s (execution time %s)",
            schema,
            format_duration(stop_watch.total_time_millis),
        )

    def _clean_schema(self, schema) -> None:
        logger.debug("Cleaning schema %s ...", schema)
        stop_watch = StopWatch()
        stop_watch.start()
        try:
            self.transaction_template.execute(schema.clean)
        except Exception as e:
            raise SchemaOperationFailed(schema, "clean", e) from e
        stop_watch.stop()
        logger.info(
            "Successfully cleaned schema %s (execution time %s)",
            schema,
            format_duration(stop_watch.total_time_millis),
        )
