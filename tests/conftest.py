"""In-memory collaborators for exercising DbClean without a database."""

import pytest

from dbclean.callbacks import Callback
from dbclean.connection import Connection
from dbclean.schema import Schema


class FakeConnection(Connection):
    """Tracks the ambient schema the way a session's search_path would.

    `schema_context()` is inherited, so the restore path is the real one.
    """

    def __init__(self, calls, current="public"):
        self.calls = calls
        self.current = current
        self.raw = object()
        self._original = None

    def change_current_schema_to(self, schema):
        if self._original is None:
            self._original = self.current
        self.calls.append(("switch", schema.name))
        self.current = schema.name

    def restore_current_schema(self):
        self.calls.append(("restore",))
        if self._original is not None:
            self.current = self._original
            self._original = None

    def transaction(self):
        return FakeTransactionTemplate(self.calls)


class FakeTransactionTemplate:
    def __init__(self, calls):
        self.calls = calls

    def execute(self, callback):
        self.calls.append(("begin",))
        try:
            result = callback()
        except Exception:
            self.calls.append(("rollback",))
            raise
        self.calls.append(("commit",))
        return result


class FakeSchema(Schema):
    def __init__(self, calls, name, exists=True, fail_on=None):
        super().__init__(None, name)
        self.calls = calls
        self._exists = exists
        self.fail_on = fail_on

    def exists(self):
        return self._exists

    def clean(self):
        self.calls.append(("clean", self.name))
        if self.fail_on == "clean":
            raise RuntimeError(f"cannot clean {self.name}")

    def drop(self):
        self.calls.append(("drop", self.name))
        if self.fail_on == "drop":
            raise RuntimeError(f"cannot drop {self.name}")


class FakeSchemaHistory:
    def __init__(self, calls, marker=False, error=None):
        self.calls = calls
        self.marker = marker
        self.error = error

    def has_schemas_marker(self):
        self.calls.append(("has_schemas_marker",))
        if self.error is not None:
            raise self.error
        return self.marker

    def clear_cache(self):
        self.calls.append(("clear_cache",))


class RecordingCallback(Callback):
    def __init__(self, calls, name, connection=None, fail_on=None):
        self.calls = calls
        self.name = name
        self.connection = connection
        self.fail_on = fail_on

    def __repr__(self):
        return f"RecordingCallback({self.name!r})"

    def _record(self, event):
        current = self.connection.current if self.connection is not None else None
        self.calls.append((event, self.name, current))
        if self.fail_on == event:
            raise RuntimeError(f"{self.name} failed on {event}")

    def before_clean(self, connection):
        self._record("before_clean")

    def after_clean(self, connection):
        self._record("after_clean")


@pytest.fixture
def calls():
    return []


@pytest.fixture
def connection(calls):
    return FakeConnection(calls)


@pytest.fixture
def schema(calls):
    def fn(name, **kwargs):
        return FakeSchema(calls, name, **kwargs)

    return fn


@pytest.fixture
def history(calls):
    def fn(**kwargs):
        return FakeSchemaHistory(calls, **kwargs)

    return fn


@pytest.fixture
def callback(calls, connection):
    def fn(name, **kwargs):
        return RecordingCallback(calls, name, connection=connection, **kwargs)

    return fn
