"""
Tests for SQL script callbacks, using a connection that records executed SQL.
"""

import logging

from dbclean.callbacks import Callback, SqlScriptCallback


class RecordingCursor:
    def __init__(self, executed):
        self.executed = executed

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=None):
        self.executed.append(query)


class RecordingConnection:
    def __init__(self):
        self.executed = []

    def cursor(self):
        return RecordingCursor(self.executed)


def test_base_callback_is_a_no_op():
    connection = RecordingConnection()
    Callback().before_clean(connection)
    Callback().after_clean(connection)
    assert connection.executed == []


def test_runs_plain_and_template_scripts(tmp_path):
    (tmp_path / "beforeClean.sql").write_text("SELECT 1;")
    (tmp_path / "beforeClean.sql.j2").write_text("NOTIFY {{ channel }};")
    (tmp_path / "afterClean.sql").write_text("SELECT 2;")
    callback = SqlScriptCallback([tmp_path], {"channel": "cleaned"})
    connection = RecordingConnection()

    callback.before_clean(connection)

    assert connection.executed == ["SELECT 1;", "NOTIFY cleaned;"]

    callback.after_clean(connection)

    assert connection.executed[-1] == "SELECT 2;"


def test_scripts_from_multiple_locations_run_in_location_order(tmp_path):
    first, second = tmp_path / "first", tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "afterClean.sql").write_text("SELECT 'first';")
    (second / "afterClean.sql").write_text("SELECT 'second';")
    connection = RecordingConnection()

    SqlScriptCallback([first, second]).after_clean(connection)

    assert connection.executed == ["SELECT 'first';", "SELECT 'second';"]


def test_missing_location_is_skipped(tmp_path, caplog):
    connection = RecordingConnection()

    with caplog.at_level(logging.WARNING, logger="dbclean.callbacks"):
        SqlScriptCallback([tmp_path / "nope"]).before_clean(connection)

    assert connection.executed == []
    assert "nope" in caplog.text


def test_no_scripts_for_event(tmp_path):
    (tmp_path / "afterClean.sql").write_text("SELECT 2;")
    connection = RecordingConnection()

    SqlScriptCallback([tmp_path]).before_clean(connection)

    assert connection.executed == []
