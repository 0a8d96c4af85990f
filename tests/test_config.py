from pathlib import Path

import pytest

from dbclean.config import CleanConfig, parse_placeholders
from main import build_config, create_parser


def test_defaults_without_environment(monkeypatch):
    for name in ("DBCLEAN_SCHEMAS", "DBCLEAN_CLEAN_DISABLED", "DBCLEAN_DB_PORT"):
        monkeypatch.delenv(name, raising=False)

    config = CleanConfig.from_env()

    assert config.port == 5432
    assert config.schemas == []
    assert config.clean_disabled is False
    assert config.history_table == "schema_history"


def test_from_env(monkeypatch):
    monkeypatch.setenv("DBCLEAN_DB_PORT", "6543")
    monkeypatch.setenv("DBCLEAN_SCHEMAS", "app, app_audit")
    monkeypatch.setenv("DBCLEAN_CALLBACKS", "sql/callbacks")
    monkeypatch.setenv("DBCLEAN_PLACEHOLDERS", "owner=admin")
    monkeypatch.setenv("DBCLEAN_CLEAN_DISABLED", "TRUE")

    config = CleanConfig.from_env()

    assert config.port == 6543
    assert config.schemas == ["app", "app_audit"]
    assert config.callback_locations == [Path("sql/callbacks")]
    assert config.placeholders == {"owner": "admin"}
    assert config.clean_disabled is True


def test_parse_placeholders():
    assert parse_placeholders(["a=1", "b=x=y"]) == {"a": "1", "b": "x=y"}
    with pytest.raises(ValueError):
        parse_placeholders(["missing"])


def test_command_line_overrides_environment(monkeypatch):
    monkeypatch.setenv("DBCLEAN_SCHEMAS", "from_env")
    monkeypatch.setenv("DBCLEAN_CLEAN_DISABLED", "true")
    args = create_parser().parse_args(
        ["--db-host", "db.internal", "db", "clean", "--schemas", "app,app_audit"]
    )

    config = build_config(args)

    assert config.host == "db.internal"
    assert config.schemas == ["app", "app_audit"]
    # Not passed on the command line, so the environment wins
    assert config.clean_disabled is True


def test_clean_disabled_flag(monkeypatch):
    monkeypatch.delenv("DBCLEAN_CLEAN_DISABLED", raising=False)
    args = create_parser().parse_args(["db", "clean", "--clean-disabled"])

    assert build_config(args).clean_disabled is True
