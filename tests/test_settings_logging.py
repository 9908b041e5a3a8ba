import json
import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from school_equipment.core.context import operation_ctx_var, tracked_operation
from school_equipment.core.errors import InvalidLocation, StorageError
from school_equipment.core.logging import JsonLogFormatter, configure_logging
from school_equipment.db.session import sqlite_url
from school_equipment.settings import AppSettings


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ("DATA_DIR", "DB_PATH", "DB_URL", "DATABASE_URL", "IMPORT_ID_POLICY", "LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_database_url_defaults_to_sqlite_file(clean_env, tmp_path):
    clean_env.setenv("DB_PATH", str(tmp_path / "data" / "equipment.db"))
    settings = AppSettings(_env_file=None)
    assert settings.database_url.startswith("sqlite:///")
    assert settings.database_url.endswith("equipment.db")


def test_database_file_lives_under_data_dir(clean_env, tmp_path):
    clean_env.setenv("DATA_DIR", str(tmp_path / "school"))
    settings = AppSettings(_env_file=None)

    assert settings.db_path == tmp_path / "school" / "inventory.sqlite3"
    assert settings.database_url == sqlite_url(tmp_path / "school" / "inventory.sqlite3")

    clean_env.setenv("DB_PATH", str(tmp_path / "elsewhere.db"))
    assert AppSettings(_env_file=None).db_path == tmp_path / "elsewhere.db"


def test_database_url_alias_wins(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite://")
    assert AppSettings(_env_file=None).database_url == "sqlite://"


def test_choice_settings_are_case_insensitive(clean_env):
    clean_env.setenv("IMPORT_ID_POLICY", "Reassign")
    clean_env.setenv("LOG_FORMAT", "JSON")
    settings = AppSettings(_env_file=None)
    assert settings.IMPORT_ID_POLICY == "reassign"
    assert settings.LOG_FORMAT == "json"


def test_json_formatter_includes_operation_and_extra():
    record = logging.LogRecord("school_equipment.store", logging.INFO, __file__, 1, "store.completed", None, None)
    record.extra_data = {"operation": "insert", "outcome": "ok"}

    with tracked_operation("outer") as operation_id:
        payload = json.loads(JsonLogFormatter().format(record))

    assert payload["operation_id"] == operation_id
    assert payload["operation"] == "insert"
    assert payload["level"] == "INFO"
    assert payload["message"] == "store.completed"
    assert operation_ctx_var.get() is None


def test_tracked_operation_records_failure(caplog):
    caplog.set_level(logging.INFO, logger="school_equipment.store")
    with pytest.raises(KeyError):
        with tracked_operation("lookup", id=4):
            raise KeyError(4)

    (entry,) = [r for r in caplog.records if r.getMessage() == "store.completed"]
    assert entry.extra_data["outcome"] == "KeyError"
    assert entry.extra_data["id"] == 4


def test_configure_logging_replaces_root_handlers():
    previous_handlers = logging.root.handlers[:]
    previous_level = logging.root.level
    try:
        configure_logging("debug", "json")
        assert logging.root.level == logging.DEBUG
        assert isinstance(logging.root.handlers[0].formatter, JsonLogFormatter)

        configure_logging("nonsense", "text")
        assert logging.root.level == logging.INFO
        assert not isinstance(logging.root.handlers[0].formatter, JsonLogFormatter)
    finally:
        logging.root.handlers = previous_handlers
        logging.root.setLevel(previous_level)


def test_error_envelopes():
    err = InvalidLocation("bad floor", field="floor", token="x")
    assert err.to_dict() == {
        "code": "invalid_location",
        "message": "bad floor",
        "details": {"field": "floor", "token": "x"},
    }
    assert isinstance(err, ValueError)
    assert StorageError("insert", "disk full").to_dict()["details"] == {"operation": "insert"}


def test_open_store_uses_settings(clean_env, tmp_path):
    from school_equipment import EquipmentRecord, open_store

    settings = AppSettings(_env_file=None, DB_PATH=tmp_path / "nested" / "store.sqlite3")
    with open_store(settings) as store:
        new_id = store.insert(EquipmentRecord(kind="Chair", value_isk=5, location="S-101", chair_kind="other"))
        assert store.get(new_id).chair_kind.value == "other"
    assert (tmp_path / "nested" / "store.sqlite3").exists()
