import io
import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from school_equipment.cli import EXIT_APP_ERROR, EXIT_OK, main
from school_equipment.db.session import sqlite_url
from school_equipment.settings import AppSettings


@pytest.fixture()
def cli(tmp_path, monkeypatch):
    for name in ("DB_URL", "DATABASE_URL", "IMPORT_ID_POLICY"):
        monkeypatch.delenv(name, raising=False)
    settings = AppSettings(_env_file=None, DB_PATH=tmp_path / "inventory.sqlite3")

    def invoke(*argv):
        out, err = io.StringIO(), io.StringIO()
        code = main(list(argv), settings=settings, out=out, err=err)
        return code, out.getvalue(), err.getvalue()

    return invoke


def test_add_and_show(cli):
    code, out, _ = cli("add", "--kind", "table", "--value", "50000", "--location", "H-202", "--seats", "4")
    assert code == EXIT_OK
    assert out.strip() == "Table #1: 4 seats, value 50 000 kr., located in H-202 (Háteigsvegur)."

    code, out, _ = cli("show", "1", "--json")
    assert code == EXIT_OK
    (payload,) = json.loads(out)
    assert payload["seats"] == 4 and payload["location"]["building"] == "H"


def test_add_with_missing_attribute(cli):
    code, out, err = cli("add", "--kind", "table", "--value", "100", "--location", "H-202")
    assert code == EXIT_APP_ERROR
    assert out == ""
    assert "Table requires seats" in err
    assert "Value error" not in err


def test_add_with_bad_location_is_a_usage_error(cli):
    with pytest.raises(SystemExit) as excinfo:
        cli("add", "--kind", "chair", "--value", "1", "--location", "X-202", "--chair-kind", "school")
    assert excinfo.value.code == 2


def test_move_and_remove_unknown_ids(cli):
    code, _, err = cli("move", "99", "S-101")
    assert code == EXIT_APP_ERROR
    assert "No equipment with id 99" in err

    code, _, _ = cli("remove", "99")
    assert code == EXIT_APP_ERROR


def test_move_then_list_by_room(cli):
    cli("add", "--kind", "projector", "--value", "150000", "--location", "S-101", "--lumens", "3500")
    code, out, _ = cli("move", "1", "h-310")
    assert code == EXIT_OK
    assert "H-310 (Háteigsvegur)" in out

    code, out, _ = cli("list", "--room", "H-310")
    assert out.strip().startswith("Projector #1: 3 500 lumens")
    code, out, _ = cli("list", "--room", "S-101")
    assert out.strip() == "No equipment found."


def test_list_filters(cli):
    cli("add", "--kind", "table", "--value", "100", "--location", "H-202", "--seats", "2")
    cli("add", "--kind", "chair", "--value", "300", "--location", "H-305", "--chair-kind", "office")
    cli("add", "--kind", "chair", "--value", "200", "--location", "HA-101", "--chair-kind", "comfort")

    code, out, _ = cli("list", "--building", "H", "--kind", "chair", "--json")
    assert code == EXIT_OK
    assert [item["id"] for item in json.loads(out)] == [2]

    code, out, _ = cli("list", "--kind", "chair", "--sort", "value", "--json")
    assert [item["value_isk"] for item in json.loads(out)] == [200, 300]

    code, out, _ = cli("list", "--building", "H", "--floor", "3", "--json")
    assert [item["id"] for item in json.loads(out)] == [2]

    code, _, err = cli("list", "--floor", "3")
    assert code == EXIT_APP_ERROR
    assert "--floor needs --building" in err


def test_export_import_round_trip(cli, tmp_path):
    cli("add", "--kind", "table", "--value", "100", "--location", "H-202", "--seats", "2")
    cli("add", "--kind", "chair", "--value", "300", "--location", "S-305", "--chair-kind", "other")
    backup = tmp_path / "backup.json"

    code, out, _ = cli("export-json", str(backup))
    assert code == EXIT_OK and "Exported 2 records" in out

    cli("remove", "1")
    code, out, _ = cli("import-json", str(backup))
    assert code == EXIT_OK and "ids preserve" in out
    _, out, _ = cli("list", "--json")
    assert [item["id"] for item in json.loads(out)] == [1, 2]

    code, out, _ = cli("import-json", str(backup), "--append")
    assert "ids reassign" in out
    _, out, _ = cli("list", "--json")
    assert sorted(item["id"] for item in json.loads(out)) == [1, 2, 3, 4]


def test_import_of_bad_file(cli, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"version": 7, "items": []}), encoding="utf-8")
    code, _, err = cli("import-json", str(bad))
    assert code == EXIT_APP_ERROR
    assert "Unsupported transfer version" in err


def test_report_html(cli, tmp_path):
    cli("add", "--kind", "table", "--value", "100", "--location", "H-202", "--seats", "2")
    target = tmp_path / "report.html"

    code, out, _ = cli("report", str(target), "--building", "H", "--title", "Hús H")
    assert code == EXIT_OK
    assert "Wrote 1 records" in out
    html = target.read_text(encoding="utf-8")
    assert "Hús H" in html
    assert "Háteigsvegur" in html


def test_db_url_override(tmp_path, monkeypatch):
    monkeypatch.delenv("DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    settings = AppSettings(_env_file=None, DB_PATH=tmp_path / "unused.sqlite3")
    other = tmp_path / "other.sqlite3"
    out = io.StringIO()

    code = main(
        ["--db-url", sqlite_url(other), "add", "--kind", "table", "--value", "1",
         "--location", "S-101", "--seats", "1"],
        settings=settings,
        out=out,
        err=io.StringIO(),
    )
    assert code == EXIT_OK
    assert other.exists()
    assert not (tmp_path / "unused.sqlite3").exists()


def test_show_with_an_id_too_large_to_store(cli):
    code, _, err = cli("show", "99999999999999999999")
    assert code == EXIT_APP_ERROR
    assert "No equipment with id" in err


def test_add_with_an_oversized_value(cli):
    code, _, err = cli("add", "--kind", "table", "--value", str(10**20), "--location", "H-202", "--seats", "2")
    assert code == EXIT_APP_ERROR
    assert "less than or equal" in err


def test_unwritable_output_paths(cli, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")

    code, out, err = cli("export-json", str(blocker / "out.json"))
    assert code == EXIT_APP_ERROR
    assert out == ""
    assert "Could not write" in err

    code, _, err = cli("report", str(blocker / "report.pdf"))
    assert code == EXIT_APP_ERROR
    assert "Could not write report" in err
