import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from school_equipment.core.errors import ReportError
from school_equipment.schemas.equipment import EquipmentRecord
from school_equipment.services.report_export import (
    EMPTY_TEXT,
    render_inventory_html,
    render_inventory_pdf,
    write_report,
)
from school_equipment.services.reporting import summarize

GENERATED = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture()
def records():
    return [
        EquipmentRecord(id=1, kind="Table", value_isk=50000, location="H-202", seats=4),
        EquipmentRecord(id=2, kind="Chair", value_isk=12000, location="HA-123", chair_kind="comfort"),
        EquipmentRecord(id=3, kind="Projector", value_isk=150000, location="S-101", lumens=3500),
    ]


def test_pdf_renders_records(records):
    pdf_bytes = render_inventory_pdf(records, "Búnaður", generated_at=GENERATED, tz_name="Atlantic/Reykjavik")
    assert pdf_bytes.startswith(b"%PDF")
    assert len(pdf_bytes) > 500


def test_pdf_renders_empty_list():
    pdf_bytes = render_inventory_pdf([], "Empty", subtitle="Building S", generated_at=GENERATED)
    assert pdf_bytes.startswith(b"%PDF")


def test_pdf_with_missing_font_file(records, tmp_path):
    with pytest.raises(FileNotFoundError):
        render_inventory_pdf(records, "Title", font_path=tmp_path / "nope.ttf")


def test_html_lists_each_record(records):
    html = render_inventory_html(records, "Equipment", generated_at=GENERATED, tz_name="UTC")

    assert "H-202 (Háteigsvegur)" in html
    assert "HA-123 (Hafnarfjörður)" in html
    assert "50 000 kr." in html
    assert "3 500 lumens" in html
    assert "comfort chair" in html
    assert "2024-03-01 12:30" in html
    assert EMPTY_TEXT not in html


def test_html_escapes_title_and_shows_empty_text():
    html = render_inventory_html([], "<Rooms & halls>", generated_at=GENERATED)
    assert "&lt;Rooms &amp; halls&gt;" in html
    assert "<Rooms & halls>" not in html
    assert EMPTY_TEXT in html


def test_write_report_formats(records, tmp_path):
    html_path = write_report(tmp_path / "reports" / "list.html", records, "Equipment", fmt="html")
    assert "Summary" in html_path.read_text(encoding="utf-8")

    pdf_path = write_report(tmp_path / "list.pdf", records, "Equipment")
    assert pdf_path.read_bytes().startswith(b"%PDF")

    with pytest.raises(ValueError):
        write_report(tmp_path / "list.txt", records, "Equipment", fmt="txt")


def test_summarize_counts_per_kind_and_building(records):
    summary = summarize(records)

    assert summary["count"] == 3
    assert summary["value_isk"] == 212000
    assert summary["by_kind"]["Chair"] == {"label": "Chair", "count": 1, "value_isk": 12000}
    assert summary["by_building"]["H"]["count"] == 1
    assert summary["by_building"]["S"]["value_isk"] == 150000


def test_summarize_keeps_empty_buckets():
    summary = summarize([])
    assert summary["count"] == 0
    assert set(summary["by_kind"]) == {"Table", "Chair", "Projector"}
    assert all(bucket["count"] == 0 for bucket in summary["by_building"].values())


def test_write_report_to_unwritable_path(records, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(ReportError) as excinfo:
        write_report(blocker / "list.html", records, "Equipment", fmt="html")
    assert excinfo.value.to_dict()["code"] == "report_error"
    assert excinfo.value.details == {"path": str(blocker / "list.html")}
