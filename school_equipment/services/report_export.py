"""Hard-copy renderings (PDF and HTML) of a list of equipment records.

Both renderers take records that were already fetched from the store, so any
filter the caller applied carries straight through to the printout.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.errors import ReportError
from ..core.formatting import format_isk, format_timestamp, group_thousands
from ..schemas.equipment import EquipmentRecord, describe
from .reporting import summarize

LOGGER = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
HTML_TEMPLATE = "inventory_report.html"
EMPTY_TEXT = "No equipment found."

CORE_FONT_FAMILY = "Helvetica"
CUSTOM_FONT_FAMILY = "ReportFont"


def _register_font(pdf: FPDF, font_path: Optional[Path]) -> str:
    """Return the font family to use; a TTF file is needed for non-Latin-1 text."""

    if font_path is None:
        return CORE_FONT_FAMILY
    font_file = Path(font_path)
    if not font_file.exists():
        LOGGER.error("Report font missing: %s", font_file)
        raise FileNotFoundError(font_file)
    pdf.add_font(CUSTOM_FONT_FAMILY, style="", fname=str(font_file))
    return CUSTOM_FONT_FAMILY


def _set_font(pdf: FPDF, family: str, style: str = "", size: float = 11) -> None:
    # Only the regular face of a custom TTF is registered.
    if family == CUSTOM_FONT_FAMILY:
        style = ""
    pdf.set_font(family, style, size)


def render_inventory_pdf(
    records: Sequence[EquipmentRecord],
    title: str,
    subtitle: Optional[str] = None,
    generated_at: Optional[datetime] = None,
    tz_name: Optional[str] = None,
    font_path: Optional[Path] = None,
) -> bytes:
    """Render one ``describe()`` line per record followed by a summary block."""

    pdf = FPDF(unit="mm", format="A4")
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    family = _register_font(pdf, font_path)

    effective_width = pdf.w - pdf.l_margin - pdf.r_margin

    _set_font(pdf, family, "B", 16)
    pdf.cell(effective_width, 10, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    stamp = generated_at or datetime.now(timezone.utc)
    _set_font(pdf, family, size=10)
    pdf.cell(
        effective_width,
        5,
        f"Generated: {format_timestamp(stamp, tz_name)}",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    if subtitle:
        pdf.cell(effective_width, 5, subtitle, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    _set_font(pdf, family, "", 11)
    if not records:
        _set_font(pdf, family, "I", 11)
        pdf.multi_cell(effective_width, 5.5, EMPTY_TEXT, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    for record in records:
        pdf.multi_cell(effective_width, 5.5, describe(record), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(1)

    summary = summarize(records)
    pdf.ln(3)
    _set_font(pdf, family, "B", 12)
    pdf.cell(effective_width, 6, "Summary", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    _set_font(pdf, family, "", 10)
    pdf.multi_cell(
        effective_width,
        5,
        f"{summary['count']} items, total value {format_isk(summary['value_isk'])}",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    for bucket in list(summary["by_kind"].values()) + list(summary["by_building"].values()):
        if not bucket["count"]:
            continue
        pdf.multi_cell(
            effective_width,
            5,
            f"   {bucket['label']}: {bucket['count']} ({format_isk(bucket['value_isk'])})",
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )

    output = pdf.output()
    if isinstance(output, str):
        return output.encode("latin1")
    return bytes(output)


def _template_env(tz_name: Optional[str]) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["fmt_isk"] = format_isk
    env.filters["fmt_thousands"] = group_thousands
    env.filters["fmt_dt"] = lambda value: format_timestamp(value, tz_name)
    env.filters["describe"] = describe
    return env


def render_inventory_html(
    records: Sequence[EquipmentRecord],
    title: str,
    subtitle: Optional[str] = None,
    generated_at: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> str:
    template = _template_env(tz_name).get_template(HTML_TEMPLATE)
    return template.render(
        title=title,
        subtitle=subtitle,
        generated_at=generated_at or datetime.now(timezone.utc),
        records=list(records),
        summary=summarize(records),
        empty_text=EMPTY_TEXT,
    )


def write_report(
    path: str | Path,
    records: Iterable[EquipmentRecord],
    title: str,
    fmt: str = "pdf",
    subtitle: Optional[str] = None,
    tz_name: Optional[str] = None,
    font_path: Optional[Path] = None,
) -> Path:
    """Render ``records`` as ``fmt`` (``pdf`` or ``html``) and write them to ``path``."""

    if fmt not in ("pdf", "html"):
        raise ValueError(f"Unknown report format {fmt!r}; expected pdf or html")
    items = list(records)
    target = Path(path)
    try:
        if fmt == "pdf":
            content = render_inventory_pdf(
                items, title, subtitle=subtitle, tz_name=tz_name, font_path=font_path
            )
        else:
            content = render_inventory_html(items, title, subtitle=subtitle, tz_name=tz_name).encode("utf-8")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    except OSError as exc:
        LOGGER.error("Report %s could not be written: %s", target, exc)
        raise ReportError(f"Could not write report {target}: {exc}", details={"path": str(target)}) from exc
    LOGGER.info("Wrote %s report with %d records to %s", fmt, len(items), target)
    return target


__all__ = ["render_inventory_html", "render_inventory_pdf", "write_report"]
