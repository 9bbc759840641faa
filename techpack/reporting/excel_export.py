"""Excel export of an assembled tech pack.

One sheet per section: Overview, Dimensions, Materials, Construction and
Hardware & Colours. Production notes are appended to the Overview sheet.
"""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from techpack.reporting.sections import Section, build_sections, production_notes

HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)


def _sanitize_sheet_name(name: str) -> str:
    """Ensure Excel sheet name is valid and within length."""
    safe = "".join("-" if ch in '[]:*?/\\' else ch for ch in name).strip()
    return (safe or "Sheet")[:31]


def _write_section(wb: Workbook, section: Section, title: str) -> None:
    ws = wb.create_sheet(_sanitize_sheet_name(section.title))

    ws["A1"] = title
    ws["A1"].font = Font(bold=True, size=14)

    row = 3
    for col, header in enumerate(section.headers, 1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT

    if not section.rows:
        row += 1
        ws.cell(row=row, column=1, value="No data")

    for values in section.rows:
        row += 1
        for col, value in enumerate(values, 1):
            ws.cell(row=row, column=col, value=value)

    for col in range(1, len(section.headers) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 30 if col > 1 else 25


def build_tech_pack_workbook(doc: dict[str, Any]) -> BytesIO:
    """Render a tech-pack document as an Excel workbook.

    Returns:
        BytesIO containing the .xlsx file, positioned at 0
    """
    wb = Workbook()
    if "Sheet" in wb.sheetnames:
        wb.remove(wb["Sheet"])

    product = doc.get("productName") or "Tech Pack"
    for section in build_sections(doc):
        _write_section(wb, section, f"{product} - {section.title}")

    overview = wb["Overview"]
    row = overview.max_row + 2
    overview.cell(row=row, column=1, value="Generated").font = Font(bold=True)
    overview.cell(row=row, column=2, value=datetime.now().strftime("%Y-%m-%d %H:%M"))

    notes = production_notes(doc)
    if notes:
        row += 2
        overview.cell(row=row, column=1, value="Production Notes").font = Font(bold=True)
        cell = overview.cell(row=row + 1, column=1, value=notes)
        cell.alignment = Alignment(wrap_text=True, vertical="top")

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output
