"""PDF export of an assembled tech pack using ReportLab."""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch, mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from techpack.reporting.sections import Section, build_sections, production_notes

# Styles
styles = getSampleStyleSheet()
title_style = ParagraphStyle(
    "CustomTitle",
    parent=styles["Heading1"],
    fontSize=22,
    spaceAfter=20,
    textColor=colors.HexColor("#2d3748"),
)
subtitle_style = ParagraphStyle(
    "CustomSubtitle",
    parent=styles["Heading2"],
    fontSize=14,
    spaceAfter=10,
    textColor=colors.HexColor("#4a5568"),
)
cell_style = ParagraphStyle(
    "CustomCell",
    parent=styles["Normal"],
    fontSize=8,
    leading=10,
    textColor=colors.HexColor("#2d3748"),
)

TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#edf2f7")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#e2e8f0")),
        ("PADDING", (0, 0), (-1, -1), 4),
    ]
)


def _paragraph(text: str) -> Paragraph:
    return Paragraph(escape(text).replace("\n", "<br/>"), cell_style)


def _section_flowables(section: Section, width: float) -> list:
    flowables: list = [Paragraph(escape(section.title), subtitle_style)]
    if not section.rows:
        flowables.append(_paragraph("No data"))
    else:
        data = [section.headers] + [[_paragraph(v) for v in row] for row in section.rows]
        col_width = width / len(section.headers)
        table = Table(data, colWidths=[col_width] * len(section.headers), repeatRows=1)
        table.setStyle(TABLE_STYLE)
        flowables.append(table)
    flowables.append(Spacer(1, 0.25 * inch))
    return flowables


def build_tech_pack_pdf(doc: dict[str, Any]) -> BytesIO:
    """Render a tech-pack document as a PDF.

    Returns:
        BytesIO containing the PDF, positioned at 0
    """
    buffer = BytesIO()
    pdf = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title="Tech Pack",
    )

    story: list = [
        Paragraph(escape(str(doc.get("productName") or "Tech Pack")), title_style),
        _paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}"),
        Spacer(1, 0.25 * inch),
    ]
    for section in build_sections(doc):
        story.extend(_section_flowables(section, pdf.width))

    notes = production_notes(doc)
    if notes:
        story.append(Paragraph("Production Notes", subtitle_style))
        story.append(_paragraph(notes))

    pdf.build(story)
    buffer.seek(0)
    return buffer
