"""Unit tests for tech-pack Excel and PDF exports."""

from __future__ import annotations

import pytest
from openpyxl import load_workbook

from techpack.reporting import build_tech_pack_pdf, build_tech_pack_workbook
from techpack.reporting.sections import build_sections, dimensions_section, production_notes


@pytest.fixture
def enriched_doc(assembler, make_tech_file, front_sketch_analysis) -> dict:
    base = {"productName": "Trail Hoodie", "category": "apparel", "productionNotes": "Handle with care"}
    return assembler.assemble(base, [make_tech_file("sketch", front_sketch_analysis)]).tech_pack


class TestSections:
    def test_section_titles(self, enriched_doc):
        assert [s.title for s in build_sections(enriched_doc)] == [
            "Overview",
            "Dimensions",
            "Materials",
            "Construction",
            "Hardware & Colours",
        ]

    def test_dimension_rows_slots_before_details(self, enriched_doc):
        rows = dimensions_section(enriched_doc).rows

        assert rows[0] == ["Height", "60 cm", "±1 cm", "centre back"]
        assert [r[0] for r in rows[:3]] == ["Height", "Width", "Length"]
        assert len(rows) == 3 + 5

    def test_malformed_document_renders_empty_sections(self):
        sections = build_sections({"materials": "n/a", "dimensions": ["x"]})

        assert all(not s.rows for s in sections[1:])
        assert production_notes({"productionNotes": ["x"]}) == ""


class TestExcelExport:
    def test_workbook_sheets_and_rows(self, enriched_doc):
        wb = load_workbook(build_tech_pack_workbook(enriched_doc))

        assert wb.sheetnames == ["Overview", "Dimensions", "Materials", "Construction", "Hardware & Colours"]
        materials = wb["Materials"]
        assert materials["A1"].value == "Trail Hoodie - Materials"
        assert [c.value for c in materials[3]] == ["Component", "Material", "Notes", "Source"]
        assert materials["A4"].value == "Collar"
        assert materials["B4"].value == "100% cotton"

    def test_production_notes_on_overview(self, enriched_doc):
        overview = load_workbook(build_tech_pack_workbook(enriched_doc))["Overview"]

        values = [c.value for row in overview.iter_rows() for c in row if c.value]
        assert "Production Notes" in values
        assert any(isinstance(v, str) and "**From Factory Specs:**" in v for v in values)

    def test_empty_document(self):
        wb = load_workbook(build_tech_pack_workbook({}))

        assert wb["Materials"]["A1"].value == "Tech Pack - Materials"
        assert wb["Materials"]["A4"].value == "No data"


class TestPdfExport:
    def test_pdf_bytes(self, enriched_doc):
        output = build_tech_pack_pdf(enriched_doc)

        assert output.getvalue().startswith(b"%PDF")

    def test_markup_characters_are_escaped(self):
        doc = {"productName": "<Tote & Co>", "materials": [{"component": "Strap <b>", "material": "A&B"}]}

        assert build_tech_pack_pdf(doc).getvalue().startswith(b"%PDF")
