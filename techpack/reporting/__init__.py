"""Tech-pack exports (Excel and PDF)."""

from techpack.reporting.excel_export import build_tech_pack_workbook
from techpack.reporting.pdf_export import build_tech_pack_pdf

__all__ = ["build_tech_pack_workbook", "build_tech_pack_pdf"]
