"""Tech-pack export routes.

Routes:
- GET /tech-packs/{tech_pack_id}/export.xlsx - Excel workbook
- GET /tech-packs/{tech_pack_id}/export.pdf  - PDF document
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from techpack.db import repository
from techpack.db.connection import get_session
from techpack.reporting.excel_export import build_tech_pack_workbook
from techpack.reporting.pdf_export import build_tech_pack_pdf

router = APIRouter(tags=["exports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


async def _load_document(tech_pack_id: UUID) -> dict:
    async with get_session() as session:
        record = await repository.get_tech_pack(session, tech_pack_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Tech pack not found")
        return record.tech_pack_data or {}


@router.get("/tech-packs/{tech_pack_id}/export.xlsx")
async def export_excel(tech_pack_id: UUID):
    output = build_tech_pack_workbook(await _load_document(tech_pack_id))
    return StreamingResponse(
        output,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=tech_pack_{tech_pack_id}.xlsx"},
    )


@router.get("/tech-packs/{tech_pack_id}/export.pdf")
async def export_pdf(tech_pack_id: UUID):
    output = build_tech_pack_pdf(await _load_document(tech_pack_id))
    return StreamingResponse(
        output,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=tech_pack_{tech_pack_id}.pdf"},
    )
