"""Tech-pack generation and revision management routes.

Routes:
- POST   /products/{product_id}/tech-pack/generate                 - Run the Factory Specs merge and save
- GET    /products/{product_id}/tech-packs                         - All tech packs, newest first
- GET    /products/{product_id}/tech-packs/active                  - Active tech pack
- POST   /products/{product_id}/tech-packs/{tech_pack_id}/activate - Make a tech pack active
- GET    /revisions/{revision_id}/tech-pack                        - Latest tech pack of a revision
- DELETE /tech-packs/{tech_pack_id}                                - Delete a tech pack
- PATCH  /tech-packs/{tech_pack_id}/fields                         - Manual field overwrite
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException

from techpack.db import repository
from techpack.db.connection import get_session
from techpack.generation import service
from techpack.web.models import (
    FieldUpdateRequest,
    GenerateTechPackRequest,
    GenerateTechPackResponse,
)

router = APIRouter(tags=["tech-packs"])


@router.post(
    "/products/{product_id}/tech-pack/generate", response_model=GenerateTechPackResponse
)
async def generate_tech_pack(product_id: UUID, request: GenerateTechPackRequest | None = None):
    """Enrich the product's tech pack with its tech files and save it as active."""
    request = request or GenerateTechPackRequest()
    async with get_session() as session:
        try:
            result = await service.generate_tech_pack_for_product(
                session,
                product_id,
                revision_id=request.revision_id,
                revision_number=request.revision_number,
                base_tech_pack=request.base_tech_pack,
            )
        except service.ProductNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    return GenerateTechPackResponse(
        tech_pack_id=str(result.tech_pack_id),
        revision_id=result.revision_id,
        revision_number=result.revision_number,
        enriched=result.enriched,
        files_processed=result.files_processed,
        tech_pack=result.tech_pack,
    )


@router.get("/products/{product_id}/tech-packs")
async def list_tech_packs(product_id: UUID):
    async with get_session() as session:
        records = await repository.list_tech_packs(session, product_id)
        return {"tech_packs": [repository.tech_pack_to_dict(r) for r in records]}


@router.get("/products/{product_id}/tech-packs/active")
async def get_active_tech_pack(product_id: UUID):
    async with get_session() as session:
        record = await repository.get_active_tech_pack(session, product_id)
        if record is None:
            raise HTTPException(status_code=404, detail="No active tech pack")
        return repository.tech_pack_to_dict(record)


@router.post("/products/{product_id}/tech-packs/{tech_pack_id}/activate")
async def activate_tech_pack(product_id: UUID, tech_pack_id: UUID):
    async with get_session() as session:
        record = await repository.set_active_tech_pack(session, product_id, tech_pack_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Tech pack not found for product")
        return repository.tech_pack_to_dict(record)


@router.get("/revisions/{revision_id}/tech-pack")
async def get_revision_tech_pack(revision_id: str):
    """Latest tech pack of a revision; ``has_tech_pack`` is false when none exists."""
    async with get_session() as session:
        record = await repository.get_tech_pack_for_revision(session, revision_id)
        return {
            "has_tech_pack": record is not None,
            "tech_pack": repository.tech_pack_to_dict(record) if record else None,
        }


@router.delete("/tech-packs/{tech_pack_id}")
async def delete_tech_pack(tech_pack_id: UUID):
    async with get_session() as session:
        deleted = await repository.delete_tech_pack(session, tech_pack_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Tech pack not found")
    return {"success": True}


@router.patch("/tech-packs/{tech_pack_id}/fields")
async def update_tech_pack_field(tech_pack_id: UUID, request: FieldUpdateRequest):
    """Overwrite one field of a stored tech pack, bypassing the merge."""
    async with get_session() as session:
        try:
            tech_pack = await service.update_tech_pack_field(
                session, tech_pack_id, request.path, request.value
            )
        except service.TechPackNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except service.InvalidFieldPathError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    return {"success": True, "tech_pack": tech_pack}
