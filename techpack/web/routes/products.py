"""Product routes.

Routes:
- POST /products                                    - Create a product entry
- GET  /products/{product_id}/tech-files            - Tech files grouped by type
- GET  /products/{product_id}/tech-pack/display-dimensions
                                                    - Active tech pack with display dimensions filled
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from techpack.classification.classifier import CategoryClassifier
from techpack.db import repository
from techpack.db.connection import get_session
from techpack.generation import service
from techpack.merge.assembler import group_tech_files_by_type
from techpack.web.dependencies import get_category_classifier
from techpack.web.models import CreateProductRequest, ProductResponse

router = APIRouter(tags=["products"])


@router.post("/products", response_model=ProductResponse, status_code=201)
async def create_product(
    request: CreateProductRequest,
    classifier: CategoryClassifier = Depends(get_category_classifier),
):
    """Create a product with an empty tech pack and an inferred category."""
    async with get_session() as session:
        product, classification = await service.create_product_entry(
            session,
            name=request.name,
            prompt=request.prompt,
            category=request.category,
            classifier=classifier,
        )
        return ProductResponse(
            id=str(product.id),
            name=product.name,
            category=product.category,
            category_subcategory=product.category_subcategory,
            confidence=classification.confidence if classification else None,
        )


@router.get("/products/{product_id}/tech-files")
async def list_tech_files(product_id: UUID, revision_id: str | None = Query(default=None)):
    """Completed tech files of a product grouped for display."""
    async with get_session() as session:
        product = await repository.get_product(session, product_id)
        if product is None:
            raise HTTPException(status_code=404, detail="Product not found")

        tech_files = await repository.fetch_completed_tech_files(session, product_id, revision_id)
        return group_tech_files_by_type(tech_files, selected_revision_id=revision_id)


@router.get("/products/{product_id}/tech-pack/display-dimensions")
async def display_dimensions(product_id: UUID):
    """Active tech pack with empty height/width/length filled from sketches.

    Nothing is saved.
    """
    async with get_session() as session:
        try:
            return await service.refresh_display_dimensions(session, product_id)
        except service.ProductNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
