"""Request/response models for the tech-pack web API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CreateProductRequest(BaseModel):
    """Used by: POST /products"""

    name: str = Field(..., min_length=1)
    prompt: str | None = None
    category: str | None = None


class ProductResponse(BaseModel):
    id: str
    name: str
    category: str | None = None
    category_subcategory: str | None = None
    confidence: float | None = None


class GenerateTechPackRequest(BaseModel):
    """Used by: POST /products/{product_id}/tech-pack/generate"""

    revision_id: str | None = None
    revision_number: int | None = None
    base_tech_pack: dict[str, Any] | None = None


class GenerateTechPackResponse(BaseModel):
    tech_pack_id: str
    revision_id: str | None = None
    revision_number: int | None = None
    enriched: bool
    files_processed: int
    tech_pack: dict[str, Any]


class FieldUpdateRequest(BaseModel):
    """Manual overwrite of one tech-pack field.

    Used by: PATCH /tech-packs/{tech_pack_id}/fields
    """

    path: str = Field(..., description="Dotted path, e.g. dimensions.height.value")
    value: Any = None
