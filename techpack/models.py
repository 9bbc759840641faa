"""Pydantic models for tech files and the entries folded into a tech pack.

Tech-pack documents themselves stay plain JSON-shaped dicts: they are
persisted verbatim and carry many fields this package never touches. The
models here describe the inputs (``TechFile``) and the typed entries the
normalizer produces before they are appended to a document.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)


class FileType(str, Enum):
    """Capture types produced by the analysis pipeline."""

    SKETCH = "sketch"
    COMPONENT = "component"
    CLOSEUP = "closeup"
    BASE_VIEW = "base_view"
    FLAT_SKETCH = "flat_sketch"
    ASSEMBLY_VIEW = "assembly_view"


_METADATA_ADAPTERS: dict[str, TypeAdapter] = {
    "confidence_score": TypeAdapter(float),
    "created_at": TypeAdapter(datetime),
}


class TechFile(BaseModel):
    """One AI-analyzed capture associated with a product."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "3f0c1c1e-4d7a-4d59-9b43-3b6f7a1d2c11",
                "file_type": "sketch",
                "view_type": "front",
                "analysis_data": {
                    "summary": {
                        "measurements": [
                            {"name": "Overall Height", "value": "60 cm ±1 cm"}
                        ]
                    }
                },
            }
        },
    )

    id: str | None = None
    file_type: str
    view_type: str | None = None
    file_category: str | None = None
    file_url: str | None = None
    thumbnail_url: str | None = None
    analysis_data: Any = None
    confidence_score: float | None = None
    created_at: datetime | None = None
    revision_id: str | None = None
    status: str = "completed"

    @field_validator(
        "id", "revision_id", "view_type", "file_category", "file_url", "thumbnail_url",
        mode="before",
    )
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        # UUID columns come back as uuid.UUID from the ORM
        return str(v) if v is not None else None

    @field_validator("confidence_score", "created_at", mode="before")
    @classmethod
    def _drop_unparseable(cls, v: Any, info: ValidationInfo) -> Any:
        """Metadata that does not parse is dropped; the analysis payload still counts."""
        if v is None:
            return None
        try:
            return _METADATA_ADAPTERS[info.field_name].validate_python(v)
        except ValidationError:
            return None

    @property
    def analysis(self) -> dict[str, Any]:
        """Analysis payload, or an empty dict for anything that is not a mapping."""
        return self.analysis_data if isinstance(self.analysis_data, dict) else {}

    @property
    def view_label(self) -> str:
        return self.view_type or "sketch"


class MeasurementObservation(BaseModel):
    """A raw measurement seen in one tech file, kept in ``dimensions.details``."""

    name: str
    value: str
    location: str | None = None
    critical: bool | None = None
    source: str

    # Used for the canonical slot only; never written to details
    description: str | None = Field(default=None, exclude=True)

    def to_detail(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DimensionEntry(BaseModel):
    """Canonical dimension slot (height/width/length/weight)."""

    value: str
    tolerance: str | None = None
    description: str | None = None


class MaterialEntry(BaseModel):
    component: str
    material: str = ""
    notes: str = ""
    source: str


class ConstructionFeature(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    feature_name: str = Field(alias="featureName")
    description: str = ""
    location: str | None = None
    technique: str | None = None
    source: str

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ColorEntry(BaseModel):
    name: str
    hex: str = ""
    location: str | None = None
    source: str


class CategoryClassification(BaseModel):
    """Result contract of the category classifier."""

    category: str
    subcategory: str
    confidence: float = 0.0

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0 <= v <= 1:
            raise ValueError("confidence must be between 0 and 1")
        return v

    @classmethod
    def fallback(cls) -> CategoryClassification:
        return cls(category="other", subcategory="general", confidence=0.0)


DimensionKey = Literal["height", "width", "length", "weight"]
