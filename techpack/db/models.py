"""SQLAlchemy async database models for the tech-pack service.

Tech-pack documents are stored as JSON so they round-trip verbatim.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class ProductModel(Base):
    """Product with its current (mirrored) tech pack."""

    __tablename__ = "products"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    prompt: Mapped[str | None] = mapped_column(Text)

    # Mirror of the active tech pack document
    tech_pack: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    category: Mapped[str | None] = mapped_column(Text, index=True)
    category_subcategory: Mapped[str | None] = mapped_column(Text)
    selected_revision_id: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
        nullable=False,
    )


class TechFileModel(Base):
    """AI-analyzed capture (sketch, component, base view, ...)."""

    __tablename__ = "tech_files"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    product_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    revision_id: Mapped[str | None] = mapped_column(Text)

    file_type: Mapped[str] = mapped_column(Text, nullable=False)
    view_type: Mapped[str | None] = mapped_column(Text)
    file_category: Mapped[str | None] = mapped_column(Text)
    file_url: Mapped[str | None] = mapped_column(Text)
    thumbnail_url: Mapped[str | None] = mapped_column(Text)

    analysis_data: Mapped[dict | None] = mapped_column(JSON)
    confidence_score: Mapped[float | None] = mapped_column(Float)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="completed")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_tech_files_product_status", "product_id", "status"),
        Index("idx_tech_files_product_revision", "product_id", "revision_id"),
    )


class ProductTechPackModel(Base):
    """One generated tech pack; at most one per product is active."""

    __tablename__ = "product_tech_packs"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    product_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    revision_id: Mapped[str | None] = mapped_column(Text)
    revision_number: Mapped[int | None] = mapped_column(Integer)

    tech_pack_data: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Generation metadata (renamed to avoid SQLAlchemy conflict)
    meta: Mapped[dict] = mapped_column("metadata", JSON, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_tech_packs_product_active", "product_id", "is_active"),
        Index("idx_tech_packs_revision", "revision_id", "created_at"),
    )
