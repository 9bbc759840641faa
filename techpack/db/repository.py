"""Database queries for products, tech files and tech-pack revisions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from techpack.classification.categories import category_from_tech_pack
from techpack.db.models import ProductModel, ProductTechPackModel, TechFileModel
from techpack.models import TechFile

logger = logging.getLogger(__name__)

COMPLETED = "completed"


def as_uuid(value: UUID | str) -> UUID:
    """Coerce an id to UUID; raises ValueError for malformed strings."""
    return value if isinstance(value, UUID) else UUID(str(value))


async def get_product(session: AsyncSession, product_id: UUID | str) -> ProductModel | None:
    return await session.get(ProductModel, as_uuid(product_id))


async def fetch_completed_tech_files(
    session: AsyncSession,
    product_id: UUID | str,
    revision_id: str | None = None,
) -> list[TechFile]:
    """Completed tech files of a product, oldest first.

    Args:
        revision_id: When given, only files generated for that revision
    """
    stmt = select(TechFileModel).where(
        TechFileModel.product_id == as_uuid(product_id),
        TechFileModel.status == COMPLETED,
    )
    if revision_id:
        stmt = stmt.where(TechFileModel.revision_id == revision_id)
    stmt = stmt.order_by(TechFileModel.created_at.asc(), TechFileModel.id.asc())

    result = await session.execute(stmt)
    return [TechFile.model_validate(row) for row in result.scalars().all()]


async def _deactivate_all(session: AsyncSession, product_id: UUID) -> None:
    await session.execute(
        update(ProductTechPackModel)
        .where(ProductTechPackModel.product_id == product_id)
        .values(is_active=False)
    )


async def _mirror_onto_product(
    session: AsyncSession, product_id: UUID, tech_pack: dict[str, Any]
) -> None:
    """Copy a tech pack onto ``products.tech_pack`` with its category."""
    product = await session.get(ProductModel, product_id)
    if product is None:
        logger.warning("Product %s not found; tech pack not mirrored", product_id)
        return

    raw_subcategory = tech_pack.get("category_Subcategory")
    product.tech_pack = tech_pack
    product.category = category_from_tech_pack(tech_pack)
    product.category_subcategory = raw_subcategory if isinstance(raw_subcategory, str) else None
    product.updated_at = datetime.now(timezone.utc)


async def save_tech_pack_for_revision(
    session: AsyncSession,
    product_id: UUID | str,
    revision_id: str | None,
    revision_number: int | None,
    tech_pack_data: dict[str, Any],
) -> ProductTechPackModel:
    """Store a new active tech pack for a product.

    Every existing tech pack of the product is deactivated first, so at most
    one stays active. The document is mirrored onto the product together with
    its normalized category.
    """
    pid = as_uuid(product_id)
    await _deactivate_all(session, pid)

    record = ProductTechPackModel(
        product_id=pid,
        revision_id=revision_id,
        revision_number=revision_number,
        tech_pack_data=tech_pack_data,
        is_active=True,
        meta={
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "revision_context": "revision" if revision_id else "original",
        },
    )
    session.add(record)
    await _mirror_onto_product(session, pid, tech_pack_data)
    await session.flush()

    logger.info(
        "Saved tech pack %s for product %s (revision=%s)", record.id, pid, revision_id
    )
    return record


async def list_tech_packs(
    session: AsyncSession, product_id: UUID | str
) -> list[ProductTechPackModel]:
    """All tech packs of a product, newest first."""
    result = await session.execute(
        select(ProductTechPackModel)
        .where(ProductTechPackModel.product_id == as_uuid(product_id))
        .order_by(ProductTechPackModel.created_at.desc())
    )
    return list(result.scalars().all())


async def get_tech_pack(
    session: AsyncSession, tech_pack_id: UUID | str
) -> ProductTechPackModel | None:
    return await session.get(ProductTechPackModel, as_uuid(tech_pack_id))


async def get_tech_pack_for_revision(
    session: AsyncSession, revision_id: str
) -> ProductTechPackModel | None:
    """Latest tech pack generated for a revision."""
    result = await session.execute(
        select(ProductTechPackModel)
        .where(ProductTechPackModel.revision_id == revision_id)
        .order_by(ProductTechPackModel.created_at.desc())
        .limit(1)
    )
    return result.scalars().first()


async def get_active_tech_pack(
    session: AsyncSession, product_id: UUID | str
) -> ProductTechPackModel | None:
    result = await session.execute(
        select(ProductTechPackModel)
        .where(
            ProductTechPackModel.product_id == as_uuid(product_id),
            ProductTechPackModel.is_active.is_(True),
        )
        .order_by(ProductTechPackModel.created_at.desc())
        .limit(1)
    )
    return result.scalars().first()


async def set_active_tech_pack(
    session: AsyncSession, product_id: UUID | str, tech_pack_id: UUID | str
) -> ProductTechPackModel | None:
    """Activate one tech pack of a product and mirror it onto the product.

    Returns None (and changes nothing) when the tech pack does not belong to
    the product.
    """
    pid = as_uuid(product_id)
    record = await get_tech_pack(session, tech_pack_id)
    if record is None or record.product_id != pid:
        return None

    await _deactivate_all(session, pid)
    record.is_active = True
    await _mirror_onto_product(session, pid, record.tech_pack_data)
    await session.flush()
    return record


async def delete_tech_pack(session: AsyncSession, tech_pack_id: UUID | str) -> bool:
    """Delete a tech pack; returns False when it did not exist."""
    result = await session.execute(
        delete(ProductTechPackModel).where(ProductTechPackModel.id == as_uuid(tech_pack_id))
    )
    return result.rowcount > 0


def tech_pack_to_dict(record: ProductTechPackModel) -> dict[str, Any]:
    """API representation of a stored tech pack."""
    return {
        "id": str(record.id),
        "product_id": str(record.product_id),
        "revision_id": record.revision_id,
        "revision_number": record.revision_number,
        "is_active": record.is_active,
        "metadata": record.meta,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "tech_pack_data": record.tech_pack_data,
    }
