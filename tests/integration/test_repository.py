"""Integration tests for tech-pack persistence.

Runs the repository against an in-memory SQLite database.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from techpack.db import repository
from techpack.db.models import ProductModel, TechFileModel

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


async def add_product(session: AsyncSession, **fields) -> ProductModel:
    product = ProductModel(name=fields.pop("name", "Trail Hoodie"), tech_pack={}, **fields)
    session.add(product)
    await session.flush()
    return product


@pytest.mark.asyncio
async def test_save_deactivates_previous_and_mirrors(db_session: AsyncSession):
    """Test at most one tech pack stays active and the product mirrors it."""
    product = await add_product(db_session)

    first = await repository.save_tech_pack_for_revision(
        db_session, product.id, None, None, {"productName": "v1"}
    )
    second = await repository.save_tech_pack_for_revision(
        db_session,
        product.id,
        "rev-1",
        1,
        {"productName": "v2", "category": "Garment", "category_Subcategory": "Apparel → Hoodie"},
    )

    assert first.is_active is False
    assert second.is_active is True
    assert first.meta["revision_context"] == "original"
    assert second.meta["revision_context"] == "revision"
    assert "generated_at" in second.meta

    assert product.tech_pack["productName"] == "v2"
    assert product.category == "apparel"
    assert product.category_subcategory == "Apparel → Hoodie"

    active = await repository.get_active_tech_pack(db_session, product.id)
    assert active.id == second.id


@pytest.mark.asyncio
async def test_mirror_category_from_subcategory_head(db_session: AsyncSession):
    product = await add_product(db_session, category="bags")

    await repository.save_tech_pack_for_revision(
        db_session, product.id, None, None, {"category_Subcategory": "Footwear_Boots"}
    )

    assert product.category == "footwear"


@pytest.mark.asyncio
async def test_mirror_without_category_data_clears_category(db_session: AsyncSession):
    product = await add_product(db_session, category="bags", category_subcategory="tote")

    await repository.save_tech_pack_for_revision(db_session, product.id, None, None, {})

    assert product.category is None
    assert product.category_subcategory is None


@pytest.mark.asyncio
async def test_list_and_revision_lookup(db_session: AsyncSession):
    product = await add_product(db_session)
    older = await repository.save_tech_pack_for_revision(
        db_session, product.id, "rev-1", 1, {"productName": "old"}
    )
    older.created_at = T0
    newer = await repository.save_tech_pack_for_revision(
        db_session, product.id, "rev-1", 2, {"productName": "new"}
    )
    newer.created_at = T0 + timedelta(hours=1)
    await db_session.flush()

    listed = await repository.list_tech_packs(db_session, product.id)
    latest = await repository.get_tech_pack_for_revision(db_session, "rev-1")

    assert [r.id for r in listed] == [newer.id, older.id]
    assert latest.id == newer.id
    assert await repository.get_tech_pack_for_revision(db_session, "rev-404") is None


@pytest.mark.asyncio
async def test_set_active_tech_pack(db_session: AsyncSession):
    product = await add_product(db_session)
    other = await add_product(db_session, name="Other")
    first = await repository.save_tech_pack_for_revision(
        db_session, product.id, None, None, {"productName": "v1"}
    )
    await repository.save_tech_pack_for_revision(
        db_session, product.id, None, None, {"productName": "v2"}
    )

    activated = await repository.set_active_tech_pack(db_session, product.id, first.id)

    assert activated.id == first.id
    assert first.is_active is True
    assert product.tech_pack == {"productName": "v1"}
    assert (await repository.get_active_tech_pack(db_session, product.id)).id == first.id

    # Tech pack of another product is rejected
    assert await repository.set_active_tech_pack(db_session, other.id, first.id) is None


@pytest.mark.asyncio
async def test_delete_tech_pack(db_session: AsyncSession):
    product = await add_product(db_session)
    record = await repository.save_tech_pack_for_revision(db_session, product.id, None, None, {})

    assert await repository.delete_tech_pack(db_session, record.id) is True
    assert await repository.delete_tech_pack(db_session, record.id) is False
    assert await repository.get_tech_pack(db_session, record.id) is None


@pytest.mark.asyncio
async def test_fetch_completed_tech_files(db_session: AsyncSession):
    product = await add_product(db_session)
    db_session.add_all(
        [
            TechFileModel(
                product_id=product.id,
                file_type="sketch",
                revision_id="rev-1",
                analysis_data={"summary": {}},
                created_at=T0 + timedelta(minutes=2),
            ),
            TechFileModel(
                product_id=product.id,
                file_type="component",
                revision_id="rev-2",
                created_at=T0 + timedelta(minutes=1),
            ),
            TechFileModel(
                product_id=product.id,
                file_type="sketch",
                revision_id="rev-1",
                status="processing",
                created_at=T0,
            ),
        ]
    )
    await db_session.flush()

    all_files = await repository.fetch_completed_tech_files(db_session, product.id)
    rev_1 = await repository.fetch_completed_tech_files(db_session, product.id, "rev-1")

    assert [f.file_type for f in all_files] == ["component", "sketch"]
    assert all(isinstance(f.id, str) for f in all_files)
    assert [f.revision_id for f in rev_1] == ["rev-1"]


def test_tech_pack_to_dict():
    record = repository.ProductTechPackModel(
        product_id=repository.as_uuid("3f0c1c1e-4d7a-4d59-9b43-3b6f7a1d2c11"),
        revision_id="rev-1",
        revision_number=3,
        tech_pack_data={"productName": "Tote"},
        is_active=True,
        meta={"revision_context": "revision"},
    )

    data = repository.tech_pack_to_dict(record)

    assert data["product_id"] == "3f0c1c1e-4d7a-4d59-9b43-3b6f7a1d2c11"
    assert data["metadata"] == {"revision_context": "revision"}
    assert data["created_at"] is None
