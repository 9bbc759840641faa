"""Pytest configuration and fixtures for tech-pack tests.

Provides common fixtures for testing.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from techpack.canonical.dimensions import DimensionMapper
from techpack.config import reset_config
from techpack.db.models import Base
from techpack.merge.assembler import TechPackAssembler

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("DIMENSION_SYNONYMS_PATH", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def assembler() -> TechPackAssembler:
    """Assembler with the built-in synonym table and a fixed clock."""
    return TechPackAssembler(mapper=DimensionMapper(), clock=lambda: FIXED_NOW)


@pytest.fixture
def make_tech_file():
    """Factory for tech-file dicts with increasing creation times."""
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(file_type: str = "sketch", analysis_data=None, **fields) -> dict:
        counter["n"] += 1
        record = {
            "id": f"tf-{counter['n']:03d}",
            "file_type": file_type,
            "view_type": "front" if file_type in ("sketch", "base_view") else None,
            "analysis_data": analysis_data,
            "created_at": base + timedelta(minutes=counter["n"]),
        }
        record.update(fields)
        return record

    return _make


@pytest.fixture
def front_sketch_analysis() -> dict:
    """Sketch payload touching every known sketch path."""
    return {
        "summary": {
            "measurements": [
                {"name": "Overall Height", "value": "60 cm ±1 cm", "location": "centre back"},
                {"name": "Circumference", "value": "90 cm"},
            ],
            "materials": [
                {"type": "Rib knit", "location": "Cuffs", "properties": ["stretchy", "1x1"]},
            ],
            "construction": [
                {"feature": "Side seams", "details": "Overlocked", "technique": "4-thread"},
            ],
            "colors": [{"name": "Navy", "hex": "#1F2A44", "location": "body"}],
        },
        "annotations_included": {
            "dimensions": [
                {"dimension_type": "Width", "measurement": "50 cm", "critical": True},
            ],
            "material_callouts": [
                {"component": "Collar", "material_spec": "100% cotton"},
                {"location_on_sketch": "Zipper", "material_name": "YKK #5", "critical": True},
            ],
            "construction_callouts": [
                {"feature": "Hem", "method": "Twin needle", "location": "bottom"},
            ],
            "hardware_callouts": [
                {"specification": "YKK #5 coil zipper"},
                {"hardware_type": "Snap button"},
            ],
            "manufacturing_notes": ["Pre-wash fabric", "Press seams open"],
        },
        "measurements_summary": {
            "primary_dimensions": ["Length 70 cm", {"name": "Depth", "measurement": "5 cm"}],
        },
    }


@pytest_asyncio.fixture()
async def db_session() -> AsyncSession:
    """Create in-memory database for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()
