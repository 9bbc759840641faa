"""Shared fixtures for route tests."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest


@pytest.fixture
def mock_db_session():
    """Mock database session with async context manager."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()

    async_cm = AsyncMock()
    async_cm.__aenter__.return_value = session
    async_cm.__aexit__.return_value = None

    return async_cm


@pytest.fixture
def make_tech_pack_record():
    """Factory for stored tech-pack rows."""

    def _make(**fields):
        record = SimpleNamespace(
            id=uuid4(),
            product_id=uuid4(),
            revision_id=None,
            revision_number=None,
            is_active=True,
            meta={"generated_at": "2025-01-01T00:00:00+00:00", "revision_context": "original"},
            created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
            tech_pack_data={"productName": "Tote"},
        )
        for key, value in fields.items():
            setattr(record, key, value)
        return record

    return _make
