"""Tests for techpack.web.routes.tech_packs."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from techpack.generation.service import (
    GenerationResult,
    InvalidFieldPathError,
    ProductNotFoundError,
    TechPackNotFoundError,
)
from techpack.web.routes import tech_packs


@pytest.fixture
def app():
    """Create test FastAPI app with tech-packs router."""
    test_app = FastAPI()
    test_app.include_router(tech_packs.router)
    return test_app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestGenerateTechPack:
    """Tests for POST /products/{product_id}/tech-pack/generate."""

    @patch("techpack.generation.service.generate_tech_pack_for_product", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_generate(self, mock_get_session, mock_generate, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        tech_pack_id = uuid4()
        mock_generate.return_value = GenerationResult(
            tech_pack_id=tech_pack_id,
            tech_pack={"enhancedWithFactorySpecs": True},
            revision_id="rev-1",
            revision_number=2,
            enriched=True,
            files_processed=3,
        )

        response = client.post(
            f"/products/{uuid4()}/tech-pack/generate",
            json={"revision_id": "rev-1", "revision_number": 2},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tech_pack_id"] == str(tech_pack_id)
        assert data["enriched"] is True
        assert data["files_processed"] == 3
        assert mock_generate.call_args.kwargs["revision_id"] == "rev-1"

    @patch("techpack.generation.service.generate_tech_pack_for_product", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_generate_without_body(self, mock_get_session, mock_generate, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_generate.return_value = GenerationResult(
            tech_pack_id=uuid4(), tech_pack={}, revision_id=None, revision_number=None, enriched=False
        )

        response = client.post(f"/products/{uuid4()}/tech-pack/generate")

        assert response.status_code == 200
        assert response.json()["enriched"] is False
        assert mock_generate.call_args.kwargs["base_tech_pack"] is None

    @patch("techpack.generation.service.generate_tech_pack_for_product", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_unknown_product(self, mock_get_session, mock_generate, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_generate.side_effect = ProductNotFoundError("Product not found")

        response = client.post(f"/products/{uuid4()}/tech-pack/generate", json={})

        assert response.status_code == 404


class TestTechPackRevisions:
    """Tests for tech-pack listing and activation routes."""

    @patch("techpack.db.repository.list_tech_packs", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_list(self, mock_get_session, mock_list, client, mock_db_session, make_tech_pack_record):
        mock_get_session.return_value = mock_db_session
        records = [make_tech_pack_record(), make_tech_pack_record(is_active=False)]
        mock_list.return_value = records

        response = client.get(f"/products/{uuid4()}/tech-packs")

        assert response.status_code == 200
        data = response.json()["tech_packs"]
        assert [d["id"] for d in data] == [str(r.id) for r in records]
        assert data[0]["metadata"]["revision_context"] == "original"
        assert data[0]["created_at"] == "2025-01-01T00:00:00+00:00"

    @patch("techpack.db.repository.get_active_tech_pack", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_active_missing(self, mock_get_session, mock_active, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_active.return_value = None

        response = client.get(f"/products/{uuid4()}/tech-packs/active")

        assert response.status_code == 404

    @patch("techpack.db.repository.set_active_tech_pack", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_activate(self, mock_get_session, mock_set, client, mock_db_session, make_tech_pack_record):
        mock_get_session.return_value = mock_db_session
        record = make_tech_pack_record()
        mock_set.return_value = record

        response = client.post(f"/products/{record.product_id}/tech-packs/{record.id}/activate")

        assert response.status_code == 200
        assert response.json()["is_active"] is True

    @patch("techpack.db.repository.set_active_tech_pack", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_activate_foreign_tech_pack(self, mock_get_session, mock_set, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_set.return_value = None

        response = client.post(f"/products/{uuid4()}/tech-packs/{uuid4()}/activate")

        assert response.status_code == 404

    @patch("techpack.db.repository.get_tech_pack_for_revision", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_revision_without_tech_pack(self, mock_get_session, mock_get, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_get.return_value = None

        response = client.get("/revisions/rev-9/tech-pack")

        assert response.status_code == 200
        assert response.json() == {"has_tech_pack": False, "tech_pack": None}

    @patch("techpack.db.repository.get_tech_pack_for_revision", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_revision_with_tech_pack(
        self, mock_get_session, mock_get, client, mock_db_session, make_tech_pack_record
    ):
        mock_get_session.return_value = mock_db_session
        mock_get.return_value = make_tech_pack_record(revision_id="rev-9", revision_number=1)

        response = client.get("/revisions/rev-9/tech-pack")

        data = response.json()
        assert data["has_tech_pack"] is True
        assert data["tech_pack"]["revision_number"] == 1


class TestDeleteTechPack:
    @patch("techpack.db.repository.delete_tech_pack", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_delete(self, mock_get_session, mock_delete, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_delete.return_value = True

        response = client.delete(f"/tech-packs/{uuid4()}")

        assert response.status_code == 200
        assert response.json() == {"success": True}

    @patch("techpack.db.repository.delete_tech_pack", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_delete_missing(self, mock_get_session, mock_delete, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_delete.return_value = False

        response = client.delete(f"/tech-packs/{uuid4()}")

        assert response.status_code == 404


class TestUpdateField:
    """Tests for PATCH /tech-packs/{tech_pack_id}/fields."""

    @patch("techpack.generation.service.update_tech_pack_field", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_update(self, mock_get_session, mock_update, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_update.return_value = {"dimensions": {"height": {"value": "62 cm"}}}
        tech_pack_id = uuid4()

        response = client.patch(
            f"/tech-packs/{tech_pack_id}/fields",
            json={"path": "dimensions.height.value", "value": "62 cm"},
        )

        assert response.status_code == 200
        assert response.json()["tech_pack"]["dimensions"]["height"]["value"] == "62 cm"
        assert mock_update.call_args.args[1:] == (tech_pack_id, "dimensions.height.value", "62 cm")

    @pytest.mark.parametrize(
        "error, status",
        [
            (TechPackNotFoundError("Tech pack not found"), 404),
            (InvalidFieldPathError("Invalid field path"), 400),
        ],
    )
    @patch("techpack.generation.service.update_tech_pack_field", new_callable=AsyncMock)
    @patch("techpack.web.routes.tech_packs.get_session")
    def test_update_errors(
        self, mock_get_session, mock_update, client, mock_db_session, error, status
    ):
        mock_get_session.return_value = mock_db_session
        mock_update.side_effect = error

        response = client.patch(f"/tech-packs/{uuid4()}/fields", json={"path": "a..b", "value": 1})

        assert response.status_code == status
