"""Unit tests for the AI category classifier.

The OpenAI client is replaced by a mock exposing ``chat.completions.create``.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest

from techpack.classification.classifier import CategoryClassifier, validate_classification
from techpack.config import LLMConfig


def completion(content: str | None):
    """Chat completion response carrying ``content``."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


@pytest.fixture
def classifier(mock_client):
    return CategoryClassifier(LLMConfig(classification_model="test-model"), client=mock_client)


class TestClassify:
    """Tests for single-description classification."""

    @pytest.mark.asyncio
    async def test_valid_response(self, classifier, mock_client):
        """Test model answer is parsed and validated."""
        mock_client.chat.completions.create.return_value = completion(
            '{"category": "Bags", "subcategory": "backpack", "confidence": 0.93}'
        )

        result = await classifier.classify("Roll-top hiking backpack")

        assert result.category == "bags"
        assert result.subcategory == "backpack"
        assert result.confidence == pytest.approx(0.93)

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"][0]["role"] == "system"
        assert "Roll-top hiking backpack" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_empty_description_skips_model(self, classifier, mock_client):
        """Test blank input returns the fallback without calling the model."""
        result = await classifier.classify("   ")

        assert (result.category, result.subcategory, result.confidence) == ("other", "general", 0.0)
        mock_client.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_api_key_falls_back(self):
        """Test classifier without key or client is disabled."""
        classifier = CategoryClassifier(LLMConfig(api_key=None))

        result = await classifier.classify("Leather boots")

        assert not classifier.enabled
        assert result.category == "other"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["not json", "", "[1, 2]"])
    async def test_unusable_response_falls_back(self, classifier, mock_client, content):
        mock_client.chat.completions.create.return_value = completion(content)

        result = await classifier.classify("Leather boots")

        assert result.category == "other"
        assert result.subcategory == "general"

    @pytest.mark.asyncio
    async def test_api_error_falls_back(self, classifier, mock_client):
        mock_client.chat.completions.create.side_effect = openai.OpenAIError("rate limited")

        result = await classifier.classify("Leather boots")

        assert result.category == "other"
        assert result.confidence == 0.0


class TestBatchClassify:
    """Tests for batch classification."""

    @pytest.mark.asyncio
    async def test_small_batches_classified_individually(self, classifier, mock_client):
        mock_client.chat.completions.create.return_value = completion(
            '{"category": "hats", "subcategory": "beanie", "confidence": 0.9}'
        )

        results = await classifier.batch_classify(["Wool beanie", "Knit beanie"])

        assert [r.subcategory for r in results] == ["beanie", "beanie"]
        assert mock_client.chat.completions.create.await_count == 2

    @pytest.mark.asyncio
    async def test_large_batch_single_request(self, classifier, mock_client):
        answers = [
            {"category": "apparel", "subcategory": "hoodie", "confidence": 0.9},
            {"category": "footwear", "subcategory": "boots", "confidence": 0.8},
            {"category": "bags", "subcategory": "tote", "confidence": 0.85},
        ]
        mock_client.chat.completions.create.return_value = completion(json.dumps(answers))

        descriptions = ["Hoodie", "Boots", "Tote", "Mystery item"]
        results = await classifier.batch_classify(descriptions)

        assert mock_client.chat.completions.create.await_count == 1
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 500
        assert "4. Mystery item" in kwargs["messages"][1]["content"]
        # Missing answers are padded with the fallback
        assert [r.category for r in results] == ["apparel", "footwear", "bags", "other"]

    @pytest.mark.asyncio
    async def test_large_batch_non_list_falls_back(self, classifier, mock_client):
        mock_client.chat.completions.create.return_value = completion('{"category": "bags"}')

        results = await classifier.batch_classify(["a", "b", "c", "d"])

        assert all(r.category == "other" for r in results)
        assert len(results) == 4

    @pytest.mark.asyncio
    async def test_large_batch_truncated_to_inputs(self, classifier, mock_client):
        answers = [{"category": "toys", "subcategory": "plush"}] * 6
        mock_client.chat.completions.create.return_value = completion(json.dumps(answers))

        results = await classifier.batch_classify(["a", "b", "c", "d"])

        assert len(results) == 4
        assert results[0].confidence == pytest.approx(0.8)


class TestValidateClassification:
    def test_unknown_category_becomes_other(self):
        result = validate_classification({"category": "gadgets", "subcategory": "phone"})

        assert (result.category, result.subcategory) == ("other", "general")

    def test_unknown_subcategory_becomes_first_of_category(self):
        result = validate_classification({"category": "Furniture", "subcategory": "lamp"})

        assert (result.category, result.subcategory) == ("furniture", "chair")

    @pytest.mark.parametrize(
        "confidence, expected",
        [(None, 0.8), ("high", 0.8), (True, 0.8), (1.7, 1.0), (-0.2, 0.0), (0.42, 0.42)],
    )
    def test_confidence_coercion(self, confidence, expected):
        result = validate_classification(
            {"category": "bags", "subcategory": "tote", "confidence": confidence}
        )

        assert result.confidence == pytest.approx(expected)

    def test_non_mapping_is_fallback(self):
        assert validate_classification(["bags"]).category == "other"
