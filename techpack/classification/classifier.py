"""AI product category classifier.

Asks an OpenAI chat model for ``{category, subcategory, confidence}`` and
validates the answer against the category vocabulary. Classification never
raises: any failure yields the "other"/"general" fallback.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import openai

from techpack.classification.categories import (
    CATEGORY_SUBCATEGORIES,
    PRODUCT_CATEGORIES,
    default_subcategory,
)
from techpack.config import LLMConfig, get_config
from techpack.models import CategoryClassification

logger = logging.getLogger(__name__)

# Batches this small are classified one by one
INDIVIDUAL_BATCH_LIMIT = 3


def _subcategories_reference() -> str:
    return "\n".join(f"{cat}: {', '.join(subs)}" for cat, subs in CATEGORY_SUBCATEGORIES.items())


class CategoryClassifier:
    """Classify product descriptions into the category vocabulary."""

    SYSTEM_PROMPT = f"""You are an expert product classifier. Your task is to accurately classify products into predefined categories and subcategories.

AVAILABLE CATEGORIES (choose exactly one):
{", ".join(PRODUCT_CATEGORIES)}

SUBCATEGORIES FOR EACH CATEGORY:
{_subcategories_reference()}

IMPORTANT CLASSIFICATION RULES:
1. A backpack is a BAG, not furniture
2. A sports bag/gym bag is a BAG
3. Clothing items (shirts, pants, hoodies) are APPAREL
4. Shoes, sneakers, boots are FOOTWEAR
5. Watches, belts, scarves are ACCESSORIES
6. Necklaces, rings, bracelets are JEWELLERY
7. Caps, hats, beanies are HATS
8. Tables, chairs, desks are FURNITURE
9. Plush toys, dolls are TOYS
10. If the product doesn't clearly fit any category, use "other"

Respond ONLY with valid JSON in this exact format:
{{"category": "category_name", "subcategory": "subcategory_name", "confidence": 0.95}}

The confidence should be between 0 and 1, where 1 means absolutely certain."""

    BATCH_SYSTEM_PROMPT = f"""You are an expert product classifier. Classify each product into predefined categories and subcategories.

AVAILABLE CATEGORIES: {", ".join(PRODUCT_CATEGORIES)}

SUBCATEGORIES:
{_subcategories_reference()}

RULES:
- Backpacks/bags -> bags
- Clothing -> apparel
- Shoes -> footwear
- Watches/belts -> accessories
- Jewelry -> jewellery
- Caps/hats -> hats
- Tables/chairs -> furniture
- Plush/dolls -> toys

Respond with a JSON array of objects, one for each product:
[{{"category": "...", "subcategory": "...", "confidence": 0.95}}, ...]"""

    def __init__(self, config: LLMConfig | None = None, client: Any = None) -> None:
        """
        Args:
            config: LLM settings (model, temperature, token limits)
            client: Optional pre-built ``openai.AsyncOpenAI``-compatible client.
                Without one, a client is created from ``config.api_key``; with
                no key at all every call returns the fallback.
        """
        self.config = config or LLMConfig()
        self._client = client
        if self._client is None and self.config.api_key:
            self._client = openai.AsyncOpenAI(
                api_key=self.config.api_key, timeout=self.config.timeout_seconds
            )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def classify(self, description: str | None) -> CategoryClassification:
        """Classify one product description."""
        if not description or not description.strip():
            return CategoryClassification.fallback()
        if not self.enabled:
            logger.warning("No OpenAI API key configured; using fallback category")
            return CategoryClassification.fallback()

        try:
            content = await self._complete(
                self.SYSTEM_PROMPT,
                f'Classify this product: "{description}"',
                self.config.max_tokens,
            )
            if not content:
                logger.error("Empty response from OpenAI classification")
                return CategoryClassification.fallback()

            result = validate_classification(json.loads(content))
        except (openai.OpenAIError, json.JSONDecodeError, TypeError, ValueError) as e:
            logger.error(f"Error classifying product with AI: {e}")
            return CategoryClassification.fallback()

        logger.info(
            "AI category classification: %r -> %s/%s (%.2f)",
            description,
            result.category,
            result.subcategory,
            result.confidence,
        )
        return result

    async def batch_classify(self, descriptions: list[str]) -> list[CategoryClassification]:
        """Classify several descriptions, in one request when there are more than three."""
        if len(descriptions) <= INDIVIDUAL_BATCH_LIMIT:
            return list(await asyncio.gather(*(self.classify(d) for d in descriptions)))

        fallback = [CategoryClassification.fallback() for _ in descriptions]
        if not self.enabled:
            logger.warning("No OpenAI API key configured; using fallback categories")
            return fallback

        numbered = "\n".join(f"{i}. {d}" for i, d in enumerate(descriptions, 1))
        try:
            content = await self._complete(
                self.BATCH_SYSTEM_PROMPT,
                f"Classify these products:\n{numbered}",
                self.config.batch_max_tokens,
            )
            if not content:
                return fallback

            parsed = json.loads(content)
            if not isinstance(parsed, list):
                raise ValueError("batch classification response is not a list")
            results = [validate_classification(item) for item in parsed]
        except (openai.OpenAIError, json.JSONDecodeError, TypeError, ValueError) as e:
            logger.error(f"Error batch classifying products: {e}")
            return fallback

        # Pad or truncate so results line up with the inputs
        return (results + fallback)[: len(descriptions)]

    async def _complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        response = await self._client.chat.completions.create(
            model=self.config.classification_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.config.temperature,
            max_tokens=max_tokens,
        )
        return (response.choices[0].message.content or "").strip()


def validate_classification(data: Any) -> CategoryClassification:
    """Coerce a model answer onto the vocabulary.

    Unknown categories become "other"; unknown subcategories become the
    category's first subcategory; a missing confidence reads as 0.8.
    """
    if not isinstance(data, dict):
        return CategoryClassification.fallback()

    raw_category = data.get("category")
    category = raw_category.lower() if isinstance(raw_category, str) else ""
    if category not in PRODUCT_CATEGORIES:
        category = "other"

    raw_subcategory = data.get("subcategory")
    subcategory = raw_subcategory.lower() if isinstance(raw_subcategory, str) else ""
    if subcategory not in CATEGORY_SUBCATEGORIES[category]:
        subcategory = default_subcategory(category)

    confidence = data.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        confidence = 0.8

    return CategoryClassification(
        category=category,
        subcategory=subcategory,
        confidence=min(max(float(confidence), 0.0), 1.0),
    )


# Global instance (singleton pattern)
_classifier: CategoryClassifier | None = None


def get_classifier() -> CategoryClassifier:
    """Shared classifier built from the application config."""
    global _classifier
    if _classifier is None:
        _classifier = CategoryClassifier(get_config().llm)
    return _classifier
