"""Shared dependencies for tech-pack web routes.

Usage:
    from fastapi import Depends
    from techpack.web.dependencies import get_category_classifier

    @router.post("/products")
    async def create(classifier=Depends(get_category_classifier)):
        ...
"""

from __future__ import annotations

from techpack.classification.classifier import CategoryClassifier, get_classifier


def get_category_classifier() -> CategoryClassifier:
    """Shared category classifier built from the application config."""
    return get_classifier()
