"""Product category classification."""

from techpack.classification.categories import (
    CATEGORY_SUBCATEGORIES,
    PRODUCT_CATEGORIES,
    extract_category_from_subcategory,
    extract_subcategory,
    normalize_category,
)
from techpack.classification.classifier import CategoryClassifier, get_classifier

__all__ = [
    "PRODUCT_CATEGORIES",
    "CATEGORY_SUBCATEGORIES",
    "CategoryClassifier",
    "get_classifier",
    "normalize_category",
    "extract_category_from_subcategory",
    "extract_subcategory",
]
