"""Tech-pack generation business operations.

Loads a product's tech files, runs the assembler over the current tech-pack
document and persists the result as the product's new active tech pack.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from techpack.canonical.dimensions import get_dimension_mapper
from techpack.classification.classifier import CategoryClassifier
from techpack.config import get_config
from techpack.db import repository
from techpack.db.models import ProductModel
from techpack.merge.assembler import TechPackAssembler, group_tech_files_for_tech_pack
from techpack.merge.display import enrich_display_dimensions
from techpack.models import CategoryClassification, FileType

logger = logging.getLogger(__name__)


class ProductNotFoundError(LookupError):
    """Product id does not exist."""


class TechPackNotFoundError(LookupError):
    """Tech pack id does not exist."""


class InvalidFieldPathError(ValueError):
    """Manual-edit field path is empty or malformed."""


@dataclass
class GenerationResult:
    tech_pack_id: UUID
    tech_pack: dict[str, Any]
    revision_id: str | None
    revision_number: int | None
    enriched: bool
    files_processed: int = 0


_BRAND_DNA_PATTERNS = (
    re.compile(r"===\s*BRAND DNA\s*===[\s\S]*?===\s*END BRAND DNA\s*===", re.IGNORECASE),
    re.compile(r"\[BRAND DNA CONTEXT\][\s\S]*?\[END BRAND DNA CONTEXT\]", re.IGNORECASE),
    # Unterminated block runs to the end of the prompt
    re.compile(r"=== BRAND DNA ===[\s\S]*", re.IGNORECASE),
)
_PROMPT_PREFIXES = (
    re.compile(r"^Product Idea:\s*", re.IGNORECASE),
    re.compile(r"^Product:\s*", re.IGNORECASE),
    re.compile(r"^Idea:\s*", re.IGNORECASE),
)


def default_assembler() -> TechPackAssembler:
    """Assembler configured from the application settings."""
    config = get_config()
    return TechPackAssembler(
        mapper=get_dimension_mapper(config.dimension_synonyms_path),
        notes_header=config.merge.notes_header,
    )


def clean_user_prompt(prompt: str | None) -> str:
    """Strip injected brand context and "Product:"-style prefixes."""
    text = prompt or ""
    for pattern in _BRAND_DNA_PATTERNS:
        text = pattern.sub("", text)
    text = text.strip()
    for pattern in _PROMPT_PREFIXES:
        text = pattern.sub("", text)
    return text.strip()


async def create_product_entry(
    session: AsyncSession,
    name: str,
    prompt: str | None = None,
    category: str | None = None,
    classifier: CategoryClassifier | None = None,
) -> tuple[ProductModel, CategoryClassification | None]:
    """Create a product with an empty tech pack and an AI-inferred category.

    The cleaned prompt (or the given category text) is classified; any
    classifier failure falls back to other/general. Nothing is classified
    when there is no text at all.
    """
    text_to_classify = clean_user_prompt(prompt) or (category or "")

    classification: CategoryClassification | None = None
    if text_to_classify and classifier is not None:
        try:
            classification = await classifier.classify(text_to_classify)
        except Exception as e:
            logger.error(f"Error classifying product with AI: {e}")
            classification = CategoryClassification.fallback()

    product = ProductModel(
        name=name,
        prompt=prompt,
        tech_pack={},
        category=classification.category if classification else None,
        category_subcategory=classification.subcategory if classification else None,
    )
    session.add(product)
    await session.flush()

    logger.info(
        "Created product %s (category=%s, subcategory=%s)",
        product.id,
        product.category,
        product.category_subcategory,
    )
    return product, classification


async def _base_document(
    session: AsyncSession, product: ProductModel, base_tech_pack: dict[str, Any] | None
) -> dict[str, Any]:
    if base_tech_pack is not None:
        return base_tech_pack
    active = await repository.get_active_tech_pack(session, product.id)
    if active is not None:
        return active.tech_pack_data or {}
    return product.tech_pack or {}


async def generate_tech_pack_for_product(
    session: AsyncSession,
    product_id: UUID | str,
    revision_id: str | None = None,
    revision_number: int | None = None,
    base_tech_pack: dict[str, Any] | None = None,
    assembler: TechPackAssembler | None = None,
) -> GenerationResult:
    """Enrich a product's tech pack with its tech files and save it.

    Args:
        product_id: Product to generate for
        revision_id: Restrict tech files to one revision; also recorded on
            the saved tech pack
        revision_number: Recorded on the saved tech pack
        base_tech_pack: Document to enrich; defaults to the active tech pack,
            then the product's stored tech pack

    Returns:
        GenerationResult for the newly saved (active) tech pack

    Raises:
        ProductNotFoundError: If the product does not exist

    Fetching or merging tech files never fails the operation: on error the
    base document is saved unenriched.
    """
    product = await repository.get_product(session, product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")

    document = copy.deepcopy(await _base_document(session, product, base_tech_pack))
    tech_files_block = None
    enriched = False
    files_processed = 0

    try:
        # A failed read must not poison the outer transaction the save runs in
        async with session.begin_nested():
            tech_files = await repository.fetch_completed_tech_files(
                session, product.id, revision_id
            )
        if tech_files:
            tech_files_block = group_tech_files_for_tech_pack(tech_files)
            result = (assembler or default_assembler()).assemble(document, tech_files)
            document = result.tech_pack
            enriched = True
            files_processed = result.files_processed
    except Exception:
        # Non-fatal: continue with the unenriched document
        logger.exception("Error merging tech files into tech pack for product %s", product.id)

    document["techFiles"] = tech_files_block
    if not isinstance(document.get("sectionSummaries"), dict):
        document["sectionSummaries"] = {}

    record = await repository.save_tech_pack_for_revision(
        session, product.id, revision_id, revision_number, document
    )
    return GenerationResult(
        tech_pack_id=record.id,
        tech_pack=document,
        revision_id=revision_id,
        revision_number=revision_number,
        enriched=enriched,
        files_processed=files_processed,
    )


def parse_field_path(path: str) -> list[str]:
    """Split a dotted field path ("dimensions.height.value").

    Raises:
        InvalidFieldPathError: On an empty path or an empty segment
    """
    if not isinstance(path, str) or not path.strip():
        raise InvalidFieldPathError("Field path must not be empty")
    parts = [part.strip() for part in path.split(".")]
    if any(not part for part in parts):
        raise InvalidFieldPathError(f"Invalid field path: {path!r}")
    return parts


def set_field(document: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Return a copy of ``document`` with ``value`` written at ``path``.

    Missing or non-object intermediate levels are replaced by new objects.
    """
    parts = parse_field_path(path)
    updated = copy.deepcopy(document) if isinstance(document, dict) else {}

    node = updated
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value
    return updated


async def update_tech_pack_field(
    session: AsyncSession,
    tech_pack_id: UUID | str,
    path: str,
    value: Any,
) -> dict[str, Any]:
    """Manually overwrite one field of a stored tech pack.

    Bypasses the dedup merge entirely. When the tech pack is active the
    product's mirrored copy is updated too.

    Raises:
        TechPackNotFoundError: If the tech pack does not exist
        InvalidFieldPathError: If the path is malformed
    """
    parse_field_path(path)
    record = await repository.get_tech_pack(session, tech_pack_id)
    if record is None:
        raise TechPackNotFoundError(f"Tech pack {tech_pack_id} not found")

    updated = set_field(record.tech_pack_data or {}, path, value)
    record.tech_pack_data = updated

    if record.is_active:
        product = await repository.get_product(session, record.product_id)
        if product is not None:
            product.tech_pack = updated

    await session.flush()
    logger.info("Updated tech pack %s field %s", record.id, path)
    return updated


async def refresh_display_dimensions(
    session: AsyncSession, product_id: UUID | str
) -> dict[str, Any]:
    """Active tech pack with empty display dimensions filled from sketches.

    Nothing is persisted.

    Raises:
        ProductNotFoundError: If the product does not exist
    """
    product = await repository.get_product(session, product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")

    active = await repository.get_active_tech_pack(session, product.id)
    document = active.tech_pack_data if active is not None else (product.tech_pack or {})
    if not get_config().merge.display_enrichment_enabled:
        return dict(document)

    revision_id = active.revision_id if active is not None else None

    tech_files = await repository.fetch_completed_tech_files(session, product.id, revision_id)
    sketches = [f for f in tech_files if f.file_type == FileType.SKETCH.value]
    return enrich_display_dimensions(document, sketches, default_assembler())
