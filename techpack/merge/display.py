"""Display-side dimension enrichment.

When a tech pack is shown and its height, width and length slots are all
empty while the sketches carry measurements, the canonical slots are filled
from the sketches on the fly. Extraction goes through the same normalizer,
synonym table and tolerance parser as the assembler, so both paths agree.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from techpack.merge import merger
from techpack.merge.assembler import TechPackAssembler, coerce_tech_files, order_tech_files
from techpack.models import FileType

logger = logging.getLogger(__name__)

DISPLAY_SLOTS = ("height", "width", "length")


def has_empty_display_dimensions(tech_pack: dict[str, Any]) -> bool:
    dimensions = tech_pack.get("dimensions")
    if not isinstance(dimensions, dict):
        return True
    for key in DISPLAY_SLOTS:
        slot = dimensions.get(key)
        if isinstance(slot, dict) and slot.get("value"):
            return False
    return True


def enrich_display_dimensions(
    tech_pack: dict[str, Any] | None,
    sketches: Sequence[Any],
    assembler: TechPackAssembler | None = None,
) -> dict[str, Any]:
    """Fill empty height/width/length slots from sketch measurements.

    Args:
        tech_pack: Document being displayed
        sketches: Tech files; anything that is not a sketch is ignored

    Returns:
        A new document with the extracted slots and ``fromFactorySpecs``
        set, or a copy of the input when nothing applies. ``details`` is not
        touched on this path.
    """
    document = merger.clone_document(tech_pack)
    if not has_empty_display_dimensions(document):
        return document

    files = [
        f
        for f in order_tech_files(coerce_tech_files(sketches))
        if f.file_type == FileType.SKETCH.value
    ]
    if not files:
        return document

    extraction = (assembler or TechPackAssembler()).extract_dimensions(files)
    if not any(key in extraction.canonical for key in DISPLAY_SLOTS):
        return document

    logger.info(
        "Updating display dimensions from Factory Specs: %s", sorted(extraction.canonical)
    )
    existing = document.get("dimensions") if isinstance(document.get("dimensions"), dict) else {}
    document["dimensions"] = {
        **existing,
        **{
            key: entry.model_dump(exclude_none=True)
            for key, entry in extraction.canonical.items()
        },
        "fromFactorySpecs": True,
    }
    return document
