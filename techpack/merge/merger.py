"""Deduplicating merge of extracted entries into a tech-pack document.

All merges are append-only: existing entries are never removed or mutated,
and a new entry is appended only when its normalized key is not already
present. Existing entries win over extracted ones, and among extracted
entries the first one seen wins.

Every function takes the document and returns a new document; the input
is left untouched.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Sequence
from typing import Any

from techpack.canonical.keys import KeySet, normalize_key
from techpack.models import ColorEntry, ConstructionFeature, DimensionEntry, MaterialEntry

DEFAULT_NOTES_HEADER = "**From Factory Specs:**"


def _mapping(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _entries(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


def merge_dimensions(
    document: dict[str, Any],
    canonical: dict[str, DimensionEntry],
    details: Sequence[dict[str, Any]],
) -> dict[str, Any]:
    """Overlay canonical dimension slots and replace ``details``.

    Existing dimension keys not produced by this pass are kept. Nothing
    changes when the pass produced neither slots nor details.
    """
    if not canonical and not details:
        return document

    merged = dict(document)
    merged["dimensions"] = {
        **_mapping(document.get("dimensions")),
        **{key: entry.model_dump(exclude_none=True) for key, entry in canonical.items()},
        "details": [dict(d) for d in details],
        "fromFactorySpecs": True,
    }
    return merged


def merge_materials(
    document: dict[str, Any], extracted: Iterable[MaterialEntry]
) -> dict[str, Any]:
    """Append materials whose component is not yet present (case-insensitive)."""
    existing = _entries(document.get("materials"))
    seen = KeySet(m.get("component") for m in existing if isinstance(m, dict))

    additions = [
        entry.model_dump() for entry in extracted if seen.add(entry.component)
    ]
    if not additions:
        return document

    merged = dict(document)
    merged["materials"] = existing + additions
    return merged


def merge_construction_features(
    document: dict[str, Any], extracted: Iterable[ConstructionFeature]
) -> dict[str, Any]:
    """Append construction features keyed by ``featureName``."""
    details = _mapping(document.get("constructionDetails"))
    existing = _entries(details.get("constructionFeatures"))
    seen = KeySet(f.get("featureName") for f in existing if isinstance(f, dict))

    additions = [
        feature.to_document() for feature in extracted if seen.add(feature.feature_name)
    ]
    if not additions:
        return document

    merged = dict(document)
    merged["constructionDetails"] = {**details, "constructionFeatures": existing + additions}
    return merged


def merge_hardware(document: dict[str, Any], extracted: Iterable[str]) -> dict[str, Any]:
    """Append hardware descriptors not already listed (case-insensitive)."""
    components = _mapping(document.get("hardwareComponents"))
    existing = _entries(components.get("hardware"))
    seen = KeySet(h for h in existing if isinstance(h, str))

    additions = [hardware for hardware in extracted if seen.add(hardware)]
    if not additions:
        return document

    merged = dict(document)
    merged["hardwareComponents"] = {**components, "hardware": existing + additions}
    return merged


def color_key(color: ColorEntry) -> str:
    """Dedup key of a colour: its hex when present, else its name."""
    return normalize_key(color.hex) or normalize_key(color.name)


def merge_colors(document: dict[str, Any], extracted: Iterable[ColorEntry]) -> dict[str, Any]:
    """Append primary colours not already present.

    Existing primary colours register both their hex and their name;
    accent colours are not consulted.
    """
    colors = _mapping(document.get("colors"))
    existing = _entries(colors.get("primaryColors"))

    seen = KeySet()
    for color in existing:
        if isinstance(color, dict):
            seen.add(color.get("hex"))
            seen.add(color.get("name"))

    additions = []
    for color in extracted:
        key = color_key(color)
        if not key or key in seen:
            continue
        seen.add(key)
        seen.add(color.name)
        additions.append(color.model_dump(exclude_none=True))

    if not additions:
        return document

    merged = dict(document)
    merged["colors"] = {**colors, "primaryColors": existing + additions}
    return merged


def merge_production_notes(
    document: dict[str, Any],
    notes: Iterable[str],
    header: str = DEFAULT_NOTES_HEADER,
) -> dict[str, Any]:
    """Append manufacturing notes under a Factory Specs header.

    Notes are deduplicated by exact match within this call only. A
    non-text ``productionNotes`` value is left as it is.
    """
    unique: list[str] = []
    for note in notes:
        if note and note not in unique:
            unique.append(note)
    if not unique:
        return document

    existing = document.get("productionNotes") or ""
    if not isinstance(existing, str):
        return document

    block = f"{header}\n- " + "\n- ".join(unique)
    merged = dict(document)
    merged["productionNotes"] = f"{existing}\n\n{block}" if existing else block
    return merged


def clone_document(document: Any) -> dict[str, Any]:
    """Deep copy of a tech-pack document; anything but a mapping becomes {}."""
    return copy.deepcopy(document) if isinstance(document, dict) else {}
