"""Tabular views of a tech-pack document shared by the exporters.

Each section is a title, a header row and data rows of plain strings, so the
Excel and PDF exporters render exactly the same content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from techpack.canonical.dimensions import CANONICAL_DIMENSION_KEYS


@dataclass
class Section:
    title: str
    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def overview_section(doc: dict[str, Any]) -> Section:
    rows = [
        ["Product", _text(doc.get("productName"))],
        ["Category", _text(doc.get("category") or doc.get("category_Subcategory"))],
        ["Enhanced with Factory Specs", _text(bool(doc.get("enhancedWithFactorySpecs")))],
        ["Enhanced at", _text(doc.get("factorySpecsEnhancedAt"))],
    ]
    return Section("Overview", ["Field", "Value"], rows)


def dimensions_section(doc: dict[str, Any]) -> Section:
    dimensions = _dict(doc.get("dimensions"))
    rows = []
    for key in CANONICAL_DIMENSION_KEYS:
        slot = _dict(dimensions.get(key))
        if slot:
            rows.append(
                [
                    key.capitalize(),
                    _text(slot.get("value")),
                    _text(slot.get("tolerance")),
                    _text(slot.get("description")),
                ]
            )
    for detail in _list(dimensions.get("details")):
        detail = _dict(detail)
        rows.append(
            [
                _text(detail.get("name")),
                _text(detail.get("value")),
                "",
                _text(detail.get("source")),
            ]
        )
    return Section("Dimensions", ["Dimension", "Value", "Tolerance", "Notes"], rows)


def materials_section(doc: dict[str, Any]) -> Section:
    rows = [
        [
            _text(m.get("component")),
            _text(m.get("material")),
            _text(m.get("notes")),
            _text(m.get("source")),
        ]
        for m in map(_dict, _list(doc.get("materials")))
    ]
    return Section("Materials", ["Component", "Material", "Notes", "Source"], rows)


def construction_section(doc: dict[str, Any]) -> Section:
    features = _list(_dict(doc.get("constructionDetails")).get("constructionFeatures"))
    rows = [
        [
            _text(f.get("featureName")),
            _text(f.get("description")),
            _text(f.get("location") or f.get("technique")),
            _text(f.get("source")),
        ]
        for f in map(_dict, features)
    ]
    return Section("Construction", ["Feature", "Description", "Location / Technique", "Source"], rows)


def hardware_and_colors_section(doc: dict[str, Any]) -> Section:
    rows = [
        ["Hardware", _text(h), "", ""]
        for h in _list(_dict(doc.get("hardwareComponents")).get("hardware"))
    ]
    for color in map(_dict, _list(_dict(doc.get("colors")).get("primaryColors"))):
        rows.append(
            ["Colour", _text(color.get("name")), _text(color.get("hex")), _text(color.get("source"))]
        )
    return Section("Hardware & Colours", ["Type", "Name", "Hex", "Source"], rows)


def build_sections(doc: dict[str, Any]) -> list[Section]:
    return [
        overview_section(doc),
        dimensions_section(doc),
        materials_section(doc),
        construction_section(doc),
        hardware_and_colors_section(doc),
    ]


def production_notes(doc: dict[str, Any]) -> str:
    notes = doc.get("productionNotes")
    return notes if isinstance(notes, str) else ""
