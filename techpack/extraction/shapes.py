"""Known nesting paths inside ``analysis_data`` payloads.

Upstream analysis producers disagree on where they put the same concept,
so every category has several alternative locations. Each location is
listed here once, by file type, so the normalizer reads them explicitly
and tests can exercise them one by one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from techpack.canonical.dimensions import measurement_text
from techpack.models import FileType


@dataclass(frozen=True, slots=True)
class PayloadPath:
    """A named location of list-valued data inside an analysis payload."""

    name: str
    keys: tuple[str, ...]

    def read(self, payload: Any) -> list[Any]:
        """Entries at this path; an empty list when any level is missing."""
        value = dig(payload, *self.keys)
        return value if isinstance(value, list) else []


def dig(payload: Any, *keys: str) -> Any:
    """Walk nested mappings, returning None as soon as a level is absent."""
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def as_text(value: Any) -> str:
    """Coerce a scalar payload value to text; anything else becomes ""."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return measurement_text(value)
    return ""


def first_text(entry: Any, *fields: str) -> str:
    """First non-empty text value among ``fields`` of a mapping entry."""
    if not isinstance(entry, dict):
        return ""
    for field in fields:
        text = as_text(entry.get(field))
        if text:
            return text
    return ""


# Sketch payloads
SUMMARY_MEASUREMENTS = PayloadPath("summary.measurements", ("summary", "measurements"))
ANNOTATED_DIMENSIONS = PayloadPath(
    "annotations_included.dimensions", ("annotations_included", "dimensions")
)
PRIMARY_DIMENSIONS = PayloadPath(
    "measurements_summary.primary_dimensions",
    ("measurements_summary", "primary_dimensions"),
)
MATERIAL_CALLOUTS = PayloadPath(
    "annotations_included.material_callouts",
    ("annotations_included", "material_callouts"),
)
SUMMARY_MATERIALS = PayloadPath("summary.materials", ("summary", "materials"))
CONSTRUCTION_CALLOUTS = PayloadPath(
    "annotations_included.construction_callouts",
    ("annotations_included", "construction_callouts"),
)
SUMMARY_CONSTRUCTION = PayloadPath("summary.construction", ("summary", "construction"))
HARDWARE_CALLOUTS = PayloadPath(
    "annotations_included.hardware_callouts",
    ("annotations_included", "hardware_callouts"),
)
SUMMARY_COLORS = PayloadPath("summary.colors", ("summary", "colors"))
MANUFACTURING_NOTES = PayloadPath(
    "annotations_included.manufacturing_notes",
    ("annotations_included", "manufacturing_notes"),
)

# Base-view payloads
BASE_VIEW_COLORS = PayloadPath("colors", ("colors",))

PATHS_BY_FILE_TYPE: dict[FileType, tuple[PayloadPath, ...]] = {
    FileType.SKETCH: (
        SUMMARY_MEASUREMENTS,
        ANNOTATED_DIMENSIONS,
        PRIMARY_DIMENSIONS,
        MATERIAL_CALLOUTS,
        SUMMARY_MATERIALS,
        CONSTRUCTION_CALLOUTS,
        SUMMARY_CONSTRUCTION,
        HARDWARE_CALLOUTS,
        SUMMARY_COLORS,
        MANUFACTURING_NOTES,
    ),
    FileType.BASE_VIEW: (BASE_VIEW_COLORS,),
}


def component_material_specs(payload: Any) -> dict[str, Any]:
    """Material specification block of a component payload.

    Looked up under ``component_guide.material_specifications`` first, then
    ``material_specifications`` at the top level.
    """
    guide = component_guide(payload)
    specs = guide.get("material_specifications") or dig(payload, "material_specifications")
    return specs if isinstance(specs, dict) else {}


def component_guide(payload: Any) -> dict[str, Any]:
    """``component_guide`` block, or the payload itself when there is none."""
    guide = dig(payload, "component_guide")
    if isinstance(guide, dict) and guide:
        return guide
    return payload if isinstance(payload, dict) else {}
