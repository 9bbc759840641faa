"""Tech-file normalizer.

Turns one tech file's loosely-typed ``analysis_data`` into flat lists of
typed observations per category. Every entry is tagged with a readable
``source`` string ("front sketch", "side sketch summary", ...). Missing or
malformed sub-paths simply produce nothing for that category.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from techpack.extraction import shapes
from techpack.extraction.shapes import as_text, first_text
from techpack.models import (
    ColorEntry,
    ConstructionFeature,
    FileType,
    MaterialEntry,
    MeasurementObservation,
    TechFile,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TechFileObservations:
    """Everything extracted from a single tech file."""

    measurements: list[MeasurementObservation] = field(default_factory=list)
    materials: list[MaterialEntry] = field(default_factory=list)
    features: list[ConstructionFeature] = field(default_factory=list)
    hardware: list[str] = field(default_factory=list)
    colors: list[ColorEntry] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.measurements
            or self.materials
            or self.features
            or self.hardware
            or self.colors
            or self.notes
        )


class TechFileNormalizer:
    """Extract typed observations from tech files, dispatching on file type."""

    def __init__(self) -> None:
        self._readers: dict[str, Callable[[TechFile, TechFileObservations], None]] = {
            FileType.SKETCH.value: self._read_sketch,
            FileType.COMPONENT.value: self._read_component,
            FileType.BASE_VIEW.value: self._read_base_view,
        }

    def normalize(self, tech_file: TechFile) -> TechFileObservations:
        """Extract observations from one tech file.

        File types without a reader (closeups, flat sketches, assembly views,
        anything unknown) yield empty observations.
        """
        observations = TechFileObservations()
        reader = self._readers.get(tech_file.file_type)
        if reader is None or not tech_file.analysis:
            return observations

        reader(tech_file, observations)

        if logger.isEnabledFor(logging.DEBUG):
            known = shapes.PATHS_BY_FILE_TYPE.get(FileType(tech_file.file_type), ())
            logger.debug(
                "Normalized %s %s: populated paths=%s",
                tech_file.file_type,
                tech_file.id,
                [p.name for p in known if p.read(tech_file.analysis)],
            )
        return observations

    # ------------------------------------------------------------------
    # Sketches
    # ------------------------------------------------------------------

    def _read_sketch(self, tech_file: TechFile, out: TechFileObservations) -> None:
        analysis = tech_file.analysis
        view = tech_file.view_label

        out.measurements.extend(summary_measurements(analysis, view))
        out.measurements.extend(annotated_dimensions(analysis, view))
        out.measurements.extend(primary_dimensions(analysis, view))

        out.materials.extend(material_callouts(analysis, view))
        out.materials.extend(summary_materials(analysis, view))

        out.features.extend(construction_callouts(analysis, view))
        out.features.extend(summary_construction(analysis, view))

        out.hardware.extend(hardware_callouts(analysis))
        out.colors.extend(sketch_colors(analysis, view))
        out.notes.extend(manufacturing_notes(analysis))

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def _read_component(self, tech_file: TechFile, out: TechFileObservations) -> None:
        material = component_material(tech_file)
        if material is not None:
            out.materials.append(material)

    # ------------------------------------------------------------------
    # Base views
    # ------------------------------------------------------------------

    def _read_base_view(self, tech_file: TechFile, out: TechFileObservations) -> None:
        out.colors.extend(base_view_colors(tech_file.analysis, tech_file.view_type or "base"))


def summary_measurements(analysis: dict, view: str) -> list[MeasurementObservation]:
    """``summary.measurements``: list of {name, value, location}."""
    observations = []
    for meas in shapes.SUMMARY_MEASUREMENTS.read(analysis):
        name = first_text(meas, "name")
        value = first_text(meas, "value")
        if not name or not value:
            continue
        location = first_text(meas, "location")
        observations.append(
            MeasurementObservation(
                name=name,
                value=value,
                location=location,
                source=f"{view} sketch summary",
                description=location or f"From {view} view",
            )
        )
    return observations


def annotated_dimensions(analysis: dict, view: str) -> list[MeasurementObservation]:
    """``annotations_included.dimensions``: {dimension_type|location, measurement|value, critical?}."""
    observations = []
    for dim in shapes.ANNOTATED_DIMENSIONS.read(analysis):
        if not isinstance(dim, dict):
            continue
        name = first_text(dim, "dimension_type", "location") or "dimension"
        value = first_text(dim, "measurement", "value")
        if not value:
            continue
        location = first_text(dim, "location")
        critical = bool(dim.get("critical"))
        suffix = " (critical)" if critical else ""
        observations.append(
            MeasurementObservation(
                name=name,
                value=value,
                location=location,
                critical=critical,
                source=f"{view} sketch",
                description=location or f"From {view} view{suffix}",
            )
        )
    return observations


def primary_dimensions(analysis: dict, view: str) -> list[MeasurementObservation]:
    """``measurements_summary.primary_dimensions``: strings or {name|type, measurement|value}."""
    observations = []
    for dim in shapes.PRIMARY_DIMENSIONS.read(analysis):
        if isinstance(dim, str):
            if dim:
                observations.append(
                    MeasurementObservation(
                        name="measurement", value=dim, source=f"{view} sketch"
                    )
                )
            continue

        value = first_text(dim, "measurement", "value")
        if not value:
            continue
        observations.append(
            MeasurementObservation(
                name=first_text(dim, "name", "type") or "dimension",
                value=value,
                source=f"{view} sketch",
                description=f"From {view} view",
            )
        )
    return observations


def material_callouts(analysis: dict, view: str) -> list[MaterialEntry]:
    """``annotations_included.material_callouts``."""
    materials = []
    for mat in shapes.MATERIAL_CALLOUTS.read(analysis):
        component = first_text(mat, "component", "location_on_sketch")
        if not component:
            continue
        materials.append(
            MaterialEntry(
                component=component,
                material=first_text(mat, "material_spec", "material_name"),
                notes="Critical material" if mat.get("critical") else "",
                source=f"{view} sketch",
            )
        )
    return materials


def summary_materials(analysis: dict, view: str) -> list[MaterialEntry]:
    """``summary.materials``: {type|name, location, properties[]}."""
    materials = []
    for mat in shapes.SUMMARY_MATERIALS.read(analysis):
        material_type = first_text(mat, "type", "name")
        if not material_type:
            continue
        properties = mat.get("properties")
        notes = ""
        if isinstance(properties, list):
            notes = ", ".join(as_text(p) for p in properties if as_text(p))
        materials.append(
            MaterialEntry(
                component=first_text(mat, "location") or material_type,
                material=material_type,
                notes=notes,
                source=f"{view} sketch summary",
            )
        )
    return materials


def construction_callouts(analysis: dict, view: str) -> list[ConstructionFeature]:
    """``annotations_included.construction_callouts``."""
    features = []
    for con in shapes.CONSTRUCTION_CALLOUTS.read(analysis):
        feature = first_text(con, "feature")
        if not feature:
            continue
        features.append(
            ConstructionFeature(
                feature_name=feature,
                description=first_text(con, "method", "specification"),
                location=first_text(con, "location"),
                source=f"{view} sketch",
            )
        )
    return features


def summary_construction(analysis: dict, view: str) -> list[ConstructionFeature]:
    """``summary.construction``: {feature, details, technique}."""
    features = []
    for con in shapes.SUMMARY_CONSTRUCTION.read(analysis):
        feature = first_text(con, "feature")
        if not feature:
            continue
        features.append(
            ConstructionFeature(
                feature_name=feature,
                description=first_text(con, "details"),
                technique=first_text(con, "technique"),
                source=f"{view} sketch summary",
            )
        )
    return features


def hardware_callouts(analysis: dict) -> list[str]:
    return [
        hardware
        for hw in shapes.HARDWARE_CALLOUTS.read(analysis)
        if (hardware := first_text(hw, "specification", "hardware_type"))
    ]


def sketch_colors(analysis: dict, view: str) -> list[ColorEntry]:
    """``summary.colors``: {name, hex, location}."""
    colors = []
    for color in shapes.SUMMARY_COLORS.read(analysis):
        name = first_text(color, "name")
        if not name:
            continue
        colors.append(
            ColorEntry(
                name=name,
                hex=first_text(color, "hex"),
                location=first_text(color, "location"),
                source=f"{view} sketch",
            )
        )
    return colors


def base_view_colors(analysis: dict, view: str) -> list[ColorEntry]:
    """Top-level ``colors`` of a base view: strings or {name, hex}."""
    colors = []
    for color in shapes.BASE_VIEW_COLORS.read(analysis):
        name = color if isinstance(color, str) else first_text(color, "name")
        if not name:
            continue
        colors.append(
            ColorEntry(
                name=name,
                hex=first_text(color, "hex"),
                source=f"{view} view",
            )
        )
    return colors


def manufacturing_notes(analysis: dict) -> list[str]:
    return [
        note
        for note in shapes.MANUFACTURING_NOTES.read(analysis)
        if isinstance(note, str) and note
    ]


def component_material(tech_file: TechFile) -> MaterialEntry | None:
    """Primary material of a component capture, keyed by its category."""
    analysis = tech_file.analysis
    specs = shapes.component_material_specs(analysis)
    primary = as_text(specs.get("primary_material"))
    if not primary:
        return None

    guide = shapes.component_guide(analysis)
    component = (
        tech_file.file_category
        or as_text(shapes.dig(guide, "component_identification", "component_type"))
        or "Component"
    )
    color_name = as_text(shapes.dig(specs, "color", "name"))
    return MaterialEntry(
        component=component,
        material=primary,
        notes=f"Color: {color_name}" if color_name else "",
        source="component analysis",
    )
