"""Tech-pack assembler.

Runs the normalizer over an explicitly ordered list of tech files and folds
the observations into a tech-pack document:

1. Order tech files by type (sketch, component, base view, then the rest),
   then by creation time, then by id
2. Normalize each file; a file that fails is logged and skipped
3. Map measurement labels to canonical dimension slots, first seen wins
4. Merge materials, construction features, hardware, colours and notes
   with the existing-entry-wins dedup policy
5. Stamp ``enhancedWithFactorySpecs`` and ``factorySpecsEnhancedAt``

A pass is a pure function of (document, tech files); the input document is
never mutated.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from techpack.canonical.dimensions import DimensionMapper, get_dimension_mapper, parse_tolerance
from techpack.extraction.normalizer import TechFileNormalizer, TechFileObservations
from techpack.merge import merger
from techpack.models import DimensionEntry, FileType, MeasurementObservation, TechFile

logger = logging.getLogger(__name__)

FILE_TYPE_ORDER: dict[str, int] = {
    FileType.SKETCH.value: 0,
    FileType.COMPONENT.value: 1,
    FileType.BASE_VIEW.value: 2,
    FileType.CLOSEUP.value: 3,
    FileType.FLAT_SKETCH.value: 4,
    FileType.ASSEMBLY_VIEW.value: 5,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sort_key(tech_file: TechFile) -> tuple[int, float, str]:
    created = tech_file.created_at.timestamp() if tech_file.created_at else float("inf")
    return (
        FILE_TYPE_ORDER.get(tech_file.file_type, len(FILE_TYPE_ORDER)),
        created,
        tech_file.id or "",
    )


def order_tech_files(tech_files: Iterable[TechFile]) -> list[TechFile]:
    """Stable processing order: file type, then creation time, then id."""
    return sorted(tech_files, key=_sort_key)


def coerce_tech_files(records: Iterable[Any]) -> list[TechFile]:
    """Validate raw records (dicts or ORM rows) into TechFile models.

    Records that do not validate are logged and dropped.
    """
    tech_files = []
    for record in records:
        if isinstance(record, TechFile):
            tech_files.append(record)
            continue
        try:
            if isinstance(record, dict):
                tech_files.append(TechFile.model_validate(record))
            else:
                tech_files.append(TechFile.model_validate(record, from_attributes=True))
        except ValueError as e:
            logger.warning("Skipping malformed tech file record: %s", e)
    return tech_files


@dataclass(slots=True)
class DimensionExtraction:
    """Canonical slots plus every raw observation, in processing order."""

    canonical: dict[str, DimensionEntry] = field(default_factory=dict)
    details: list[MeasurementObservation] = field(default_factory=list)

    def observe(self, observation: MeasurementObservation, mapper: DimensionMapper) -> None:
        self.details.append(observation)

        key = mapper.map_label(observation.name)
        if key is None or key in self.canonical:
            return

        split = parse_tolerance(observation.value)
        self.canonical[key] = DimensionEntry(
            value=split.main_value,
            tolerance=split.tolerance,
            description=observation.description,
        )


@dataclass(slots=True)
class AssemblyResult:
    """Outcome of one assembler pass."""

    tech_pack: dict[str, Any]
    files_processed: int
    files_failed: int
    dimensions: DimensionExtraction

    @property
    def summary(self) -> dict[str, Any]:
        doc = self.tech_pack
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "canonical_dimensions": sorted(self.dimensions.canonical),
            "dimension_details": len(self.dimensions.details),
            "materials": len(doc.get("materials") or []),
            "construction_features": len(
                (doc.get("constructionDetails") or {}).get("constructionFeatures") or []
            ),
            "hardware": len((doc.get("hardwareComponents") or {}).get("hardware") or []),
            "primary_colors": len((doc.get("colors") or {}).get("primaryColors") or []),
        }


class TechPackAssembler:
    """Fold tech-file analysis into a tech-pack document."""

    def __init__(
        self,
        mapper: DimensionMapper | None = None,
        normalizer: TechFileNormalizer | None = None,
        notes_header: str = merger.DEFAULT_NOTES_HEADER,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.mapper = mapper or get_dimension_mapper()
        self.normalizer = normalizer or TechFileNormalizer()
        self.notes_header = notes_header
        self.clock = clock

    def extract_dimensions(self, tech_files: Iterable[TechFile]) -> DimensionExtraction:
        """Canonical dimension slots from already-ordered tech files."""
        extraction = DimensionExtraction()
        for tech_file in tech_files:
            for observation in self.normalizer.normalize(tech_file).measurements:
                extraction.observe(observation, self.mapper)
        return extraction

    def assemble(
        self, tech_pack: dict[str, Any] | None, tech_files: Sequence[Any]
    ) -> AssemblyResult:
        """Run one pass.

        Args:
            tech_pack: Existing document (may be empty or None)
            tech_files: TechFile models, dicts or ORM rows in any order

        Returns:
            AssemblyResult with the enriched document. With no tech files the
            document is returned as-is (copied) and is not stamped.
        """
        document = merger.clone_document(tech_pack)
        ordered = order_tech_files(coerce_tech_files(tech_files))
        if not ordered:
            return AssemblyResult(document, 0, 0, DimensionExtraction())

        collected = TechFileObservations()
        dimensions = DimensionExtraction()
        failed = 0

        for tech_file in ordered:
            try:
                observations = self.normalizer.normalize(tech_file)
            except Exception:
                failed += 1
                logger.exception(
                    "Failed to normalize tech file %s (%s); skipping",
                    tech_file.id,
                    tech_file.file_type,
                )
                continue

            for observation in observations.measurements:
                dimensions.observe(observation, self.mapper)
            collected.materials.extend(observations.materials)
            collected.features.extend(observations.features)
            collected.hardware.extend(observations.hardware)
            collected.colors.extend(observations.colors)
            collected.notes.extend(observations.notes)

        document = merger.merge_dimensions(
            document,
            dimensions.canonical,
            [obs.to_detail() for obs in dimensions.details],
        )
        document = merger.merge_materials(document, collected.materials)
        document = merger.merge_construction_features(document, collected.features)
        document = merger.merge_hardware(document, collected.hardware)
        document = merger.merge_colors(document, collected.colors)
        document = merger.merge_production_notes(
            document, collected.notes, header=self.notes_header
        )

        document["enhancedWithFactorySpecs"] = True
        document["factorySpecsEnhancedAt"] = self.clock().isoformat()

        result = AssemblyResult(
            tech_pack=document,
            files_processed=len(ordered) - failed,
            files_failed=failed,
            dimensions=dimensions,
        )
        logger.info("Tech pack enhanced with Factory Specs data: %s", result.summary)
        return result


def merge_tech_files_into_tech_pack(
    tech_pack: dict[str, Any] | None,
    tech_files: Sequence[Any],
    assembler: TechPackAssembler | None = None,
) -> dict[str, Any]:
    """Convenience wrapper returning only the enriched document."""
    return (assembler or TechPackAssembler()).assemble(tech_pack, tech_files).tech_pack


# ----------------------------------------------------------------------
# Display aggregates
# ----------------------------------------------------------------------


def _of_type(tech_files: Iterable[TechFile], file_type: FileType) -> list[TechFile]:
    return [f for f in tech_files if f.file_type == file_type.value]


def group_tech_files_for_tech_pack(tech_files: Sequence[Any]) -> dict[str, list[dict[str, Any]]]:
    """Image groups stored under ``techFiles`` in a generated tech pack."""
    ordered = order_tech_files(coerce_tech_files(tech_files))
    return {
        "baseViews": [
            {
                "view": f.view_type,
                "imageUrl": f.file_url,
                "thumbnailUrl": f.thumbnail_url,
                "analysis": f.analysis_data,
            }
            for f in _of_type(ordered, FileType.BASE_VIEW)
        ],
        "closeUps": [
            {
                "shotName": f.file_category,
                "imageUrl": f.file_url,
                "thumbnailUrl": f.thumbnail_url,
                "analysis": f.analysis_data,
            }
            for f in _of_type(ordered, FileType.CLOSEUP)
        ],
        "sketches": [
            {
                "view": f.view_type,
                "imageUrl": f.file_url,
                "thumbnailUrl": f.thumbnail_url,
                "callouts": f.analysis.get("callouts"),
                "measurements": f.analysis.get("measurements"),
                "summary": f.analysis.get("summary"),
            }
            for f in _of_type(ordered, FileType.SKETCH)
        ],
        "components": [
            {
                "componentName": f.file_category,
                "imageUrl": f.file_url,
                "thumbnailUrl": f.thumbnail_url,
                "analysis": f.analysis_data,
            }
            for f in _of_type(ordered, FileType.COMPONENT)
        ],
    }


def group_tech_files_by_type(
    tech_files: Sequence[Any], selected_revision_id: str | None = None
) -> dict[str, Any]:
    """Tech files grouped by type for the product page.

    Groups are newest first; only the most recent assembly view is kept.
    """
    files = coerce_tech_files(tech_files)
    newest_first = sorted(
        files,
        key=lambda f: f.created_at.timestamp() if f.created_at else float("-inf"),
        reverse=True,
    )

    def dump(file_type: FileType) -> list[dict[str, Any]]:
        return [
            f.model_dump(mode="json", exclude={"status"})
            for f in _of_type(newest_first, file_type)
        ]

    assembly_views = dump(FileType.ASSEMBLY_VIEW)
    return {
        "baseViews": dump(FileType.BASE_VIEW),
        "components": dump(FileType.COMPONENT),
        "closeups": dump(FileType.CLOSEUP),
        "sketches": dump(FileType.SKETCH),
        "flatSketches": dump(FileType.FLAT_SKETCH),
        "assemblyView": assembly_views[0] if assembly_views else None,
        "selectedRevisionId": selected_revision_id,
    }
