"""Dimension label mapping and tolerance parsing.

Free-text measurement labels from the analysis producers are mapped onto
four canonical slots: height, width, length and weight. Values such as
``"60 cm ±1 cm"`` are split into a bare value and a tolerance.

Both the persistence-side assembler and the display-side enrichment use
this module, so the synonym table and the tolerance pattern exist exactly
once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

CANONICAL_DIMENSION_KEYS: tuple[str, ...] = ("height", "width", "length", "weight")

DEFAULT_DIMENSION_SYNONYMS: dict[str, list[str]] = {
    "height": ["overall height", "height", "total height", "overall_height"],
    "width": ["overall width", "width", "total width", "overall_width", "breadth"],
    "length": [
        "depth",
        "length",
        "overall depth",
        "overall length",
        "overall_depth",
        "front to back",
    ],
    "weight": ["weight", "total weight", "overall_weight"],
}

# Optional sign, number, optional unit word; first match anywhere in the string
TOLERANCE_PATTERN = re.compile(r"([±+\-]\s*[\d.]+\s*\w*)")


class ConfigurationError(Exception):
    """Synonym configuration file is invalid."""

    pass


@dataclass(frozen=True, slots=True)
class ToleranceSplit:
    main_value: str
    tolerance: str

    @property
    def has_tolerance(self) -> bool:
        return bool(self.tolerance)


def parse_tolerance(value: Any) -> ToleranceSplit:
    """Split a measurement string into its main value and ± tolerance.

    Args:
        value: Raw measurement (strings and numbers accepted)

    Returns:
        ToleranceSplit; ``tolerance`` is "" when no signed quantity is present
    """
    text = measurement_text(value)
    match = TOLERANCE_PATTERN.search(text)
    if not match:
        return ToleranceSplit(main_value=text.strip(), tolerance="")

    main_value = (text[: match.start()] + text[match.end() :]).strip()
    return ToleranceSplit(main_value=main_value, tolerance=match.group(1).strip())


def measurement_text(value: Any) -> str:
    """Render a raw measurement value as text.

    Integral floats lose their trailing ``.0`` so ``60.0`` reads ``"60"``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class DimensionMapper:
    """Map measurement labels to canonical dimension keys."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize from a YAML synonym file, or the built-in table.

        Args:
            config_path: Optional YAML file with ``height``/``width``/
                ``length``/``weight`` lists

        Raises:
            ConfigurationError: If the file exists but is not a valid table
        """
        self._lookup: dict[str, str] = {}

        if config_path and config_path.exists():
            self._load_config(config_path)
        else:
            self._load_table(DEFAULT_DIMENSION_SYNONYMS)

    def _load_config(self, config_path: Path) -> None:
        try:
            with config_path.open(encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping")

        unknown = set(config) - set(CANONICAL_DIMENSION_KEYS)
        if unknown:
            raise ConfigurationError(
                f"Unknown dimension keys in {config_path}: {', '.join(sorted(unknown))}"
            )

        self._load_table(config)

    def _load_table(self, table: dict[str, list[str]]) -> None:
        for canonical in CANONICAL_DIMENSION_KEYS:
            for label in table.get(canonical) or []:
                # First entry wins if a label is listed under two keys
                self._lookup.setdefault(str(label).strip().lower(), canonical)

    def map_label(self, label: Any) -> str | None:
        """Return the canonical key for a label, or None when unmapped."""
        if not isinstance(label, str):
            return None
        return self._lookup.get(label.strip().lower())

    @property
    def synonyms(self) -> dict[str, str]:
        return dict(self._lookup)


# Global instance (singleton pattern)
_mapper: DimensionMapper | None = None
_mapper_path: Path | None = None


def get_dimension_mapper(
    config_path: Path | None = None, reload: bool = False
) -> DimensionMapper:
    """Get the shared mapper instance.

    A call without ``config_path`` returns whichever table is loaded; a call
    naming a different file than the loaded one rebuilds the mapper.

    Args:
        config_path: Path to synonyms config
        reload: Force reload of mapper
    """
    global _mapper, _mapper_path
    stale = config_path is not None and config_path != _mapper_path
    if _mapper is None or reload or stale:
        _mapper = DimensionMapper(config_path=config_path)
        _mapper_path = config_path
    return _mapper
