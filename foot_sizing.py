"""
foot_sizing.py
Pixel → millimetre calibration from the reference sheet, foot length/width,
and shoe-size conversion.

  - pixels_per_mm = long side of the reference rotated box / known length (mm)
  - foot length   = long side of the foot's axis-aligned box
  - foot width    = short side of the same box
  - sizes         = 'formula' policy (default) or the Converse chart lookup
Full precision is kept here; rounding happens when a report is serialised.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping

from foot_config import DEFAULT_CONFIG, DegenerateGeometry, DetectionConfig, InvalidConfiguration
from foot_shapes import ShapeDescriptor

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════
#  1.  Size charts
# ══════════════════════════════════════════════════════════════

def formula_sizes(length_cm: float) -> Dict[str, float]:
    """Linear conversion used as the canonical chart."""
    uk = (length_cm - 23.0) / 0.84
    return {
        "uk":       uk,
        "us_men":   uk + 1.0,
        "us_women": uk + 2.5,
        "eu":       length_cm * 1.5,
        "indian":   uk + 1.0,   # approx
    }


#  Converse official chart
#  row: (foot_len_cm, us_men, us_women, uk, eu)
_CONVERSE_CHART = [
    (21.0,  3.0,  4.5,  2.5, 35.0),
    (21.5,  3.5,  5.0,  3.0, 35.5),
    (22.0,  4.0,  5.5,  3.5, 36.0),
    (22.5,  4.5,  6.0,  4.0, 37.0),
    (23.0,  5.0,  6.5,  4.5, 37.5),
    (23.5,  5.5,  7.0,  5.0, 38.0),
    (24.0,  6.5,  8.0,  5.5, 39.0),
    (25.0,  7.0,  8.5,  6.0, 40.0),
    (25.5,  7.5,  9.0,  6.5, 40.5),
    (26.0,  8.0,  9.5,  7.0, 41.0),
    (26.5,  8.5, 10.0,  7.5, 42.0),
    (27.0,  9.0, 10.5,  8.0, 42.5),
    (27.5,  9.5, 11.0,  8.5, 43.0),
    (28.0, 10.0, 11.5,  9.0, 44.0),
    (28.5, 10.5, 12.0,  9.5, 44.5),
    (29.0, 11.0, 12.5, 10.0, 45.0),
    (29.5, 11.5, 13.0, 10.5, 46.0),
    (30.0, 12.0, 13.5, 11.0, 46.5),
    (30.5, 12.5, 14.0, 11.5, 47.0),
    (31.0, 13.0, 14.5, 12.0, 47.5),
    (31.5, 13.5, 15.0, 12.5, 48.0),
    (32.0, 14.0, 15.5, 13.0, 49.0),
]


def converse_chart():
    """Rows as dicts, for display."""
    return [
        {"cm": cm, "us_men": us_m, "us_women": us_w, "uk": uk, "eu": eu}
        for cm, us_m, us_w, uk, eu in _CONVERSE_CHART
    ]


def shoe_size_from_foot_length_cm(length_cm, mode="ceil"):
    """
    mode: 'ceil' (avoids short-size errors) | 'nearest' | 'floor'
    Returns dict: uk, us_men, us_women, eu, indian
    """
    length_cm = round(float(length_cm), 2)

    if mode == "nearest":
        row = min(_CONVERSE_CHART, key=lambda r: abs(length_cm - r[0]))
    elif mode == "ceil":
        row = next((r for r in _CONVERSE_CHART if r[0] >= length_cm), _CONVERSE_CHART[-1])
    elif mode == "floor":
        cands = [r for r in _CONVERSE_CHART if r[0] <= length_cm]
        row = cands[-1] if cands else _CONVERSE_CHART[0]
    else:
        raise InvalidConfiguration(f"unknown chart mode {mode!r}")

    _, us_men, us_women, uk, eu = row
    return {
        "uk":       uk,
        "us_men":   us_men,
        "us_women": us_women,
        "eu":       eu,
        "indian":   uk + 1,   # approx
    }


def sizes_for(length_cm: float, config: DetectionConfig = DEFAULT_CONFIG) -> Dict[str, float]:
    if config.size_chart == "converse":
        return shoe_size_from_foot_length_cm(length_cm, mode=config.chart_mode)
    return formula_sizes(length_cm)


# ══════════════════════════════════════════════════════════════
#  2.  Measurement
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MeasurementResult:
    pixels_per_mm: float
    length_mm: float
    width_mm: float
    sizes: Mapping[str, float] = field(hash=False)
    size_chart: str = "formula"

    def __post_init__(self):
        # read-only view so the frozen record stays immutable
        object.__setattr__(self, "sizes", MappingProxyType(dict(self.sizes)))

    @property
    def length_cm(self) -> float:
        return self.length_mm / 10.0

    def rounded(self, digits: int = 1) -> Dict[str, object]:
        return {
            "pixels_per_mm": round(self.pixels_per_mm, 4),
            "length_mm":     round(self.length_mm, digits),
            "width_mm":      round(self.width_mm, digits),
            "length_cm":     round(self.length_cm, 2),
            "size_chart":    self.size_chart,
            "sizes":         {k: round(v, digits) for k, v in self.sizes.items()},
        }


def pixels_per_mm(reference: ShapeDescriptor, reference_length_mm: float) -> float:
    if reference_length_mm <= 0:
        raise InvalidConfiguration(f"reference length must be positive, got {reference_length_mm}")
    box = reference.rotated_box
    if box.short_side <= 0:
        raise DegenerateGeometry(f"reference #{reference.id} has a zero-sized rotated box")
    return box.long_side / reference_length_mm


def measure(reference: ShapeDescriptor, subject: ShapeDescriptor,
            config: DetectionConfig = DEFAULT_CONFIG) -> MeasurementResult:
    scale = pixels_per_mm(reference, config.reference_length_mm)

    bbox = subject.bounding_box
    length_px = max(bbox.width, bbox.height)
    width_px  = min(bbox.width, bbox.height)

    length_mm = length_px / scale
    width_mm  = width_px / scale
    sizes = sizes_for(length_mm / 10.0, config)

    logger.info("Final result: %.1f x %.1f mm (%.4f px/mm)", length_mm, width_mm, scale)
    return MeasurementResult(
        pixels_per_mm = scale,
        length_mm     = length_mm,
        width_mm      = width_mm,
        sizes         = sizes,
        size_chart    = config.size_chart,
    )
