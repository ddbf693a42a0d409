"""
foot_config.py
Tunable detection thresholds, the frozen DetectionConfig, and the error types.

Every heuristic cut-off used by the classifiers is named here; DetectionConfig
carries them as one value and replace() derives tuned variants.
"""

import logging
from dataclasses import dataclass, replace as dc_replace, fields
from typing import Tuple


# ══════════════════════════════════════════════════════════════
#  1.  Errors
# ══════════════════════════════════════════════════════════════

class FootScanError(Exception):
    """Base class for FootScan errors."""


class InvalidConfiguration(FootScanError, ValueError):
    """Raised when a threshold or the reference length is unusable."""


class DegenerateGeometry(FootScanError, ValueError):
    """Raised when a box has a zero dimension where a ratio is needed."""


# ══════════════════════════════════════════════════════════════
#  2.  Named constants
# ══════════════════════════════════════════════════════════════

# Physical reference sheet (A4), millimetres
A4_LONG_MM  = 297.0
A4_SHORT_MM = 210.0

# Descriptor area band, fraction of the image area
MIN_AREA_FRACTION = 0.01    # sensor specks
MAX_AREA_FRACTION = 0.9     # whole-frame false contours

# Reference sheet
REFERENCE_ASPECT_BAND     = (1.2, 1.8)                  # rotated long/short
REFERENCE_AXIS_BANDS      = ((0.5, 0.9), (1.1, 2.0))    # axis-aligned w/h, both orientations
REFERENCE_FALLBACK_BAND   = (1.0, 2.5)
REFERENCE_EXTENT_MIN      = 0.5
REFERENCE_FLAG_EXTENT_MIN = 0.6
TARGET_REFERENCE_ASPECT   = 1.414                       # sqrt(2)

# Subject (foot)
SUBJECT_ASPECT_BANDS      = ((0.2, 1.0), (1.0, 4.0))
SUBJECT_SOLIDITY_MAX      = 0.95
SUBJECT_EXTENT_MAX        = 0.85
PROXIMITY_RADIUS_PX       = 500.0
MIN_SUBJECT_AREA_FRACTION = 0.1

# Extraction
BINARY_THRESHOLD   = 200
CANNY_LOW          = 50
CANNY_HIGH         = 150
DILATE_KERNEL      = 3
MAX_ANALYSIS_WIDTH = 800

# Size charts
SIZE_CHARTS = ("formula", "converse")
CHART_MODES = ("ceil", "nearest", "floor")


Band = Tuple[float, float]


# ══════════════════════════════════════════════════════════════
#  3.  Config
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DetectionConfig:
    min_area_fraction: float = MIN_AREA_FRACTION
    max_area_fraction: float = MAX_AREA_FRACTION

    reference_aspect_band: Band = REFERENCE_ASPECT_BAND
    reference_axis_bands: Tuple[Band, ...] = REFERENCE_AXIS_BANDS
    reference_fallback_band: Band = REFERENCE_FALLBACK_BAND
    reference_extent_min: float = REFERENCE_EXTENT_MIN
    reference_flag_extent_min: float = REFERENCE_FLAG_EXTENT_MIN
    target_reference_aspect: float = TARGET_REFERENCE_ASPECT

    subject_aspect_bands: Tuple[Band, ...] = SUBJECT_ASPECT_BANDS
    subject_solidity_max: float = SUBJECT_SOLIDITY_MAX
    subject_extent_max: float = SUBJECT_EXTENT_MAX
    proximity_radius_px: float = PROXIMITY_RADIUS_PX
    min_subject_area_fraction: float = MIN_SUBJECT_AREA_FRACTION

    reference_length_mm: float = A4_LONG_MM

    binary_threshold: int = BINARY_THRESHOLD
    canny_low: int = CANNY_LOW
    canny_high: int = CANNY_HIGH
    dilate_kernel: int = DILATE_KERNEL
    max_analysis_width: int = MAX_ANALYSIS_WIDTH

    size_chart: str = "formula"
    chart_mode: str = "ceil"

    def validate(self) -> "DetectionConfig":
        """Raise InvalidConfiguration on the first unusable value; return self."""
        if self.reference_length_mm <= 0:
            raise InvalidConfiguration(
                f"reference_length_mm must be positive, got {self.reference_length_mm}"
            )

        if not 0 < self.min_area_fraction < self.max_area_fraction <= 1:
            raise InvalidConfiguration(
                "area fractions must satisfy 0 < min < max <= 1, got "
                f"{self.min_area_fraction} / {self.max_area_fraction}"
            )

        bands = {
            "reference_aspect_band":   [self.reference_aspect_band],
            "reference_axis_bands":    list(self.reference_axis_bands),
            "reference_fallback_band": [self.reference_fallback_band],
            "subject_aspect_bands":    list(self.subject_aspect_bands),
        }
        for name, group in bands.items():
            for band in group:
                if len(band) != 2 or not 0 <= band[0] < band[1]:
                    raise InvalidConfiguration(f"{name} has an invalid band: {band!r}")

        positive = (
            "reference_extent_min", "reference_flag_extent_min", "target_reference_aspect",
            "subject_solidity_max", "subject_extent_max", "proximity_radius_px",
            "min_subject_area_fraction", "max_analysis_width", "dilate_kernel",
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise InvalidConfiguration(f"{name} must be positive, got {getattr(self, name)}")

        if not 0 <= self.canny_low < self.canny_high:
            raise InvalidConfiguration(
                f"canny thresholds must satisfy 0 <= low < high, got {self.canny_low} / {self.canny_high}"
            )
        if not 0 <= self.binary_threshold <= 255:
            raise InvalidConfiguration(f"binary_threshold out of range: {self.binary_threshold}")

        if self.size_chart not in SIZE_CHARTS:
            raise InvalidConfiguration(f"unknown size_chart {self.size_chart!r}, expected one of {SIZE_CHARTS}")
        if self.chart_mode not in CHART_MODES:
            raise InvalidConfiguration(f"unknown chart_mode {self.chart_mode!r}, expected one of {CHART_MODES}")

        return self

    def replace(self, **changes) -> "DetectionConfig":
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise InvalidConfiguration(f"unknown config field(s): {', '.join(sorted(unknown))}")
        return dc_replace(self, **changes).validate()


DEFAULT_CONFIG = DetectionConfig()


def configure_logging(level=logging.INFO):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    logging.getLogger('PIL').setLevel(logging.WARNING)
