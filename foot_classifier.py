"""
foot_classifier.py
Decide which descriptor is the A4 sheet and which is the foot.

Narrow geometric heuristics only (aspect, extent, solidity, proximity). A miss
is reported as None rather than guessing.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from foot_config import DEFAULT_CONFIG, DetectionConfig
from foot_shapes import ShapeDescriptor

logger = logging.getLogger(__name__)


def _inside(value: float, band) -> bool:
    low, high = band
    return low < value < high


# ══════════════════════════════════════════════════════════════
#  1.  Predicates  (diagnostic flags, never mutate descriptors)
# ══════════════════════════════════════════════════════════════

def is_reference_shaped(d: ShapeDescriptor, config: DetectionConfig = DEFAULT_CONFIG) -> bool:
    return (_inside(d.rotated_aspect, config.reference_aspect_band)
            or any(_inside(d.aspect_ratio, band) for band in config.reference_axis_bands))


def looks_like_reference(d: ShapeDescriptor, config: DetectionConfig = DEFAULT_CONFIG) -> bool:
    return is_reference_shaped(d, config) and d.extent > config.reference_flag_extent_min


def is_subject_shaped(d: ShapeDescriptor, config: DetectionConfig = DEFAULT_CONFIG) -> bool:
    return (any(_inside(d.aspect_ratio, band) for band in config.subject_aspect_bands)
            and d.solidity < config.subject_solidity_max
            and d.extent < config.subject_extent_max)


# ══════════════════════════════════════════════════════════════
#  2.  Selection
# ══════════════════════════════════════════════════════════════

def _by_area(descriptors: Sequence[ShapeDescriptor]):
    return sorted(descriptors, key=lambda d: d.area, reverse=True)


def select_reference(descriptors: Sequence[ShapeDescriptor],
                     config: DetectionConfig = DEFAULT_CONFIG) -> Optional[ShapeDescriptor]:
    """
    1. rotated aspect inside the reference band and extent above the minimum;
       pick the one closest to the target aspect (larger wins ties)
    2. otherwise the largest with rotated aspect inside the fallback band
    3. otherwise None
    """
    ranked = _by_area(descriptors)

    candidates = [d for d in ranked
                  if _inside(d.rotated_aspect, config.reference_aspect_band)
                  and d.extent > config.reference_extent_min]
    if candidates:
        best = min(candidates, key=lambda d: abs(d.rotated_aspect - config.target_reference_aspect))
        logger.info("Reference found: #%d aspect %.2f", best.id, best.rotated_aspect)
        return best

    fallback = next((d for d in ranked
                     if _inside(d.rotated_aspect, config.reference_fallback_band)), None)
    if fallback is not None:
        logger.info("Reference fallback: #%d aspect %.2f", fallback.id, fallback.rotated_aspect)
    else:
        logger.info("Reference not found among %d candidate(s)", len(ranked))
    return fallback


def select_subject(descriptors: Sequence[ShapeDescriptor],
                   reference: Optional[ShapeDescriptor] = None,
                   config: DetectionConfig = DEFAULT_CONFIG) -> Optional[ShapeDescriptor]:
    """
    With a reference: largest descriptor other than the reference whose centre
    is within the proximity radius and whose area exceeds the minimum fraction
    of the reference area.  Without one: largest descriptor that is subject shaped.
    """
    ranked = _by_area(descriptors)

    if reference is not None:
        min_area = reference.area * config.min_subject_area_fraction
        candidates = [d for d in ranked
                      if d.id != reference.id
                      and d.distance_to(reference) < config.proximity_radius_px
                      and d.area > min_area]
    else:
        candidates = [d for d in ranked if is_subject_shaped(d, config)]

    if not candidates:
        logger.info("Subject not found (%s reference)", "with" if reference is not None else "without")
        return None

    subject = max(candidates, key=lambda d: d.area)
    logger.info("Subject found: #%d area %d", subject.id, round(subject.area))
    return subject


# ══════════════════════════════════════════════════════════════
#  3.  Classification result
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ClassificationResult:
    descriptors: Tuple[ShapeDescriptor, ...]
    reference: Optional[ShapeDescriptor] = None
    subject: Optional[ShapeDescriptor] = None

    @property
    def reference_found(self) -> bool:
        return self.reference is not None

    @property
    def subject_found(self) -> bool:
        return self.subject is not None


def classify(descriptors: Sequence[ShapeDescriptor],
             config: DetectionConfig = DEFAULT_CONFIG) -> ClassificationResult:
    ranked = tuple(_by_area(descriptors))

    for d in ranked:
        logger.debug(
            "#%d area=%d aspect=%.2f rotAspect=%.2f extent=%.2f solidity=%.2f",
            d.id, round(d.area), d.aspect_ratio, d.rotated_aspect, d.extent, d.solidity,
        )

    reference = select_reference(ranked, config)
    subject   = select_subject(ranked, reference, config)
    return ClassificationResult(descriptors=ranked, reference=reference, subject=subject)
