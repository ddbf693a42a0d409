"""
foot_shapes.py
Outline → ShapeDescriptor.

A descriptor is the geometric summary the classifiers work on: polygon area,
axis-aligned box, minimum-area rotated box, aspect ratios, extent, solidity.
Outlines outside the accepted area band, or with a zero-sized box, are rejected
(None) instead of raising.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import cv2
import numpy as np

from foot_config import DEFAULT_CONFIG, DetectionConfig, InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class RotatedBox:
    center_x: float
    center_y: float
    width: float
    height: float
    angle: float

    @property
    def long_side(self) -> float:
        return max(self.width, self.height)

    @property
    def short_side(self) -> float:
        return min(self.width, self.height)

    def corners(self) -> np.ndarray:
        """4×2 float32 corner points, in cv2.boxPoints order."""
        rect = ((self.center_x, self.center_y), (self.width, self.height), self.angle)
        return cv2.boxPoints(rect)


@dataclass(frozen=True)
class ShapeDescriptor:
    """
    Immutable geometric summary of one outline.

    `id` is the outline's index in the extraction order; selections are
    compared by id, never by object identity.
    """
    id: int
    area: float
    bounding_box: BoundingBox
    rotated_box: RotatedBox
    aspect_ratio: float
    rotated_aspect: float
    extent: float
    solidity: float
    outline: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    @property
    def center(self) -> Tuple[float, float]:
        return self.bounding_box.center

    def distance_to(self, other: "ShapeDescriptor") -> float:
        (ax, ay), (bx, by) = self.center, other.center
        return float(np.hypot(ax - bx, ay - by))


def area_bounds(image_area: float, config: DetectionConfig = DEFAULT_CONFIG) -> Tuple[float, float]:
    if image_area <= 0:
        raise InvalidConfiguration(f"image area must be positive, got {image_area}")
    return image_area * config.min_area_fraction, image_area * config.max_area_fraction


def build_descriptor(outline, image_area: float, descriptor_id: int = 0,
                     config: DetectionConfig = DEFAULT_CONFIG) -> Optional[ShapeDescriptor]:
    """
    Returns a ShapeDescriptor, or None when the outline is too small, too large
    or geometrically degenerate.
    """
    min_area, max_area = area_bounds(image_area, config)

    pts = np.asarray(outline, dtype=np.float32).reshape(-1, 2)
    if len(pts) < 3:
        logger.debug("outline #%d rejected: %d point(s)", descriptor_id, len(pts))
        return None

    area = float(cv2.contourArea(pts))
    if area < min_area or area > max_area:
        return None

    x0, y0 = pts.min(axis=0)
    x1, y1 = pts.max(axis=0)
    w, h = float(x1 - x0), float(y1 - y0)
    if w <= 0 or h <= 0:
        logger.debug("outline #%d rejected: degenerate bounding box %.1fx%.1f", descriptor_id, w, h)
        return None

    (cx, cy), (rw, rh), angle = cv2.minAreaRect(pts)
    if min(rw, rh) <= 0:
        logger.debug("outline #%d rejected: degenerate rotated box %.1fx%.1f", descriptor_id, rw, rh)
        return None

    hull_area = float(cv2.contourArea(cv2.convexHull(pts)))
    if hull_area <= 0:
        logger.debug("outline #%d rejected: empty convex hull", descriptor_id)
        return None

    bbox = BoundingBox(float(x0), float(y0), w, h)
    return ShapeDescriptor(
        id             = descriptor_id,
        area           = area,
        bounding_box   = bbox,
        rotated_box    = RotatedBox(float(cx), float(cy), float(rw), float(rh), float(angle)),
        aspect_ratio   = w / h,
        rotated_aspect = max(rw, rh) / min(rw, rh),
        extent         = min(area / bbox.area, 1.0),
        solidity       = min(area / hull_area, 1.0),
        outline        = outline,
    )


def build_descriptors(outlines: Iterable, image_width: int, image_height: int,
                      config: DetectionConfig = DEFAULT_CONFIG) -> List[ShapeDescriptor]:
    """All accepted descriptors, largest area first (stable on ties)."""
    image_area = float(image_width) * float(image_height)
    descriptors = []
    total = 0
    for i, outline in enumerate(outlines):
        total += 1
        d = build_descriptor(outline, image_area, descriptor_id=i, config=config)
        if d is not None:
            descriptors.append(d)

    descriptors.sort(key=lambda d: d.area, reverse=True)
    logger.debug("%d of %d outline(s) accepted in area band", len(descriptors), total)
    return descriptors
