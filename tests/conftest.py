"""Pytest configuration and shared fixtures for FootScan.

Provides descriptor factories for classifier/measurement tests and synthetic
OpenCV scenes (A4 sheet + foot) for end-to-end pipeline tests.
"""
import logging
import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from foot_config import DEFAULT_CONFIG
from foot_shapes import BoundingBox, RotatedBox, ShapeDescriptor


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)


# Paper at x 50..349, y 80..503 (inclusive pixels); foot to its right.
PAPER_TOP_LEFT = (50, 80)
PAPER_BOTTOM_RIGHT = (349, 503)
FOOT_POLYGON = np.array([
    (500, 480), (470, 460), (455, 400), (465, 330), (490, 260), (480, 200),
    (470, 140), (490, 105), (530, 100), (570, 110), (595, 140), (600, 200),
    (585, 280), (575, 350), (580, 420), (565, 465), (530, 482),
], dtype=np.int32)


@pytest.fixture
def config():
    """Default detection config."""
    return DEFAULT_CONFIG


@pytest.fixture
def make_descriptor():
    """Factory for hand-built descriptors (no outline attached)."""
    def _make(id=0, x=0.0, y=0.0, width=100.0, height=100.0, area=None,
              rotated=None, solidity=1.0, angle=0.0):
        rw, rh = rotated if rotated is not None else (width, height)
        area = width * height if area is None else area
        bbox = BoundingBox(x, y, width, height)
        cx, cy = bbox.center
        return ShapeDescriptor(
            id=id,
            area=area,
            bounding_box=bbox,
            rotated_box=RotatedBox(cx, cy, rw, rh, angle),
            aspect_ratio=width / height,
            rotated_aspect=max(rw, rh) / min(rw, rh),
            extent=area / (width * height),
            solidity=solidity,
        )
    return _make


@pytest.fixture
def rect_outline():
    """Factory for axis-aligned rectangle outlines."""
    def _make(x, y, w, h):
        return np.array([[x, y], [x + w, y], [x + w, y + h], [x, y + h]], dtype=np.float32)
    return _make


@pytest.fixture
def foot_scene():
    """Dark floor, white A4 sheet, bright foot-shaped blob next to it (800x600)."""
    image = np.full((600, 800, 3), 40, np.uint8)
    cv2.rectangle(image, PAPER_TOP_LEFT, PAPER_BOTTOM_RIGHT, (255, 255, 255), -1)
    cv2.fillPoly(image, [FOOT_POLYGON], (230, 230, 230))
    return image


@pytest.fixture
def grey_sheet_scene():
    """Mid-grey A4 sheet below the binary threshold, no foot."""
    image = np.full((600, 800, 3), 40, np.uint8)
    cv2.rectangle(image, PAPER_TOP_LEFT, PAPER_BOTTOM_RIGHT, (150, 150, 150), -1)
    return image


@pytest.fixture
def blank_scene():
    return np.full((600, 800, 3), 40, np.uint8)


@pytest.fixture
def foot_polygon():
    """Foot outline: box 145x382 px at x 455..600, y 100..482."""
    return FOOT_POLYGON
