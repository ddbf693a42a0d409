"""
foot_extract.py
OpenCV outline extraction: image bytes → BGR array → outlines.

Two passes are available: a fixed binary threshold that picks out a bright
sheet, and a Canny edge pass (dilated) used when the threshold pass finds no
reference.  Outlines come back in findContours order; that index becomes the
descriptor id.
"""

import logging
from typing import List, Tuple

import cv2
import numpy as np

from foot_config import BINARY_THRESHOLD, CANNY_HIGH, CANNY_LOW, DILATE_KERNEL, MAX_ANALYSIS_WIDTH

logger = logging.getLogger(__name__)


def bytes_to_bgr(data: bytes) -> np.ndarray:
    arr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(arr, cv2.IMREAD_COLOR)
    if image is None:
        raise ValueError("Could not decode image data")
    return image


def resize_for_analysis(image: np.ndarray, max_width: int = MAX_ANALYSIS_WIDTH) -> Tuple[np.ndarray, float]:
    """Shrink to max_width (aspect kept). Returns (image, scale)."""
    h, w = image.shape[:2]
    scale = max_width / w
    if scale < 1:
        image = cv2.resize(image, (int(w * scale), int(h * scale)),
                           interpolation=cv2.INTER_AREA)
    else:
        scale = 1.0
    return image, scale


def _gray(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def threshold_outlines(image: np.ndarray, threshold: int = BINARY_THRESHOLD) -> List[np.ndarray]:
    gray = _gray(image)
    _, thresh = cv2.threshold(gray, threshold, 255, cv2.THRESH_BINARY)
    cnts, _ = cv2.findContours(thresh, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    logger.debug("Threshold pass: %d contour(s)", len(cnts))
    return list(cnts)


def edge_outlines(image: np.ndarray, low: int = CANNY_LOW, high: int = CANNY_HIGH,
                  kernel_size: int = DILATE_KERNEL) -> List[np.ndarray]:
    gray  = _gray(image)
    edges = cv2.Canny(gray, low, high)
    kernel = np.ones((kernel_size, kernel_size), np.uint8)
    edges = cv2.dilate(edges, kernel)
    cnts, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    logger.debug("Edge pass: %d contour(s)", len(cnts))
    return list(cnts)
