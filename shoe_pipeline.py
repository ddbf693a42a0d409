"""
shoe_pipeline.py
Photo → foot length/width → shoe size, calibrated against an A4 sheet in frame.

  - Outlines: binary threshold pass, Canny edge pass as fallback
  - Descriptors: area band, boxes, aspect ratios, extent, solidity
  - A4 = rectangular candidate with rotated aspect closest to sqrt(2)
  - Foot = largest candidate near the A4 (within the proximity radius)
  - mm from the A4 long rotated side (297 mm by default)
  - Visualisation = A4 box + foot outline + banner, or a numbered candidate
    overlay with legend when detection fails
"""

import logging
from typing import Optional, Sequence

import numpy as np

from foot_classifier import classify
from foot_config import DEFAULT_CONFIG, DetectionConfig
from foot_extract import edge_outlines, resize_for_analysis, threshold_outlines
from foot_report import AnalysisReport, build_report, draw_candidates, draw_results
from foot_shapes import build_descriptors
from foot_sizing import measure

logger = logging.getLogger(__name__)


class ShoeSizePipeline:
    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = (config or DEFAULT_CONFIG).validate()

    def analyze(self, outlines: Sequence, image_width: int, image_height: int) -> AnalysisReport:
        """Pure core: outlines of one image → report. Builds fresh state each call."""
        descriptors = build_descriptors(outlines, image_width, image_height, self.config)
        classification = classify(descriptors, self.config)

        measurement = None
        if classification.reference_found and classification.subject_found:
            measurement = measure(classification.reference, classification.subject, self.config)

        return build_report(classification, measurement, self.config)

    def predict(self, image_bgr: np.ndarray):
        """
        Runs the whole photo flow:
          1. Resize to the analysis width
          2. Threshold pass → report
          3. Edge pass if no A4 was found
          4. Annotated visualisation
        """
        cfg = self.config
        result = {"ok": False}

        image, scale = resize_for_analysis(image_bgr, cfg.max_analysis_width)
        h, w = image.shape[:2]

        method = "Threshold"
        report = self.analyze(threshold_outlines(image, cfg.binary_threshold), w, h)

        if report.reference is None:
            logger.info("Trying edge detection...")
            method = "Edges (threshold fallback)"
            report = self.analyze(
                edge_outlines(image, cfg.canny_low, cfg.canny_high, cfg.dilate_kernel), w, h
            )

        result.update({"report": report, "method": method, "scale": scale})

        if not report.ok:
            result["error"] = report.hint
            result["vis"] = draw_candidates(image, report)
            return result

        m = report.measurement
        result.update({
            "ok":        True,
            "length_mm": round(m.length_mm, 1),
            "width_mm":  round(m.width_mm, 1),
            "length_cm": round(m.length_cm, 2),
            "mm_per_px": round(1.0 / m.pixels_per_mm, 6),
            "sizes":     {k: round(v, 1) for k, v in m.sizes.items()},
            "vis":       draw_results(image, report),
        })
        return result
