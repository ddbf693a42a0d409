"""
foot_report.py
Package a classification (and measurement, when there is one) for display.

On failure the ranked candidate list is the output: every descriptor with its
ratios and both classification flags, a multi-line text dump and a hint about
which stage failed.  Overlays are drawn on copies of the image.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from foot_classifier import ClassificationResult, is_subject_shaped, looks_like_reference
from foot_config import DEFAULT_CONFIG, DetectionConfig
from foot_shapes import ShapeDescriptor
from foot_sizing import MeasurementResult

logger = logging.getLogger(__name__)


class DetectionStatus(enum.Enum):
    OK = "ok"
    REFERENCE_NOT_FOUND = "reference_not_found"
    SUBJECT_NOT_FOUND = "subject_not_found"


HINTS = {
    DetectionStatus.OK: "",
    DetectionStatus.REFERENCE_NOT_FOUND: (
        "A4 not detected. Check the debug overlay and try better lighting or contrast."
    ),
    DetectionStatus.SUBJECT_NOT_FOUND: (
        "Foot not detected. Check the debug overlay and make sure the foot is next to the A4 sheet."
    ),
}


@dataclass(frozen=True)
class CandidateDiagnostic:
    id: int
    rank: int
    area: float
    aspect_ratio: float
    rotated_aspect: float
    extent: float
    solidity: float
    looks_like_reference: bool
    looks_like_subject: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "id":                   self.id,
            "rank":                 self.rank,
            "area":                 round(self.area, 1),
            "aspect_ratio":         round(self.aspect_ratio, 2),
            "rotated_aspect":       round(self.rotated_aspect, 2),
            "extent":               round(self.extent, 2),
            "solidity":             round(self.solidity, 2),
            "looks_like_reference": self.looks_like_reference,
            "looks_like_subject":   self.looks_like_subject,
        }


@dataclass(frozen=True)
class AnalysisReport:
    status: DetectionStatus
    classification: ClassificationResult
    candidates: Tuple[CandidateDiagnostic, ...]
    measurement: Optional[MeasurementResult] = None

    @property
    def ok(self) -> bool:
        return self.status is DetectionStatus.OK

    @property
    def hint(self) -> str:
        return HINTS[self.status]

    @property
    def reference(self) -> Optional[ShapeDescriptor]:
        return self.classification.reference

    @property
    def subject(self) -> Optional[ShapeDescriptor]:
        return self.classification.subject

    def diagnostic_text(self) -> str:
        lines = [f"Detected {len(self.candidates)} objects:"]
        for c in self.candidates:
            lines.append(
                f"#{c.id}: Area={round(c.area)}, Aspect={c.rotated_aspect:.2f}, Extent={c.extent:.2f}"
            )
        lines.append("")
        ref = self.reference
        if ref is not None:
            lines.append(f"Best A4 match: #{ref.id} (aspect {ref.rotated_aspect:.2f})")
        else:
            lines.append("No A4 found - check aspect ratios (should be ~1.4)")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, object]:
        return {
            "status":       self.status.value,
            "ok":           self.ok,
            "hint":         self.hint,
            "reference_id": self.reference.id if self.reference is not None else None,
            "subject_id":   self.subject.id if self.subject is not None else None,
            "measurement":  self.measurement.rounded() if self.measurement is not None else None,
            "candidates":   [c.to_dict() for c in self.candidates],
        }


def diagnose(descriptors, config: DetectionConfig = DEFAULT_CONFIG) -> List[CandidateDiagnostic]:
    return [
        CandidateDiagnostic(
            id                   = d.id,
            rank                 = rank,
            area                 = d.area,
            aspect_ratio         = d.aspect_ratio,
            rotated_aspect       = d.rotated_aspect,
            extent               = d.extent,
            solidity             = d.solidity,
            looks_like_reference = looks_like_reference(d, config),
            looks_like_subject   = is_subject_shaped(d, config),
        )
        for rank, d in enumerate(descriptors)
    ]


def build_report(classification: ClassificationResult,
                 measurement: Optional[MeasurementResult] = None,
                 config: DetectionConfig = DEFAULT_CONFIG) -> AnalysisReport:
    if not classification.reference_found:
        status = DetectionStatus.REFERENCE_NOT_FOUND
    elif not classification.subject_found:
        status = DetectionStatus.SUBJECT_NOT_FOUND
    else:
        status = DetectionStatus.OK

    if status is not DetectionStatus.OK:
        measurement = None

    report = AnalysisReport(
        status         = status,
        classification = classification,
        candidates     = tuple(diagnose(classification.descriptors, config)),
        measurement    = measurement,
    )
    if not report.ok:
        logger.info("%s\n%s", report.hint, report.diagnostic_text())
    return report


# ══════════════════════════════════════════════════════════════
#  Overlays  (BGR colours)
# ══════════════════════════════════════════════════════════════

REFERENCE_COLOUR = (0, 0, 255)        # red   = A4 candidate
SUBJECT_COLOUR   = (0, 255, 0)        # green = foot candidate
OTHER_COLOUR     = (255, 255, 255)
A4_FINAL_COLOUR  = (241, 102, 99)
FOOT_FINAL_COLOUR = (129, 185, 16)


def _outline_points(d: ShapeDescriptor) -> np.ndarray:
    if d.outline is not None:
        pts = np.asarray(d.outline)
    else:
        b = d.bounding_box
        pts = np.array([[b.x, b.y], [b.x + b.width, b.y],
                        [b.x + b.width, b.y + b.height], [b.x, b.y + b.height]])
    return pts.reshape(-1, 1, 2).astype(np.int32)


def _put_label(vis, text, org, colour, scale=0.45):
    cv2.putText(vis, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), 3)
    cv2.putText(vis, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, colour, 1)


def draw_candidates(image_bgr: np.ndarray, report: AnalysisReport) -> np.ndarray:
    """Every candidate, labelled by id and colour-coded by flag, plus a legend."""
    vis = image_bgr.copy()
    descriptors = {d.id: d for d in report.classification.descriptors}

    for c in report.candidates:
        d = descriptors[c.id]
        if c.looks_like_reference:
            colour, width = REFERENCE_COLOUR, 2
        elif c.looks_like_subject:
            colour, width = SUBJECT_COLOUR, 2
        else:
            colour, width = OTHER_COLOUR, 1

        cv2.polylines(vis, [_outline_points(d)], True, colour, width)

        b = d.bounding_box
        _put_label(vis, f"#{c.id}", (int(b.x) + 3, int(b.y) + 14), colour)
        text = f"#{c.id} A:{round(c.area / 1000)}k R:{c.rotated_aspect:.1f}"
        _put_label(vis, text, (int(b.x), int(b.y + b.height) + 12), colour, scale=0.35)

    # Legend
    cv2.rectangle(vis, (10, 10), (25, 25), REFERENCE_COLOUR, -1)
    _put_label(vis, "= A4 Candidate", (30, 22), (255, 255, 255))
    cv2.rectangle(vis, (10, 35), (25, 50), SUBJECT_COLOUR, -1)
    _put_label(vis, "= Foot Candidate", (30, 47), (255, 255, 255))
    return vis


def draw_results(image_bgr: np.ndarray, report: AnalysisReport) -> np.ndarray:
    """A4 rotated box, foot outline, measurement banner."""
    vis = image_bgr.copy()

    ref = report.reference
    if ref is not None:
        box = ref.rotated_box.corners().reshape(-1, 1, 2).astype(np.int32)
        cv2.polylines(vis, [box], True, A4_FINAL_COLOUR, 4)
        _put_label(vis, "A4", (int(ref.rotated_box.center_x) - 10, int(ref.rotated_box.center_y)),
                   A4_FINAL_COLOUR, scale=0.7)

    foot = report.subject
    if foot is not None:
        cv2.polylines(vis, [_outline_points(foot)], True, FOOT_FINAL_COLOUR, 4)
        b = foot.bounding_box
        _put_label(vis, "FOOT", (int(b.x) + 3, max(int(b.y) - 6, 12)), FOOT_FINAL_COLOUR, scale=0.6)

    m = report.measurement
    if m is not None:
        s = m.sizes
        text = (f"{m.length_mm:.1f} x {m.width_mm:.1f} mm | "
                f"UK {s['uk']:.1f} | US {s['us_men']:.1f} | EU {s['eu']:.1f}")
        cv2.putText(vis, text, (20, 40), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 3)
        cv2.putText(vis, text, (20, 40), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 0, 0), 1)

    return vis
