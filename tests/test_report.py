"""Unit tests for the result/diagnostics reporter and overlays."""
from dataclasses import replace

import numpy as np
import pytest

import foot_report
from foot_classifier import classify
from foot_report import DetectionStatus, build_report, draw_candidates, draw_results
from foot_sizing import measure


@pytest.fixture
def sheet(make_descriptor):
    return make_descriptor(id=0, x=20, y=20, width=210, height=297, area=0.95 * 210 * 297)


@pytest.fixture
def foot(make_descriptor):
    return make_descriptor(id=1, x=280, y=20, width=100, height=260,
                           area=0.7 * 100 * 260, solidity=0.8)


class TestBuildReport:
    """Test suite for build_report."""

    def test_success(self, sheet, foot, config):
        """Both found: measurement kept, flags computed per candidate."""
        classification = classify([sheet, foot], config)
        report = build_report(classification, measure(sheet, foot, config), config)

        assert report.ok
        assert report.status is DetectionStatus.OK
        assert report.hint == ""
        assert report.reference.id == 0 and report.subject.id == 1

        by_id = {c.id: c for c in report.candidates}
        assert by_id[0].looks_like_reference and not by_id[0].looks_like_subject
        assert by_id[1].looks_like_subject and not by_id[1].looks_like_reference
        assert [c.rank for c in report.candidates] == [0, 1]

    def test_reference_not_found(self, foot, config):
        """No A4: ranked candidates and an explanatory hint."""
        report = build_report(classify([foot], config), config=config)

        assert not report.ok
        assert report.status is DetectionStatus.REFERENCE_NOT_FOUND
        assert "A4 not detected" in report.hint
        assert report.measurement is None
        assert report.diagnostic_text().splitlines() == [
            "Detected 1 objects:",
            "#1: Area=18200, Aspect=2.60, Extent=0.70",
            "",
            "No A4 found - check aspect ratios (should be ~1.4)",
        ]

    def test_subject_not_found(self, sheet, config):
        """A4 only: the hint points at the foot, text names the A4 match."""
        report = build_report(classify([sheet], config), config=config)

        assert report.status is DetectionStatus.SUBJECT_NOT_FOUND
        assert "Foot not detected" in report.hint
        assert report.diagnostic_text().splitlines()[-1] == "Best A4 match: #0 (aspect 1.41)"

    def test_measurement_dropped_on_failure(self, sheet, foot, config):
        """A stray measurement is not reported without both selections."""
        report = build_report(classify([sheet], config), measure(sheet, foot, config), config)

        assert report.measurement is None

    def test_empty(self, config):
        """No descriptors: not found, empty candidate list."""
        report = build_report(classify([], config), config=config)

        assert report.status is DetectionStatus.REFERENCE_NOT_FOUND
        assert report.candidates == ()
        assert report.diagnostic_text().startswith("Detected 0 objects:")

    def test_report_is_hashable(self, sheet, foot, config):
        """Frozen reports, measurement included, can be hashed and compared."""
        classification = classify([sheet, foot], config)
        report = build_report(classification, measure(sheet, foot, config), config)
        again = build_report(classification, measure(sheet, foot, config), config)

        assert hash(report) == hash(again)
        assert report == again

    def test_to_dict(self, sheet, foot, config):
        """Serialised view rounds values and refers to selections by id."""
        report = build_report(classify([sheet, foot], config), measure(sheet, foot, config), config)
        out = report.to_dict()

        assert out["status"] == "ok"
        assert out["ok"] is True
        assert out["reference_id"] == 0
        assert out["subject_id"] == 1
        assert out["candidates"][0]["rotated_aspect"] == 1.41
        assert out["candidates"][0]["area"] == round(0.95 * 210 * 297, 1)
        assert out["measurement"]["length_mm"] == round(report.measurement.length_mm, 1)


class TestOverlays:
    """Test suite for overlay drawing."""

    def test_draw_candidates_leaves_input_untouched(self, sheet, foot, config):
        """Overlay is drawn on a copy."""
        image = np.zeros((400, 700, 3), np.uint8)
        report = build_report(classify([sheet, foot], config), config=config)

        vis = draw_candidates(image, report)

        assert vis.shape == image.shape
        assert not image.any()
        assert vis.any()

    def test_candidate_labels_use_ids(self, monkeypatch, sheet, foot, config):
        """Overlay labels name candidates by the same id as the text report."""
        labels = []
        monkeypatch.setattr(foot_report, "_put_label", lambda vis, text, *args, **kwargs: labels.append(text))
        sheet = replace(sheet, id=3)
        foot = replace(foot, id=8)
        report = build_report(classify([sheet, foot], config), config=config)

        draw_candidates(np.zeros((400, 700, 3), np.uint8), report)

        assert "#3" in labels and "#8" in labels
        assert any(t.startswith("#8 A:") for t in labels)
        assert "#0" not in labels and "#1" not in labels
        assert "#3: " in report.diagnostic_text()

    def test_draw_results_leaves_input_untouched(self, sheet, foot, config):
        """Final overlay is drawn on a copy."""
        image = np.zeros((400, 700, 3), np.uint8)
        report = build_report(classify([sheet, foot], config), measure(sheet, foot, config), config)

        vis = draw_results(image, report)

        assert vis.shape == image.shape
        assert not image.any()
        assert vis.any()
