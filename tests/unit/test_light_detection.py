"""Tests for light CV detection (stage 1 of the funnel)."""

import pytest

from mailmind.cv.detection import has_quick_cv_indicators, run_light_detection, select_potential_cv_file
from mailmind.observability.confidence import CVDetectionPolicy
from mailmind.observability.telemetry import get_counter


class TestRunLightDetection:
    def test_unsolicited_cv_is_likely(self, unsolicited_cv_email):
        """Strong filename + context evidence saturates at 100."""
        detection = run_light_detection(unsolicited_cv_email)
        assert detection.confidence == 100
        assert detection.is_likely_cv
        assert detection.should_proceed_to_full_extraction
        assert detection.potential_cv_file_name == "CV_Marie_Dupont.pdf"

    def test_invoice_pdf_halts(self, invoice_email):
        """A lone PDF scores 2 * 8 = 16, under the gate."""
        detection = run_light_detection(invoice_email)
        assert detection.confidence == 16
        assert not detection.is_likely_cv
        assert not detection.should_proceed_to_full_extraction
        assert detection.potential_cv_file_name == "invoice_2024.pdf"

    def test_threshold_is_inclusive(self, email_factory):
        """Exactly 40 clears the gate."""
        email = email_factory(subject="Application", body="About the position")
        detection = run_light_detection(email)
        assert detection.confidence == 40
        assert detection.is_likely_cv

    def test_just_below_threshold(self, email_factory):
        """A subject keyword alone is 24, not enough."""
        detection = run_light_detection(email_factory(subject="Application"))
        assert detection.confidence == 24
        assert not detection.should_proceed_to_full_extraction

    def test_no_signals(self, email_factory):
        """Nothing CV-related gives confidence 0 and no candidate file."""
        detection = run_light_detection(email_factory(subject="Lunch on Friday?"))
        assert detection.confidence == 0
        assert detection.signals == ()
        assert detection.potential_cv_file_name is None

    def test_policy_threshold_override(self, invoice_email):
        """The gate comes from the policy instance."""
        detection = run_light_detection(invoice_email, CVDetectionPolicy(light_detection_threshold=10))
        assert detection.should_proceed_to_full_extraction

    def test_counters(self, unsolicited_cv_email, invoice_email):
        """Runs and positive verdicts are counted separately."""
        run_light_detection(unsolicited_cv_email)
        run_light_detection(invoice_email)
        assert get_counter("cv.light_detection.run") == 2
        assert get_counter("cv.light_detection.likely") == 1


class TestPotentialFile:
    @pytest.mark.parametrize(
        ("attachments", "expected"),
        [
            (["photo.png", "report.pdf", "CV_Jane.docx"], "CV_Jane.docx"),
            (["photo.png", "report.pdf"], "report.pdf"),
            (["cv.png"], None),
            ([], None),
        ],
    )
    def test_selection_order(self, attachments, expected):
        """CV-shaped document first, else the first PDF."""
        assert select_potential_cv_file(attachments) == expected


class TestQuickIndicators:
    def test_subject_keyword(self, email_factory):
        assert has_quick_cv_indicators(email_factory(subject="Resume - John Smith"))

    def test_cv_attachment(self, email_factory):
        assert has_quick_cv_indicators(email_factory(attachments=["jane_cv.pdf"]))

    def test_nothing(self, email_factory):
        """Unrelated emails are skipped cheaply."""
        assert not has_quick_cv_indicators(email_factory(subject="Lunch plans", attachments=["menu.pdf"]))
