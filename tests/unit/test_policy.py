"""Tests for the YAML-backed policy thresholds."""

from mailmind.observability import confidence
from mailmind.observability.confidence import (
    ClassificationPolicy,
    CVDetectionPolicy,
    get_all_thresholds,
    validate_thresholds,
)


class TestPolicyValues:
    def test_reference_thresholds(self):
        """Shipped policy keeps the reference gates."""
        assert confidence.DOUBT_THRESHOLD == 70
        assert confidence.LIGHT_DETECTION_THRESHOLD == 40
        assert confidence.FULL_EXTRACTION_THRESHOLD == 70

    def test_shipped_policy_is_consistent(self):
        assert validate_thresholds() == []

    def test_thresholds_payload(self):
        payload = get_all_thresholds()
        assert payload["classification"]["doubt_threshold"] == 70
        assert payload["cv_detection"]["light_detection_threshold"] == 40

    def test_inconsistent_policy_is_reported(self, monkeypatch):
        """Problems are returned, not raised."""
        monkeypatch.setattr(confidence, "NO_SIGNAL_CONFIDENCE", 80)
        problems = validate_thresholds()
        assert any("no_signal_confidence" in p for p in problems)


class TestPolicyObjects:
    def test_doubt_boundary(self):
        policy = ClassificationPolicy()
        assert policy.is_doubtful(69)
        assert not policy.is_doubtful(70)

    def test_light_confidence_scale_and_cap(self):
        policy = CVDetectionPolicy()
        assert policy.light_confidence(2) == 16
        assert policy.light_confidence(5) == 40
        assert policy.light_confidence(30) == 100
        assert policy.is_likely_cv(40)
        assert not policy.is_likely_cv(39)

    def test_per_instance_override(self):
        assert CVDetectionPolicy(light_detection_threshold=20).is_likely_cv(24)
