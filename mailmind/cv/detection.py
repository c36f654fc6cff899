"""
Light CV detection - stage 1 of the funnel.

Keyword and filename checks only, no model call. Cost: $0. Its verdict
decides whether the expensive extraction stage may run at all.
"""

from __future__ import annotations

from collections.abc import Sequence

from mailmind.classification.keywords import DOCUMENT_EXTENSIONS, PDF_EXTENSIONS, QUICK_SUBJECT_KEYWORDS
from mailmind.classification.signals import (
    extract_cv_signals,
    file_extension,
    is_cv_filename,
    keyword_pattern,
    normalize_text,
    total_weight,
)
from mailmind.cv.types import LightCVDetection
from mailmind.observability.confidence import CVDetectionPolicy
from mailmind.observability.telemetry import counter
from mailmind.storage.models import Email

_QUICK_SUBJECT_PATTERNS = tuple(keyword_pattern(keyword) for keyword in QUICK_SUBJECT_KEYWORDS)


def select_potential_cv_file(attachments: Sequence[str]) -> str | None:
    """First CV-named document, else the first PDF, else None."""
    for name in attachments:
        if is_cv_filename(name) and file_extension(name) in DOCUMENT_EXTENSIONS:
            return name
    for name in attachments:
        if file_extension(name) in PDF_EXTENSIONS:
            return name
    return None


def has_quick_cv_indicators(email: Email) -> bool:
    """Cheapest possible pre-check: a CV-named attachment or a CV word in the subject."""
    if any(is_cv_filename(name) for name in email.effective_attachments):
        return True
    subject = normalize_text(email.subject)
    return any(pattern.search(subject) for pattern in _QUICK_SUBJECT_PATTERNS)


def run_light_detection(email: Email, policy: CVDetectionPolicy | None = None) -> LightCVDetection:
    """
    Score CV likelihood from filename, attachment kind and context keywords.

    confidence = min(100, sum(weights) * scale); the email is a likely CV at
    confidence >= light_detection_threshold. Never raises.
    """
    policy = policy or CVDetectionPolicy()
    signals = extract_cv_signals(email, policy)
    confidence = policy.light_confidence(total_weight(signals))
    likely = policy.is_likely_cv(confidence)

    counter("cv.light_detection.run")
    if likely:
        counter("cv.light_detection.likely")

    return LightCVDetection(
        email_id=email.id,
        is_likely_cv=likely,
        confidence=confidence,
        signals=tuple(signals),
        should_proceed_to_full_extraction=likely,
        potential_cv_file_name=select_potential_cv_file(email.effective_attachments),
    )
