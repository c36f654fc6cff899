"""
Centralized policy thresholds for classification and CV detection.

All values are loaded from config/mailmind_policy.yaml; the constants below
are the fallbacks used when the file (or a key) is missing. Engines take a
policy object rather than reading module globals, so tests and callers can
override any value per instance:

    policy = ClassificationPolicy(doubt_threshold=80)
    EmailClassifier(policy=policy)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from mailmind.observability.logging import get_logger

logger = get_logger(__name__)

POLICY_FILE = "mailmind_policy.yaml"


def _load_policy_config() -> dict[str, Any]:
    """
    Load configuration from mailmind_policy.yaml.

    Side Effects:
        - Reads config/mailmind_policy.yaml file from filesystem
    """
    possible_paths = [
        Path(__file__).parent.parent.parent / "config" / POLICY_FILE,
        Path("config") / POLICY_FILE,
    ]

    for config_path in possible_paths:
        if config_path.exists():
            with open(config_path) as f:
                config = yaml.safe_load(f) or {}
                logger.debug("Loaded policy config from %s", config_path)
                return config

    logger.warning("%s not found, using hardcoded defaults", POLICY_FILE)
    return {}


# Load config once at module import time
_POLICY_CONFIG = _load_policy_config()
_CLASSIFICATION_CONFIG = _POLICY_CONFIG.get("classification", {})
_CLASSIFICATION_WEIGHTS = _CLASSIFICATION_CONFIG.get("weights", {})
_UNCERTAINTY_CONFIG = _POLICY_CONFIG.get("uncertainty", {})
_CV_CONFIG = _POLICY_CONFIG.get("cv_detection", {})
_CV_WEIGHTS = _CV_CONFIG.get("weights", {})

# ============================================================================
# CLASSIFICATION
# ============================================================================

# confidence < DOUBT_THRESHOLD => category forced to "doubtful", group "other"
DOUBT_THRESHOLD: int = _CLASSIFICATION_CONFIG.get("doubt_threshold", 70)

# base = min(CONFIDENCE_CAP, BASE_CONFIDENCE + POINTS_PER_SCORE * winning_score)
CONFIDENCE_CAP: int = _CLASSIFICATION_CONFIG.get("confidence_cap", 95)
BASE_CONFIDENCE: int = _CLASSIFICATION_CONFIG.get("base_confidence", 50)
POINTS_PER_SCORE: int = _CLASSIFICATION_CONFIG.get("points_per_score", 8)
NO_SIGNAL_CONFIDENCE: int = _CLASSIFICATION_CONFIG.get("no_signal_confidence", 40)

KEYWORD_WEIGHT: int = _CLASSIFICATION_WEIGHTS.get("keyword", 1)
CV_FILENAME_WEIGHT: int = _CLASSIFICATION_WEIGHTS.get("cv_filename", 4)
DOCUMENT_EXTENSION_WEIGHT: int = _CLASSIFICATION_WEIGHTS.get("document_extension", 1)
INVOICE_FILENAME_WEIGHT: int = _CLASSIFICATION_WEIGHTS.get("invoice_filename", 3)
QUOTE_FILENAME_WEIGHT: int = _CLASSIFICATION_WEIGHTS.get("quote_filename", 3)
INTERNAL_SENDER_WEIGHT: int = _CLASSIFICATION_WEIGHTS.get("internal_sender", 3)
PLATFORM_SENDER_WEIGHT: int = _CLASSIFICATION_WEIGHTS.get("platform_sender", 2)

INTERNAL_DOMAINS: tuple[str, ...] = tuple(
    _CLASSIFICATION_CONFIG.get("internal_domains", ["mailmind.io", "mailmind.fr"])
)
PLATFORM_DOMAINS: tuple[str, ...] = tuple(
    _CLASSIFICATION_CONFIG.get(
        "platform_domains",
        [
            "linkedin.com",
            "indeed.com",
            "welcometothejungle.com",
            "wttj.co",
            "glassdoor.com",
            "stripe.com",
            "vercel.com",
            "amazonaws.com",
            "openai.com",
        ],
    )
)

# ============================================================================
# MODEL UNCERTAINTY
# ============================================================================

UNCERTAINTY_MODE: str = _UNCERTAINTY_CONFIG.get("mode", "random")
UNCERTAINTY_DOUBT_PERCENTAGE: int = _UNCERTAINTY_CONFIG.get("doubt_percentage", 15)
UNCERTAINTY_SEED: int | None = _UNCERTAINTY_CONFIG.get("seed")

# ============================================================================
# CV DETECTION FUNNEL
# ============================================================================

# light confidence >= this => is_likely_cv, full extraction allowed
LIGHT_DETECTION_THRESHOLD: int = _CV_CONFIG.get("light_detection_threshold", 40)
# extraction confidence below this is returned with a "partial" warning
FULL_EXTRACTION_THRESHOLD: int = _CV_CONFIG.get("full_extraction_threshold", 70)
LIGHT_CONFIDENCE_SCALE: int = _CV_CONFIG.get("confidence_scale", 8)
MAX_SUBJECT_SIGNALS: int = _CV_CONFIG.get("max_subject_signals", 1)
MAX_BODY_SIGNALS: int = _CV_CONFIG.get("max_body_signals", 2)
MAX_DISPLAYED_SKILLS: int = _CV_CONFIG.get("max_displayed_skills", 5)
MAX_SUMMARY_LENGTH: int = _CV_CONFIG.get("max_summary_length", 300)

CV_FILENAME_SIGNAL_WEIGHT: int = _CV_WEIGHTS.get("filename", 4)
CV_PDF_WEIGHT: int = _CV_WEIGHTS.get("pdf", 2)
CV_WORD_WEIGHT: int = _CV_WEIGHTS.get("word", 1)
CV_SUBJECT_KEYWORD_WEIGHT: int = _CV_WEIGHTS.get("subject_keyword", 3)
CV_BODY_KEYWORD_WEIGHT: int = _CV_WEIGHTS.get("body_keyword", 2)


# ============================================================================
# POLICY OBJECTS
# ============================================================================


@dataclass(frozen=True)
class ClassificationPolicy:
    """Scoring constants for EmailClassifier and the signal extractor."""

    doubt_threshold: int = DOUBT_THRESHOLD
    confidence_cap: int = CONFIDENCE_CAP
    base_confidence: int = BASE_CONFIDENCE
    points_per_score: int = POINTS_PER_SCORE
    no_signal_confidence: int = NO_SIGNAL_CONFIDENCE
    keyword_weight: int = KEYWORD_WEIGHT
    cv_filename_weight: int = CV_FILENAME_WEIGHT
    document_extension_weight: int = DOCUMENT_EXTENSION_WEIGHT
    invoice_filename_weight: int = INVOICE_FILENAME_WEIGHT
    quote_filename_weight: int = QUOTE_FILENAME_WEIGHT
    internal_sender_weight: int = INTERNAL_SENDER_WEIGHT
    platform_sender_weight: int = PLATFORM_SENDER_WEIGHT
    internal_domains: tuple[str, ...] = field(default=INTERNAL_DOMAINS)
    platform_domains: tuple[str, ...] = field(default=PLATFORM_DOMAINS)

    def base_for_score(self, score: int) -> int:
        """Deterministic base confidence, monotonic in score and capped."""
        if score <= 0:
            return self.no_signal_confidence
        return min(self.confidence_cap, self.base_confidence + self.points_per_score * score)

    def is_doubtful(self, confidence: int) -> bool:
        return confidence < self.doubt_threshold


@dataclass(frozen=True)
class CVDetectionPolicy:
    """Constants for light detection and full-extraction result shaping."""

    light_detection_threshold: int = LIGHT_DETECTION_THRESHOLD
    full_extraction_threshold: int = FULL_EXTRACTION_THRESHOLD
    confidence_scale: int = LIGHT_CONFIDENCE_SCALE
    max_subject_signals: int = MAX_SUBJECT_SIGNALS
    max_body_signals: int = MAX_BODY_SIGNALS
    max_displayed_skills: int = MAX_DISPLAYED_SKILLS
    max_summary_length: int = MAX_SUMMARY_LENGTH
    filename_weight: int = CV_FILENAME_SIGNAL_WEIGHT
    pdf_weight: int = CV_PDF_WEIGHT
    word_weight: int = CV_WORD_WEIGHT
    subject_keyword_weight: int = CV_SUBJECT_KEYWORD_WEIGHT
    body_keyword_weight: int = CV_BODY_KEYWORD_WEIGHT

    def light_confidence(self, total_weight: int) -> int:
        return max(0, min(100, total_weight * self.confidence_scale))

    def is_likely_cv(self, confidence: int) -> bool:
        return confidence >= self.light_detection_threshold


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def get_all_thresholds() -> dict[str, Any]:
    """All thresholds as a dictionary (served by /api/config/thresholds)."""
    return {
        "classification": {
            "doubt_threshold": DOUBT_THRESHOLD,
            "confidence_cap": CONFIDENCE_CAP,
            "no_signal_confidence": NO_SIGNAL_CONFIDENCE,
        },
        "cv_detection": {
            "light_detection_threshold": LIGHT_DETECTION_THRESHOLD,
            "full_extraction_threshold": FULL_EXTRACTION_THRESHOLD,
            "max_displayed_skills": MAX_DISPLAYED_SKILLS,
            "max_summary_length": MAX_SUMMARY_LENGTH,
        },
        "uncertainty": {
            "mode": UNCERTAINTY_MODE,
            "doubt_percentage": UNCERTAINTY_DOUBT_PERCENTAGE,
        },
    }


def validate_thresholds() -> list[str]:
    """
    Check that thresholds are internally consistent.

    Returns:
        List of problems found (empty when the policy is sane). Problems are
        logged as warnings; nothing is raised so a bad YAML edit degrades
        instead of taking the service down.
    """
    problems: list[str] = []

    for name, value in {
        "doubt_threshold": DOUBT_THRESHOLD,
        "confidence_cap": CONFIDENCE_CAP,
        "no_signal_confidence": NO_SIGNAL_CONFIDENCE,
        "light_detection_threshold": LIGHT_DETECTION_THRESHOLD,
        "full_extraction_threshold": FULL_EXTRACTION_THRESHOLD,
    }.items():
        if not 0 <= value <= 100:
            problems.append(f"{name}={value} outside [0, 100]")

    weights = {
        "keyword": KEYWORD_WEIGHT,
        "cv_filename": CV_FILENAME_WEIGHT,
        "document_extension": DOCUMENT_EXTENSION_WEIGHT,
        "invoice_filename": INVOICE_FILENAME_WEIGHT,
        "quote_filename": QUOTE_FILENAME_WEIGHT,
        "internal_sender": INTERNAL_SENDER_WEIGHT,
        "platform_sender": PLATFORM_SENDER_WEIGHT,
        "cv.filename": CV_FILENAME_SIGNAL_WEIGHT,
        "cv.pdf": CV_PDF_WEIGHT,
        "cv.word": CV_WORD_WEIGHT,
        "cv.subject_keyword": CV_SUBJECT_KEYWORD_WEIGHT,
        "cv.body_keyword": CV_BODY_KEYWORD_WEIGHT,
    }
    for name, weight in weights.items():
        if not 1 <= weight <= 5:
            problems.append(f"weight {name}={weight} outside [1, 5]")

    if NO_SIGNAL_CONFIDENCE >= DOUBT_THRESHOLD:
        problems.append("no_signal_confidence >= doubt_threshold: empty emails would not be doubtful")

    if UNCERTAINTY_MODE not in ("random", "hashed", "none"):
        problems.append(f"unknown uncertainty mode {UNCERTAINTY_MODE!r}")

    for problem in problems:
        logger.warning("Policy config problem: %s", problem)
    return problems


validate_thresholds()
