"""
Module: types
Purpose: Shared types for the CV detection funnel.
Dependencies: pydantic, mailmind.classification.signals (Signal only)

Leaf module: detection, extractors and the funnel all import from here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from mailmind.classification.signals import Signal
from mailmind.storage.models import Email

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ExtractionFailed(Exception):
    """Full extraction produced no usable data. Carries user-facing messages."""

    def __init__(self, messages: list[str] | str):
        self.messages = [messages] if isinstance(messages, str) else list(messages)
        super().__init__("; ".join(self.messages))


class ExtractionTimeout(ExtractionFailed):
    """The extraction call did not answer within the configured timeout."""


class InvalidTransition(RuntimeError):
    """Illegal CV funnel state change (programming error, not a runtime outcome)."""


# ---------------------------------------------------------------------------
# Stage 1: light detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LightCVDetection:
    """Keyword-only verdict on whether an email carries a CV."""

    email_id: str
    is_likely_cv: bool
    confidence: int
    signals: tuple[Signal, ...]
    should_proceed_to_full_extraction: bool
    potential_cv_file_name: str | None = None


# ---------------------------------------------------------------------------
# Stage 2: full extraction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CandidateFile:
    """The attachment handed to full extraction, with its text already pulled out."""

    file_name: str
    content_text: str = ""
    size_bytes: int | None = None


class ExtractedCandidateData(BaseModel):
    """Structured candidate profile. Only produced by a successful extraction."""

    model_config = ConfigDict(frozen=True)

    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    position: str = ""
    skills: list[str] = Field(default_factory=list)
    all_skills: list[str] = Field(default_factory=list)
    years_of_experience: int | None = Field(default=None, ge=0, le=70)
    location: str | None = None
    education: str | None = None
    languages: list[str] = Field(default_factory=list)
    summary: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class CVExtractionResult:
    """Outcome of full extraction: data on success, error messages otherwise."""

    success: bool
    confidence: int = 0
    data: ExtractedCandidateData | None = None
    raw_text: str | None = None
    photo_url: str | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: ExtractionFailed | None = None

    @classmethod
    def succeeded(
        cls,
        data: ExtractedCandidateData,
        confidence: int,
        raw_text: str | None = None,
        photo_url: str | None = None,
        warnings: list[str] | None = None,
    ) -> CVExtractionResult:
        return cls(
            success=True,
            confidence=confidence,
            data=data,
            raw_text=raw_text,
            photo_url=photo_url,
            warnings=list(warnings or []),
        )

    @classmethod
    def failed(cls, error: ExtractionFailed) -> CVExtractionResult:
        return cls(success=False, confidence=0, errors=list(error.messages), error=error)

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, ExtractionTimeout)

    def raise_for_error(self) -> None:
        """Re-raise the typed extraction error, if any."""
        if self.error is not None:
            raise self.error


class CVExtractor(Protocol):
    """
    Full-extraction backend (provider-backed or simulated).

    Returns a successful CVExtractionResult or raises ExtractionFailed.
    """

    def extract(self, email: Email, candidate_file: CandidateFile) -> CVExtractionResult: ...


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


class CVDetectionStep(str, Enum):
    PENDING = "pending"
    LIGHT_DETECTION = "light_detection"
    FULL_EXTRACTION = "full_extraction"
    COMPLETED = "completed"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[CVDetectionStep, frozenset[CVDetectionStep]] = {
    CVDetectionStep.PENDING: frozenset({CVDetectionStep.LIGHT_DETECTION}),
    CVDetectionStep.LIGHT_DETECTION: frozenset({CVDetectionStep.FULL_EXTRACTION}),
    CVDetectionStep.FULL_EXTRACTION: frozenset({CVDetectionStep.COMPLETED, CVDetectionStep.FAILED}),
    CVDetectionStep.COMPLETED: frozenset(),
    CVDetectionStep.FAILED: frozenset(),
}


@dataclass
class CVDetectionState:
    """
    Per-email funnel state: pending -> light_detection -> full_extraction ->
    completed | failed. Only forward moves are legal, and full_extraction
    requires a light detection that cleared the threshold. A retry after
    failure is a new state (see restart()), never a backward move.
    """

    email_id: str
    step: CVDetectionStep = CVDetectionStep.PENDING
    light_detection: LightCVDetection | None = None
    extraction: CVExtractionResult | None = None
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False
    attempt: int = 1
    history: list[CVDetectionStep] = field(default_factory=lambda: [CVDetectionStep.PENDING])

    def _advance(self, step: CVDetectionStep) -> None:
        if step not in _ALLOWED_TRANSITIONS[self.step]:
            raise InvalidTransition(f"{self.step.value} -> {step.value} is not allowed")
        self.step = step
        self.history.append(step)

    def record_light_detection(self, detection: LightCVDetection) -> None:
        self._advance(CVDetectionStep.LIGHT_DETECTION)
        self.light_detection = detection

    def begin_extraction(self) -> None:
        if self.light_detection is None or not self.light_detection.should_proceed_to_full_extraction:
            raise InvalidTransition("full extraction requires a light detection above threshold")
        self._advance(CVDetectionStep.FULL_EXTRACTION)

    def complete(self, result: CVExtractionResult) -> None:
        self._advance(CVDetectionStep.COMPLETED)
        self.extraction = result

    def fail(self, result: CVExtractionResult) -> None:
        self._advance(CVDetectionStep.FAILED)
        self.extraction = result
        self.errors = list(result.errors)

    def cancel(self) -> None:
        """Drop any in-flight extraction; the state stops where it is."""
        self.cancelled = True

    @property
    def halted_below_threshold(self) -> bool:
        """Resting state: light detection ran and said "not a CV"."""
        return (
            self.step is CVDetectionStep.LIGHT_DETECTION
            and self.light_detection is not None
            and not self.light_detection.should_proceed_to_full_extraction
        )

    @property
    def is_terminal(self) -> bool:
        return (
            self.step in (CVDetectionStep.COMPLETED, CVDetectionStep.FAILED)
            or self.halted_below_threshold
            or self.cancelled
        )

    def restart(self) -> CVDetectionState:
        """Fresh state at pending for a caller-driven retry of a failed run."""
        if self.step is not CVDetectionStep.FAILED:
            raise InvalidTransition(f"only failed runs can be retried (step={self.step.value})")
        return CVDetectionState(email_id=self.email_id, attempt=self.attempt + 1)
