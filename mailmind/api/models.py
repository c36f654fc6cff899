"""Pydantic request/response models for the MailMind API.

Engine types (Email, ClassificationResult, CategoryMetadata) are pydantic
already and are used as-is; the funnel's dataclasses are flattened here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from mailmind.categories.defaults import CategoryGroup
from mailmind.classification.signals import Signal
from mailmind.config import MAX_EMAILS_PER_BATCH
from mailmind.cv.types import CVDetectionState, CVExtractionResult, LightCVDetection
from mailmind.storage.models import ClassificationResult, Email

# =============================================================================
# REQUESTS
# =============================================================================


class EmailBatch(BaseModel):
    emails: list[Email] = Field(min_length=1, max_length=MAX_EMAILS_PER_BATCH)


class CVProcessRequest(BaseModel):
    """An email plus, optionally, the attachment text to extract from."""

    email: Email
    file_name: str | None = Field(default=None, max_length=255)
    content_text: str = Field(default="", max_length=200_000)


class CategoryCreate(BaseModel):
    label: str = Field(min_length=1, max_length=50)
    group: CategoryGroup = CategoryGroup.OTHER
    color: str = "slate"
    icon: str = "Tag"


class CategoryUpdate(BaseModel):
    """Partial update; omitted fields are left untouched."""

    label: str | None = Field(default=None, min_length=1, max_length=50)
    color: str | None = None
    display_order: int | None = Field(default=None, ge=0)
    is_hidden: bool | None = None


class CategoryOrder(BaseModel):
    ordered_ids: list[str] = Field(min_length=1)


# =============================================================================
# RESPONSES
# =============================================================================


class BatchClassificationResponse(BaseModel):
    results: list[ClassificationResult]
    doubtful_count: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    error_count: int = 1
    invalid_fields: list[str] = []


def signal_to_dict(signal: Signal) -> dict[str, Any]:
    return {
        "type": signal.type.value,
        "value": signal.value,
        "weight": signal.weight,
        "description": signal.description,
        "category": signal.category.value if signal.category else None,
    }


def detection_to_dict(detection: LightCVDetection) -> dict[str, Any]:
    return {
        "email_id": detection.email_id,
        "is_likely_cv": detection.is_likely_cv,
        "confidence": detection.confidence,
        "signals": [signal_to_dict(s) for s in detection.signals],
        "should_proceed_to_full_extraction": detection.should_proceed_to_full_extraction,
        "potential_cv_file_name": detection.potential_cv_file_name,
    }


def extraction_to_dict(result: CVExtractionResult) -> dict[str, Any]:
    return {
        "success": result.success,
        "confidence": result.confidence,
        "data": result.data.model_dump() if result.data else None,
        "raw_text": result.raw_text,
        "photo_url": result.photo_url,
        "errors": list(result.errors),
        "warnings": list(result.warnings),
    }


def state_to_dict(state: CVDetectionState) -> dict[str, Any]:
    return {
        "email_id": state.email_id,
        "step": state.step.value,
        "halted_below_threshold": state.halted_below_threshold,
        "cancelled": state.cancelled,
        "attempt": state.attempt,
        "history": [step.value for step in state.history],
        "light_detection": detection_to_dict(state.light_detection) if state.light_detection else None,
        "extraction": extraction_to_dict(state.extraction) if state.extraction else None,
        "errors": list(state.errors),
    }
