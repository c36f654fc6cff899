"""Classification endpoints.

- POST /api/classify - classify one email
- POST /api/classify/batch - classify up to MAX_EMAILS_PER_BATCH emails
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException

from mailmind.api.models import BatchClassificationResponse, EmailBatch
from mailmind.observability.telemetry import log_event
from mailmind.storage.models import ClassificationResult, Email

if TYPE_CHECKING:
    from mailmind.classification.classifier import EmailClassifier

router = APIRouter(prefix="/api", tags=["classification"])

# Module-level storage for dependencies injected at startup
_classifier: EmailClassifier | None = None


def set_classifier(classifier: EmailClassifier) -> None:
    """Inject the classifier dependency."""
    global _classifier
    _classifier = classifier


def _require_classifier() -> EmailClassifier:
    if _classifier is None:
        raise HTTPException(status_code=500, detail="Classifier not initialized")
    return _classifier


@router.post("/classify", response_model=ClassificationResult)
def classify_email(email: Email) -> ClassificationResult:
    return _require_classifier().classify(email)


@router.post("/classify/batch", response_model=BatchClassificationResponse)
def classify_batch(batch: EmailBatch) -> BatchClassificationResponse:
    results = _require_classifier().classify_batch(batch.emails)
    doubtful = sum(1 for r in results if r.is_doubtful)
    log_event("api.classify.batch", count=len(results), doubtful=doubtful)
    return BatchClassificationResponse(results=results, doubtful_count=doubtful)
