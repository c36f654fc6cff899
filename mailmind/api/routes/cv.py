"""CV funnel endpoints.

- POST /api/cv/light-detection - keyword-only verdict, no model call
- POST /api/cv/process - full funnel; extraction only runs above threshold

A failed extraction surfaces as its typed error (mapped to 502/504 in
app.py), never as a 200 with guessed data.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException

from mailmind.api.models import CVProcessRequest, detection_to_dict, state_to_dict
from mailmind.cv.types import CandidateFile, CVDetectionStep
from mailmind.observability.telemetry import log_event
from mailmind.storage.models import Email

if TYPE_CHECKING:
    from mailmind.cv.funnel import CVDetectionFunnel

router = APIRouter(prefix="/api/cv", tags=["cv"])

_funnel: CVDetectionFunnel | None = None


def set_cv_funnel(funnel: CVDetectionFunnel) -> None:
    """Inject the CV funnel dependency."""
    global _funnel
    _funnel = funnel


def _require_funnel() -> CVDetectionFunnel:
    if _funnel is None:
        raise HTTPException(status_code=500, detail="CV funnel not initialized")
    return _funnel


@router.post("/light-detection")
def light_detection(email: Email) -> dict[str, Any]:
    return detection_to_dict(_require_funnel().run_light_detection(email))


@router.post("/process")
def process_cv(request: CVProcessRequest) -> dict[str, Any]:
    """Run the funnel for one email.

    Raises:
        ExtractionTimeout / ExtractionFailed: extraction ran and failed
    """
    candidate_file = None
    if request.file_name:
        candidate_file = CandidateFile(file_name=request.file_name, content_text=request.content_text)

    state = _require_funnel().process(request.email, candidate_file)
    log_event("api.cv.process", step=state.step.value, attempt=state.attempt)

    if state.step is CVDetectionStep.FAILED and state.extraction is not None:
        state.extraction.raise_for_error()
    return state_to_dict(state)
