"""
CV Detection Funnel - orchestrates the two CV stages for one email.

1. Light detection (free, keyword-only) - always runs
2. Full extraction (provider call) - only when light detection clears
   the threshold

The extraction call runs on a worker thread and is bounded by
`timeout_seconds`. A timeout, an extractor error or an unusable answer moves
the state to "failed" with typed errors; nothing is ever guessed. Setting the
cancel event discards the in-flight result: the state is flagged cancelled
and stays at full_extraction. Retrying is the caller's call (see retry()).

Entry point: CVDetectionFunnel.process()
"""

from __future__ import annotations

import concurrent.futures
import threading
import time

from mailmind.config import LLM_TIMEOUT_SECONDS
from mailmind.cv.detection import run_light_detection
from mailmind.cv.types import (
    CandidateFile,
    CVDetectionState,
    CVExtractionResult,
    CVExtractor,
    ExtractionFailed,
    ExtractionTimeout,
    LightCVDetection,
)
from mailmind.observability.confidence import CVDetectionPolicy
from mailmind.observability.logging import get_logger
from mailmind.observability.telemetry import counter, log_event, time_block
from mailmind.storage.models import Email

logger = get_logger(__name__)

NO_CANDIDATE_FILE = "No attachment available for CV extraction."


class CVDetectionFunnel:
    def __init__(
        self,
        extractor: CVExtractor,
        policy: CVDetectionPolicy | None = None,
        timeout_seconds: float = LLM_TIMEOUT_SECONDS,
        poll_interval: float = 0.05,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.extractor = extractor
        self.policy = policy or CVDetectionPolicy()
        self.timeout_seconds = timeout_seconds
        self.poll_interval = poll_interval

    def run_light_detection(self, email: Email) -> LightCVDetection:
        return run_light_detection(email, self.policy)

    def run_full_extraction(self, email: Email, candidate_file: CandidateFile) -> CVExtractionResult:
        """
        Bounded extraction outside the state machine. Failures come back as a
        failed result carrying the typed error (see raise_for_error()).
        """
        result = self._bounded_extract(email, candidate_file, cancel_event=None)
        if result is None:
            raise RuntimeError("CV extraction returned no result without a cancel event")
        return result

    def process(
        self,
        email: Email,
        candidate_file: CandidateFile | None = None,
        cancel_event: threading.Event | None = None,
        state: CVDetectionState | None = None,
    ) -> CVDetectionState:
        """
        Run the funnel for one email and return its final state.

        `candidate_file` defaults to the attachment light detection picked
        (name only, no extracted text).
        """
        state = state or CVDetectionState(email_id=email.id)

        detection = self.run_light_detection(email)
        state.record_light_detection(detection)

        if not detection.should_proceed_to_full_extraction:
            counter("cv.funnel.halted_below_threshold")
            return state

        if cancel_event is not None and cancel_event.is_set():
            state.cancel()
            counter("cv.funnel.cancelled")
            return state

        state.begin_extraction()

        if candidate_file is None and detection.potential_cv_file_name:
            candidate_file = CandidateFile(file_name=detection.potential_cv_file_name)
        if candidate_file is None:
            state.fail(CVExtractionResult.failed(ExtractionFailed(NO_CANDIDATE_FILE)))
            counter("cv.funnel.failed")
            return state

        result = self._bounded_extract(email, candidate_file, cancel_event)
        if result is None:
            state.cancel()
            return state

        if result.success:
            state.complete(result)
            counter("cv.funnel.completed")
        else:
            state.fail(result)
            counter("cv.funnel.failed")

        log_event(
            "cv.funnel.done",
            step=state.step.value,
            light_confidence=detection.confidence,
            extraction_confidence=result.confidence,
            attempt=state.attempt,
        )
        return state

    def retry(
        self,
        state: CVDetectionState,
        email: Email,
        candidate_file: CandidateFile | None = None,
        cancel_event: threading.Event | None = None,
    ) -> CVDetectionState:
        """Re-run a failed email from pending. Raises InvalidTransition otherwise."""
        counter("cv.funnel.retry")
        return self.process(email, candidate_file, cancel_event, state=state.restart())

    def _bounded_extract(
        self,
        email: Email,
        candidate_file: CandidateFile,
        cancel_event: threading.Event | None,
    ) -> CVExtractionResult | None:
        """Extraction with a deadline. Returns None when cancelled."""
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="cv-extract")
        try:
            with time_block("cv.extraction.latency"):
                future = executor.submit(self.extractor.extract, email, candidate_file)
                deadline = time.monotonic() + self.timeout_seconds

                while not future.done():
                    if cancel_event is not None and cancel_event.is_set():
                        future.cancel()
                        counter("cv.funnel.cancelled")
                        return None
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        future.cancel()
                        counter("cv.extraction.timeout")
                        logger.warning(
                            "CV extraction for %s timed out after %.1fs", email.id, self.timeout_seconds
                        )
                        return CVExtractionResult.failed(
                            ExtractionTimeout(
                                f"CV extraction did not finish within {self.timeout_seconds:g} seconds."
                            )
                        )
                    concurrent.futures.wait([future], timeout=min(remaining, self.poll_interval))

                if cancel_event is not None and cancel_event.is_set():
                    counter("cv.funnel.cancelled")
                    return None

                try:
                    return future.result()
                except ExtractionFailed as e:
                    return CVExtractionResult.failed(e)
                except TimeoutError as e:
                    return CVExtractionResult.failed(ExtractionTimeout(f"CV extraction timed out: {e}"))
                except Exception as e:
                    logger.error("CV extractor raised for %s: %s", email.id, e)
                    return CVExtractionResult.failed(
                        ExtractionFailed(f"CV extraction error: {type(e).__name__}.")
                    )
        finally:
            # Do not wait for a hung call; its result is discarded
            executor.shutdown(wait=False, cancel_futures=True)


def default_extractor() -> CVExtractor:
    """Provider-backed extractor when MAILMIND_USE_LLM is on, the simulator otherwise."""
    from mailmind.config import USE_LLM

    if USE_LLM:
        from mailmind.cv.field_extractor import ProviderCVExtractor
        from mailmind.llm.provider import GeminiCompletionProvider

        logger.info("CV extraction backed by Gemini")
        return ProviderCVExtractor(GeminiCompletionProvider(counter_prefix="cv.extractor"))

    from mailmind.cv.simulator import SimulatedCVExtractor

    logger.info("CV extraction backed by the simulator (MAILMIND_USE_LLM is off)")
    return SimulatedCVExtractor()
