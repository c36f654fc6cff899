"""
Provider-backed full CV extraction - stage 2 of the funnel.

Builds a {role, content} message list from the prompt templates, sends it to
a CompletionProvider and validates the JSON answer. There is no fallback to
guessed data: a provider error, an empty document or an unparseable answer
raises ExtractionFailed (TimeoutError from the provider becomes
ExtractionTimeout).

Cost: one Gemini Flash call per CV that cleared light detection.
"""

from __future__ import annotations

import json
import re

from pydantic import BaseModel, ValidationError, field_validator

from mailmind.cv.result_builder import build_extraction_result
from mailmind.cv.types import (
    CandidateFile,
    CVExtractionResult,
    ExtractedCandidateData,
    ExtractionFailed,
    ExtractionTimeout,
)
from mailmind.llm.prompts import PromptLoader
from mailmind.llm.provider import ChatMessage, CompletionProvider
from mailmind.observability.confidence import CVDetectionPolicy
from mailmind.observability.logging import get_logger
from mailmind.observability.telemetry import counter, log_event
from mailmind.storage.models import Email
from mailmind.utils.redaction import sanitize_for_prompt

logger = get_logger(__name__)

# Default when the model omits its own confidence
DEFAULT_MODEL_CONFIDENCE = 70


class LLMCandidateSchema(BaseModel):
    """Schema for the model's JSON answer."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    skills: list[str] | None = None
    all_skills: list[str] | None = None
    years_of_experience: int | None = None
    location: str | None = None
    education: str | None = None
    languages: list[str] | None = None
    summary: str | None = None
    confidence: int = DEFAULT_MODEL_CONFIDENCE

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> object:
        if value is None:
            return DEFAULT_MODEL_CONFIDENCE
        if isinstance(value, (int, float)):
            return max(0, min(100, int(round(value))))
        return value

    @field_validator("years_of_experience", mode="before")
    @classmethod
    def _non_negative_years(cls, value: object) -> object:
        if isinstance(value, (int, float)) and value < 0:
            return None
        return value

    def to_candidate(self) -> ExtractedCandidateData:
        return ExtractedCandidateData(
            first_name=self.first_name or "",
            last_name=self.last_name or "",
            email=self.email,
            phone=self.phone,
            position=self.position or "",
            skills=self.skills or [],
            all_skills=self.all_skills or [],
            years_of_experience=self.years_of_experience,
            location=self.location,
            education=self.education,
            languages=self.languages or [],
            summary=self.summary or "",
        )


def parse_candidate_response(response_text: str) -> LLMCandidateSchema:
    """
    Parse the model's answer, tolerating markdown code fences.

    Raises:
        ExtractionFailed: not JSON, or JSON that does not fit the schema
    """
    json_text = (response_text or "").strip()
    if json_text.startswith("```"):
        counter("cv.extractor.code_fence")
        json_text = re.sub(r"^```(?:json)?\n?", "", json_text)
        json_text = re.sub(r"\n?```$", "", json_text)

    try:
        data = json.loads(json_text)
        if not isinstance(data, dict):
            raise ValueError("top-level JSON value is not an object")
        return LLMCandidateSchema.model_validate(data)
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        counter("cv.extractor.parse_error")
        logger.warning("Failed to parse CV extraction response: %s", e)
        raise ExtractionFailed("The extraction response could not be parsed.") from e


class ProviderCVExtractor:
    """CVExtractor that delegates the reading to a CompletionProvider."""

    def __init__(
        self,
        provider: CompletionProvider,
        policy: CVDetectionPolicy | None = None,
        prompts: PromptLoader | None = None,
    ):
        self.provider = provider
        self.policy = policy or CVDetectionPolicy()
        self.prompts = prompts or PromptLoader()

    def build_messages(self, email: Email, candidate_file: CandidateFile) -> list[ChatMessage]:
        user_prompt = self.prompts.get_cv_extraction_prompt(
            file_name=sanitize_for_prompt(candidate_file.file_name, max_length=200),
            subject=sanitize_for_prompt(email.subject, max_length=300),
            email_body=sanitize_for_prompt(email.text, max_length=2000),
            cv_text=sanitize_for_prompt(candidate_file.content_text),
        )
        return [
            ChatMessage(role="system", content=self.prompts.get_cv_extraction_system_prompt()),
            ChatMessage(role="user", content=user_prompt),
        ]

    def extract(self, email: Email, candidate_file: CandidateFile) -> CVExtractionResult:
        """
        Raises:
            ExtractionTimeout: the provider timed out
            ExtractionFailed: empty document, provider error, unusable answer
        """
        if not candidate_file.content_text.strip():
            counter("cv.extractor.empty_document")
            raise ExtractionFailed(f"No readable text in {candidate_file.file_name}.")

        messages = self.build_messages(email, candidate_file)
        try:
            response_text = self.provider.complete(messages)
        except TimeoutError as e:
            counter("cv.extractor.timeout")
            raise ExtractionTimeout("The extraction provider timed out.") from e
        except Exception as e:
            counter("cv.extractor.provider_error")
            logger.error("CV extraction provider call failed: %s", e)
            raise ExtractionFailed(f"The extraction provider failed: {type(e).__name__}.") from e

        parsed = parse_candidate_response(response_text)
        result = build_extraction_result(
            parsed.to_candidate(),
            parsed.confidence,
            policy=self.policy,
            raw_text=candidate_file.content_text,
        )
        counter("cv.extractor.success")
        log_event(
            "cv.extractor.complete",
            confidence=result.confidence,
            skills=len(result.data.all_skills) if result.data else 0,
            warnings=len(result.warnings),
        )
        return result
