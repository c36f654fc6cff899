"""
Shape extracted candidate data into a CVExtractionResult.

Shared by every extraction backend so provider output and simulated output
obey the same display rules: at most N highlighted skills, bounded summary,
a "partial extraction" warning under the full-extraction threshold.
"""

from __future__ import annotations

from urllib.parse import quote

from mailmind.cv.types import CVExtractionResult, ExtractedCandidateData, ExtractionFailed
from mailmind.observability.confidence import CVDetectionPolicy

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


def avatar_url(data: ExtractedCandidateData) -> str:
    seed = f"{data.first_name}-{data.last_name}".strip("-") or "candidate"
    return AVATAR_URL.format(seed=quote(seed))


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for item in items:
        cleaned = item.strip()
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            unique.append(cleaned)
    return unique


def truncate_summary(summary: str, max_length: int) -> str:
    summary = " ".join(summary.split())
    if len(summary) <= max_length:
        return summary
    cut = summary[: max_length - 3].rsplit(" ", 1)[0]
    return f"{cut}..."


def build_extraction_result(
    data: ExtractedCandidateData,
    confidence: int,
    policy: CVDetectionPolicy | None = None,
    raw_text: str | None = None,
    photo_url: str | None = None,
) -> CVExtractionResult:
    """
    Normalize `data` and wrap it in a successful result.

    Raises:
        ExtractionFailed: the data holds nothing identifying a candidate
    """
    policy = policy or CVDetectionPolicy()

    all_skills = _dedupe(list(data.all_skills) + list(data.skills))
    highlighted = _dedupe(list(data.skills)) or all_skills
    normalized = data.model_copy(
        update={
            "first_name": data.first_name.strip(),
            "last_name": data.last_name.strip(),
            "skills": highlighted[: policy.max_displayed_skills],
            "all_skills": all_skills,
            "languages": _dedupe(list(data.languages)),
            "summary": truncate_summary(data.summary, policy.max_summary_length),
        }
    )

    if not normalized.full_name and not normalized.position and not all_skills:
        raise ExtractionFailed("No candidate information found in the document.")

    confidence = max(0, min(100, confidence))
    warnings = []
    if confidence < policy.full_extraction_threshold:
        warnings.append(
            f"Partial extraction: confidence {confidence}% is below "
            f"{policy.full_extraction_threshold}%, check the fields manually."
        )
    if not normalized.full_name:
        warnings.append("Candidate name not found.")
    if not normalized.email and not normalized.phone:
        warnings.append("No contact details found.")

    return CVExtractionResult.succeeded(
        data=normalized,
        confidence=confidence,
        raw_text=raw_text,
        photo_url=photo_url or avatar_url(normalized),
        warnings=warnings,
    )
