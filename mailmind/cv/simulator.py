"""
Simulated CV extraction.

Stands in for the provider when MAILMIND_USE_LLM is off (local dev, demos,
tests). Same contract as ProviderCVExtractor: a successful result or
ExtractionFailed. Known demo files map to fixed profiles, other names are
matched by last name, anything else gets a generated profile.
"""

from __future__ import annotations

import random
import threading

from mailmind.cv.result_builder import build_extraction_result
from mailmind.cv.types import CandidateFile, CVExtractionResult, ExtractedCandidateData, ExtractionFailed
from mailmind.observability.confidence import CVDetectionPolicy
from mailmind.observability.logging import get_logger
from mailmind.observability.telemetry import counter
from mailmind.storage.models import Email

logger = get_logger(__name__)

DEFAULT_FAILURE_RATE = 0.05
UNREADABLE_FORMAT = "Unable to extract CV information: file format not recognized."

MOCK_CVS: dict[str, ExtractedCandidateData] = {
    "CV_Marie_Dupont.pdf": ExtractedCandidateData(
        first_name="Marie",
        last_name="Dupont",
        email="marie.dupont@gmail.com",
        phone="+33 6 12 34 56 78",
        position="Full Stack Developer",
        skills=["React", "Next.js", "TypeScript", "Node.js", "PostgreSQL"],
        all_skills=["React", "Next.js", "TypeScript", "Node.js", "PostgreSQL", "Docker", "AWS", "Git"],
        years_of_experience=4,
        location="Paris, France",
        education="MSc Software Engineering - EPITA",
        languages=["French (native)", "English (fluent)"],
        summary=(
            "Full stack developer with 4 years of experience, React/Next.js on the "
            "front end and Node.js on the back end. Comfortable with Docker and AWS."
        ),
    ),
    "CV_Sophie_Martin_UX.pdf": ExtractedCandidateData(
        first_name="Sophie",
        last_name="Martin",
        email="sophie.martin.pro@gmail.com",
        phone="+33 6 98 76 54 32",
        position="Senior UX Designer",
        skills=["Figma", "User Research", "Design Systems", "Accessibility", "Prototyping"],
        all_skills=["Figma", "User Research", "Design Systems", "Accessibility", "Prototyping", "Sketch"],
        years_of_experience=5,
        location="Lyon, France",
        education="Master in Design - Strate School of Design",
        languages=["French (native)", "English (professional)"],
        summary="UX designer focused on design systems and accessibility, 5 years of product discovery work.",
    ),
    "Thomas_Bernard_CV_2024.pdf": ExtractedCandidateData(
        first_name="Thomas",
        last_name="Bernard",
        email="thomas.bernard@outlook.com",
        phone="+33 6 11 22 33 44",
        position="Digital Project Manager",
        skills=["Project Management", "Scrum", "Leadership", "Budgeting", "Stakeholders"],
        all_skills=["Project Management", "Scrum", "Kanban", "Leadership", "Budgeting", "PMP", "JIRA"],
        years_of_experience=8,
        location="Paris, France",
        education="MBA Digital - HEC Paris",
        languages=["French (native)", "English (bilingual)", "Spanish (intermediate)"],
        summary="PMP-certified digital project manager, 8 years leading teams of up to 15 people.",
    ),
    "CV_Emma_Lefevre_DataScientist.pdf": ExtractedCandidateData(
        first_name="Emma",
        last_name="Lefevre",
        email="emma.lefevre@gmail.com",
        phone="+33 6 77 88 99 00",
        position="Senior Data Scientist",
        skills=["Python", "TensorFlow", "PyTorch", "Spark", "SQL"],
        all_skills=["Python", "TensorFlow", "PyTorch", "Spark", "SQL", "Airflow", "MLflow", "Pandas"],
        years_of_experience=6,
        location="Paris, France",
        education="PhD in Machine Learning - ENS Paris",
        languages=["French (native)", "English (fluent)"],
        summary="Data scientist shipping ML models to production, specialised in NLP and computer vision.",
    ),
}

_FIRST_NAMES = ("Jean", "Claire", "Antoine", "Julie", "Nicolas", "Camille")
_LAST_NAMES = ("Moreau", "Laurent", "Dubois", "Roux", "Fournier", "Girard")
_POSITIONS = ("Developer", "Designer", "Product Manager", "Data Analyst", "DevOps Engineer")
_SKILLS = ("JavaScript", "Python", "React", "Figma", "SQL", "Docker", "AWS", "Agile")


def render_raw_text(data: ExtractedCandidateData) -> str:
    """Plain-text CV rendering kept alongside the structured data."""
    lines = [
        "CURRICULUM VITAE",
        "",
        data.full_name,
        data.position,
        "",
        "CONTACT",
        f"Email: {data.email or '-'}",
        f"Phone: {data.phone or '-'}",
        f"Location: {data.location or '-'}",
        "",
        "SUMMARY",
        data.summary,
        "",
        "SKILLS",
        " - ".join(data.all_skills),
        "",
        "EXPERIENCE",
        f"{data.years_of_experience or 0} years of professional experience",
        "",
        "EDUCATION",
        data.education or "-",
        "",
        "LANGUAGES",
        ", ".join(data.languages),
    ]
    return "\n".join(lines).strip()


class SimulatedCVExtractor:
    """CVExtractor backed by demo profiles and an injectable RNG."""

    def __init__(
        self,
        seed: int | None = None,
        rng: random.Random | None = None,
        failure_rate: float = DEFAULT_FAILURE_RATE,
        policy: CVDetectionPolicy | None = None,
    ):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1]")
        self._rng = rng if rng is not None else random.Random(seed)
        self._lock = threading.Lock()
        self.failure_rate = failure_rate
        self.policy = policy or CVDetectionPolicy()

    def _find_profile(self, file_name: str) -> ExtractedCandidateData | None:
        if file_name in MOCK_CVS:
            return MOCK_CVS[file_name]
        lowered = file_name.lower()
        stem = lowered.rsplit(".", 1)[0]
        for key, data in MOCK_CVS.items():
            if data.last_name.lower() in lowered or (len(stem) >= 4 and stem in key.lower()):
                return data
        return None

    def _generate_profile(self, rng: random.Random) -> ExtractedCandidateData:
        first = rng.choice(_FIRST_NAMES)
        last = rng.choice(_LAST_NAMES)
        years = rng.randint(1, 10)
        return ExtractedCandidateData(
            first_name=first,
            last_name=last,
            email=f"{first.lower()}.{last.lower()}@example.com",
            position=rng.choice(_POSITIONS),
            skills=list(_SKILLS[:5]),
            all_skills=list(_SKILLS),
            years_of_experience=years,
            location="France",
            education="Higher education degree",
            languages=["French", "English"],
            summary=f"Experienced professional with {years} years in the field.",
        )

    def extract(self, email: Email, candidate_file: CandidateFile) -> CVExtractionResult:
        with self._lock:
            fails = self._rng.random() < self.failure_rate
            confidence = self._rng.randint(75, 94)
            data = self._find_profile(candidate_file.file_name) or self._generate_profile(self._rng)

        if fails:
            counter("cv.simulator.failure")
            raise ExtractionFailed(UNREADABLE_FORMAT)

        counter("cv.simulator.success")
        logger.debug("Simulated extraction for %s -> %s", email.id, data.full_name)
        return build_extraction_result(
            data,
            confidence,
            policy=self.policy,
            raw_text=render_raw_text(data),
        )
