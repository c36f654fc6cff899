"""
Shared pytest fixtures for MailMind tests.

Engines are built with deterministic uncertainty / extraction so assertions
never depend on random draws.
"""

from __future__ import annotations

import random

import pytest

from mailmind.categories.registry import CategoryRegistry
from mailmind.classification.classifier import EmailClassifier
from mailmind.classification.uncertainty import NoUncertainty
from mailmind.cv.simulator import SimulatedCVExtractor
from mailmind.observability.telemetry import reset_counters
from mailmind.storage.models import Email


def make_email(
    email_id: str = "email-1",
    sender_name: str = "Jane Doe",
    sender_email: str = "jane.doe@gmail.com",
    subject: str = "",
    preview: str = "",
    body: str = "",
    attachments: tuple[str, ...] | list[str] = (),
    has_attachment: bool | None = None,
) -> Email:
    """Build an Email with sensible defaults; has_attachment follows attachments."""
    return Email(
        id=email_id,
        sender_name=sender_name,
        sender_email=sender_email,
        subject=subject,
        preview=preview,
        body=body,
        attachments=tuple(attachments),
        has_attachment=has_attachment,
    )


@pytest.fixture
def email_factory():
    return make_email


@pytest.fixture(autouse=True)
def _clean_counters():
    """Counters are process-global; start every test from zero."""
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def classifier() -> EmailClassifier:
    """Classifier without model uncertainty: confidence == base confidence."""
    return EmailClassifier(uncertainty=NoUncertainty(), max_workers=4)


@pytest.fixture
def registry() -> CategoryRegistry:
    return CategoryRegistry()


@pytest.fixture
def simulator() -> SimulatedCVExtractor:
    """Simulated extractor that never fails."""
    return SimulatedCVExtractor(rng=random.Random(7), failure_rate=0.0)


@pytest.fixture
def unsolicited_cv_email() -> Email:
    return make_email(
        email_id="cv-1",
        sender_name="Marie Dupont",
        sender_email="marie.dupont@gmail.com",
        subject="Spontaneous application - Full Stack Developer",
        body="Hello, please find attached my CV. I am passionate about web development.",
        attachments=("CV_Marie_Dupont.pdf",),
    )


@pytest.fixture
def invoice_email() -> Email:
    return make_email(
        email_id="inv-1",
        sender_name="Billing",
        sender_email="billing@acme-supplies.com",
        subject="Invoice 2024-113",
        body="Please find the invoice attached. Amount due by the due date.",
        attachments=("invoice_2024.pdf",),
    )
