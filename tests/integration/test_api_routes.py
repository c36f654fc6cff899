"""End-to-end tests for the HTTP routes (in-memory store, simulated extraction)."""

import random
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from mailmind.api.app import app
from mailmind.api.routes.categories import set_category_registry
from mailmind.api.routes.classify import set_classifier
from mailmind.api.routes.cv import set_cv_funnel
from mailmind.categories.registry import CategoryRegistry
from mailmind.classification.classifier import EmailClassifier
from mailmind.classification.uncertainty import NoUncertainty
from mailmind.cv.funnel import CVDetectionFunnel
from mailmind.cv.simulator import SimulatedCVExtractor
from mailmind.cv.types import ExtractionFailed, ExtractionTimeout
from mailmind.observability.telemetry import get_counter

CV_EMAIL = {
    "id": "cv-1",
    "sender_name": "Marie Dupont",
    "sender_email": "marie.dupont@gmail.com",
    "subject": "Spontaneous application - Full Stack Developer",
    "body": "Hello, please find attached my CV. I am passionate about web development.",
    "attachments": ["CV_Marie_Dupont.pdf"],
}

INVOICE_EMAIL = {
    "id": "inv-1",
    "sender_email": "billing@acme-supplies.com",
    "subject": "Invoice 2024-113",
    "body": "Please find the invoice attached. Amount due by the due date.",
    "attachments": ["invoice_2024.pdf"],
}


@pytest.fixture
def client():
    """App wired with deterministic engines and a fresh registry."""
    set_classifier(EmailClassifier(uncertainty=NoUncertainty()))
    set_category_registry(CategoryRegistry())
    set_cv_funnel(CVDetectionFunnel(SimulatedCVExtractor(rng=random.Random(5), failure_rate=0.0)))
    return TestClient(app)


def _funnel_with(side_effect):
    extractor = MagicMock()
    extractor.extract.side_effect = side_effect
    set_cv_funnel(CVDetectionFunnel(extractor))


class TestHealthAndConfig:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "MailMind API"

    def test_thresholds(self, client):
        """The UI reads gates from the server, not from constants."""
        body = client.get("/api/config/thresholds").json()
        assert body["thresholds"]["classification"]["doubt_threshold"] == 70
        assert body["thresholds"]["cv_detection"]["light_detection_threshold"] == 40


class TestClassifyRoutes:
    def test_classify_cv(self, client):
        response = client.post("/api/classify", json=CV_EMAIL)
        assert response.status_code == 200
        body = response.json()
        assert body["category"] == "cv_unsolicited"
        assert body["group"] == "recruitment"
        assert body["confidence"] == 95
        assert body["is_doubtful"] is False

    def test_classify_empty_is_doubtful(self, client):
        body = client.post("/api/classify", json={"id": "e-0"}).json()
        assert body["category"] == "doubtful"
        assert body["raw_category"] == "unclassified"

    def test_batch_keeps_order(self, client):
        emails = [CV_EMAIL, INVOICE_EMAIL, {"id": "e-0"}]
        body = client.post("/api/classify/batch", json={"emails": emails}).json()
        assert [r["email_id"] for r in body["results"]] == ["cv-1", "inv-1", "e-0"]
        assert body["doubtful_count"] == 1

    def test_validation_error_is_sanitized(self, client):
        """Bad payloads get field names only."""
        response = client.post("/api/classify", json={"subject": "no id"})
        assert response.status_code == 422
        body = response.json()
        assert body["invalid_fields"] == ["id"]
        assert body["error_count"] == 1
        assert get_counter("api.validation_errors") == 1

    def test_empty_batch_rejected(self, client):
        assert client.post("/api/classify/batch", json={"emails": []}).status_code == 422


class TestCVRoutes:
    def test_light_detection(self, client):
        body = client.post("/api/cv/light-detection", json=INVOICE_EMAIL).json()
        assert body["confidence"] == 16
        assert body["should_proceed_to_full_extraction"] is False
        assert body["signals"][0]["value"] == "PDF"

    def test_process_completes(self, client):
        response = client.post("/api/cv/process", json={"email": CV_EMAIL})
        assert response.status_code == 200
        body = response.json()
        assert body["step"] == "completed"
        assert body["extraction"]["data"]["first_name"] == "Marie"
        assert len(body["extraction"]["data"]["skills"]) <= 5

    def test_process_halts_below_threshold(self, client):
        body = client.post("/api/cv/process", json={"email": INVOICE_EMAIL}).json()
        assert body["step"] == "light_detection"
        assert body["halted_below_threshold"] is True
        assert body["extraction"] is None

    def test_process_failure_is_502(self, client):
        _funnel_with(ExtractionFailed("Unreadable file."))
        response = client.post("/api/cv/process", json={"email": CV_EMAIL})
        assert response.status_code == 502
        assert response.json()["errors"] == ["Unreadable file."]

    def test_process_timeout_is_504(self, client):
        _funnel_with(ExtractionTimeout("too slow"))
        response = client.post("/api/cv/process", json={"email": CV_EMAIL})
        assert response.status_code == 504


class TestCategoryRoutes:
    def test_list(self, client):
        rows = client.get("/api/users/u1/categories").json()
        assert len(rows) == 21
        assert rows[0]["id"] == "cv_unsolicited"

    def test_create_update_delete_custom(self, client):
        created = client.post("/api/users/u1/categories", json={"label": "Alumni", "group": "communication"})
        assert created.status_code == 201
        category_id = created.json()["id"]

        patched = client.patch(f"/api/users/u1/categories/{category_id}", json={"color": "pink"})
        assert patched.json()["color"] == "pink"

        deleted = client.delete(f"/api/users/u1/categories/{category_id}")
        assert deleted.json() == {"category_id": category_id, "removed": True, "hidden": False}
        assert len(client.get("/api/users/u1/categories").json()) == 21

    def test_delete_default_hides(self, client):
        assert client.delete("/api/users/u1/categories/ad_promo").json()["hidden"] is True
        visible = client.get("/api/users/u1/categories", params={"include_hidden": False}).json()
        assert all(row["id"] != "ad_promo" for row in visible)

    def test_delete_system_is_409(self, client):
        assert client.delete("/api/users/u1/categories/doubtful").status_code == 409

    def test_unknown_is_404(self, client):
        response = client.patch("/api/users/u1/categories/ghost", json={"label": "Boo"})
        assert response.status_code == 404

    def test_invalid_color_is_422(self, client):
        response = client.patch("/api/users/u1/categories/partner", json={"color": "chartreuse"})
        assert response.status_code == 422

    def test_reorder(self, client):
        response = client.put(
            "/api/users/u1/categories/order", json={"ordered_ids": ["quote_proposal", "hot_prospect"]}
        )
        assert response.status_code == 200
        business = [row["id"] for row in response.json() if row["group"] == "business"]
        assert business[:2] == ["quote_proposal", "hot_prospect"]

    def test_grouped_and_reset(self, client):
        client.patch("/api/users/u1/categories/partner", json={"label": "Allies"})
        grouped = client.get("/api/users/u1/categories/grouped").json()
        assert [g["group"]["id"] for g in grouped] == [
            "recruitment",
            "business",
            "communication",
            "undesirable",
            "other",
        ]
        assert client.post("/api/users/u1/categories/reset").json() == {"removed_overrides": 1}

    def test_options(self, client):
        body = client.get("/api/categories/options").json()
        assert "slate" in body["colors"]
        assert len(body["groups"]) == 5
