"""
Domain models (Pydantic v2) for email triage.

Emails arrive from an external source and are treated as read-only. Sensitive
fields (subject, body, preview, sender address) are hashed in repr and in
redacted() dumps so models can be logged safely.
"""

from __future__ import annotations

from hashlib import sha256
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mailmind.categories.defaults import CATEGORY_GROUPS, Category, CategoryGroup


def _hash_value(value: str) -> str:
    digest = sha256(value.encode("utf-8")).hexdigest()
    return f"hash:{digest[:12]}"


class RedactedModel(BaseModel):
    """Base model that redacts sensitive fields in repr/dumps."""

    model_config = ConfigDict(frozen=True)
    _redact_fields = {"subject", "preview", "body", "sender_email", "sender_name"}

    def _redacted_dump(self) -> dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        for field in self._redact_fields:
            if field in data and isinstance(data[field], str) and data[field]:
                data[field] = _hash_value(data[field])
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._redacted_dump()})"

    def redacted(self) -> dict[str, Any]:
        """Public helper for telemetry-safe dumps."""
        return self._redacted_dump()


class Email(RedactedModel):
    """An inbound email, as handed over by the mail source."""

    id: str
    sender_name: str = ""
    sender_email: str = ""
    subject: str = ""
    preview: str = ""
    body: str = ""
    attachments: tuple[str, ...] = ()
    has_attachment: bool = False

    @field_validator("id")
    @classmethod
    def _id_present(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("email id must not be empty")
        return value

    @model_validator(mode="before")
    @classmethod
    def _derive_has_attachment(cls, data: Any) -> Any:
        """Default has_attachment from the attachment list when not supplied."""
        if isinstance(data, dict) and data.get("has_attachment") is None:
            data = dict(data)
            data["has_attachment"] = bool(data.get("attachments"))
        return data

    @property
    def text(self) -> str:
        """Body when present, otherwise the preview snippet."""
        return self.body or self.preview

    @property
    def effective_attachments(self) -> tuple[str, ...]:
        """Attachment names, honoring the has_attachment flag."""
        return self.attachments if self.has_attachment else ()


class ClassificationResult(BaseModel):
    """
    Outcome of classifying one email.

    `category`/`group` are final (after the doubt rule); `raw_category` is the
    score winner before it, so callers can explain a forced "doubtful".
    """

    model_config = ConfigDict(frozen=True)

    email_id: str
    category: Category
    group: CategoryGroup
    confidence: int = Field(ge=0, le=100)
    is_doubtful: bool
    reasoning: str
    raw_category: Category
    score: int = Field(default=0, ge=0)
    evidence: tuple[str, ...] = ()
    manually_classified: bool = False

    @model_validator(mode="after")
    def _check_consistency(self) -> ClassificationResult:
        if self.is_doubtful and self.category is not Category.DOUBTFUL:
            raise ValueError("doubtful results must carry category 'doubtful'")
        if self.group is not CATEGORY_GROUPS[self.category]:
            raise ValueError(
                f"group {self.group.value!r} does not match category {self.category.value!r}"
            )
        return self
