"""
Signal extraction - the shared first stage of classification and CV detection.

Pure functions over an Email: no I/O, no shared mutable state, safe to call
from many threads. Every signal carries its own weight; the classifier only
adds weights up.

Two entry points:
- extract_signals(): all signal families, each tagged with the category it supports
- extract_cv_signals(): the CV-relevant subset used by light detection
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from mailmind.categories.defaults import Category
from mailmind.classification.keywords import (
    CATEGORY_KEYWORDS,
    CV_CONTEXT_KEYWORDS,
    CV_FILENAME_RE,
    DOCUMENT_EXTENSIONS,
    INVOICE_FILENAME_RE,
    PDF_EXTENSIONS,
    QUOTE_FILENAME_RE,
    WORD_EXTENSIONS,
)
from mailmind.observability.confidence import ClassificationPolicy, CVDetectionPolicy
from mailmind.storage.models import Email
from mailmind.utils.email import domain_matches, extract_domain, extract_email_address


class SignalType(str, Enum):
    FILENAME = "filename"
    SUBJECT_KEYWORD = "subject-keyword"
    BODY_KEYWORD = "body-keyword"
    ATTACHMENT_KIND = "attachment-kind"
    SENDER_DOMAIN = "sender-domain"


@dataclass(frozen=True)
class Signal:
    """One weighted piece of evidence. `category` is None for CV-funnel signals."""

    type: SignalType
    value: str
    weight: int
    description: str
    category: Category | None = None


def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Match `keyword` on token boundaries (only where the keyword edge is alphanumeric)."""
    prefix = r"(?<![a-z0-9])" if keyword[0].isalnum() else ""
    suffix = r"(?![a-z0-9])" if keyword[-1].isalnum() else ""
    return re.compile(prefix + re.escape(keyword.lower()) + suffix)


# Compiled once, in canonical category order
_CATEGORY_PATTERNS: tuple[tuple[Category, str, re.Pattern[str]], ...] = tuple(
    (category, keyword, keyword_pattern(keyword))
    for category in Category
    for keyword in CATEGORY_KEYWORDS[category]
)
_CV_CONTEXT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (keyword, keyword_pattern(keyword)) for keyword in CV_CONTEXT_KEYWORDS
)

_CV_CATEGORIES = (Category.CV_UNSOLICITED, Category.CV_JOB_OFFER)


def normalize_text(text: str | None) -> str:
    if not text:
        return ""
    return text.lower().replace("’", "'")


def file_extension(file_name: str) -> str:
    name = file_name.lower().strip()
    return name.rsplit(".", 1)[1] if "." in name else ""


def is_cv_filename(file_name: str) -> bool:
    return CV_FILENAME_RE.search(file_name.lower()) is not None


def _keyword_signals(text: str, signal_type: SignalType, field: str, weight: int) -> list[Signal]:
    if not text:
        return []
    signals = []
    for category, keyword, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text):
            signals.append(
                Signal(
                    type=signal_type,
                    value=keyword,
                    weight=weight,
                    description=f'{field} contains "{keyword}"',
                    category=category,
                )
            )
    return signals


def _attachment_signals(email: Email, policy: ClassificationPolicy) -> list[Signal]:
    """Filename families; each family fires at most once per email."""
    families: list[tuple[re.Pattern[str], tuple[Category, ...], int, str]] = [
        (CV_FILENAME_RE, _CV_CATEGORIES, policy.cv_filename_weight, "CV-shaped"),
        (INVOICE_FILENAME_RE, (Category.INVOICE_PAYMENT,), policy.invoice_filename_weight, "invoice-shaped"),
        (QUOTE_FILENAME_RE, (Category.QUOTE_PROPOSAL,), policy.quote_filename_weight, "quote-shaped"),
    ]
    signals: list[Signal] = []
    for pattern, categories, weight, kind in families:
        for attachment in email.effective_attachments:
            extension = file_extension(attachment)
            if extension not in DOCUMENT_EXTENSIONS or not pattern.search(attachment.lower()):
                continue
            for category in categories:
                signals.append(
                    Signal(
                        type=SignalType.FILENAME,
                        value=attachment,
                        weight=weight,
                        description=f"{kind} attachment name: {attachment}",
                        category=category,
                    )
                )
                signals.append(
                    Signal(
                        type=SignalType.ATTACHMENT_KIND,
                        value=extension.upper(),
                        weight=policy.document_extension_weight,
                        description=f"{kind} attachment is a .{extension} document",
                        category=category,
                    )
                )
            break
    return signals


def _sender_signals(email: Email, policy: ClassificationPolicy) -> list[Signal]:
    address = normalize_text(extract_email_address(email.sender_email))
    signals = _keyword_signals(address, SignalType.SENDER_DOMAIN, "sender", policy.keyword_weight)

    domain = extract_domain(address)
    internal = domain_matches(domain, policy.internal_domains)
    if internal:
        signals.append(
            Signal(
                type=SignalType.SENDER_DOMAIN,
                value=internal,
                weight=policy.internal_sender_weight,
                description=f"internal sender domain {internal}",
                category=Category.INTERNAL_TEAM,
            )
        )

    platform = domain_matches(domain, policy.platform_domains)
    if platform:
        for category in (Category.PLATFORM_NOTIFICATION, Category.SUPPLIER):
            signals.append(
                Signal(
                    type=SignalType.SENDER_DOMAIN,
                    value=platform,
                    weight=policy.platform_sender_weight,
                    description=f"known platform sender {platform}",
                    category=category,
                )
            )
    return signals


def extract_signals(email: Email, policy: ClassificationPolicy | None = None) -> list[Signal]:
    """
    Every classification signal for `email`.

    Subject and body are scanned independently; inside one field a keyword
    yields at most one signal however often it repeats. The body field is the
    preview plus the full body, so a preview that duplicates the body does not
    double count.
    """
    policy = policy or ClassificationPolicy()

    subject = normalize_text(email.subject)
    body = normalize_text(f"{email.preview}\n{email.body}")

    signals = _keyword_signals(subject, SignalType.SUBJECT_KEYWORD, "subject", policy.keyword_weight)
    signals += _keyword_signals(body, SignalType.BODY_KEYWORD, "body", policy.keyword_weight)
    signals += _attachment_signals(email, policy)
    signals += _sender_signals(email, policy)
    return signals


def extract_cv_signals(email: Email, policy: CVDetectionPolicy | None = None) -> list[Signal]:
    """
    CV-relevant signals only: CV filenames, PDF/Word attachment kinds,
    CV context keywords in the subject (first hit) and body (first hits up
    to the policy cap).
    """
    policy = policy or CVDetectionPolicy()
    signals: list[Signal] = []

    for attachment in email.effective_attachments:
        if is_cv_filename(attachment):
            signals.append(
                Signal(
                    type=SignalType.FILENAME,
                    value=attachment,
                    weight=policy.filename_weight,
                    description=f"file name looks like a CV: {attachment}",
                )
            )
        extension = file_extension(attachment)
        if extension in PDF_EXTENSIONS:
            signals.append(
                Signal(
                    type=SignalType.ATTACHMENT_KIND,
                    value="PDF",
                    weight=policy.pdf_weight,
                    description="PDF attachment (common CV format)",
                )
            )
        elif extension in WORD_EXTENSIONS:
            signals.append(
                Signal(
                    type=SignalType.ATTACHMENT_KIND,
                    value="Word",
                    weight=policy.word_weight,
                    description="Word document attachment",
                )
            )

    signals += _context_signals(
        normalize_text(email.subject),
        SignalType.SUBJECT_KEYWORD,
        "subject",
        policy.subject_keyword_weight,
        policy.max_subject_signals,
    )
    signals += _context_signals(
        normalize_text(email.text),
        SignalType.BODY_KEYWORD,
        "body",
        policy.body_keyword_weight,
        policy.max_body_signals,
    )
    return signals


def _context_signals(
    text: str, signal_type: SignalType, field: str, weight: int, limit: int
) -> list[Signal]:
    signals: list[Signal] = []
    if not text:
        return signals
    for keyword, pattern in _CV_CONTEXT_PATTERNS:
        if len(signals) >= limit:
            break
        if pattern.search(text):
            signals.append(
                Signal(
                    type=signal_type,
                    value=keyword,
                    weight=weight,
                    description=f'{field} contains "{keyword}"',
                )
            )
    return signals


def total_weight(signals: list[Signal]) -> int:
    return sum(signal.weight for signal in signals)
