"""
Module: keywords
Purpose: Keyword, filename and reasoning tables for signal extraction.
Dependencies: mailmind.categories.defaults (Category only)

Pure data. Edit this file to tune vocabulary without touching the scoring
algorithm in signals.py / classifier.py. Keywords are matched lower-case on
token boundaries, so "cv" does not fire inside "cvs-pharmacy".
"""

from __future__ import annotations

import re

from mailmind.categories.defaults import Category, require_exhaustive

# ---------------------------------------------------------------------------
# Category keywords - one signal per distinct keyword per field
# ---------------------------------------------------------------------------

CATEGORY_KEYWORDS: dict[Category, tuple[str, ...]] = {
    # recruitment
    Category.CV_UNSOLICITED: (
        "spontaneous application",
        "unsolicited application",
        "cv",
        "resume",
        "my profile",
        "looking for a new",
        "new challenge",
        "reaching out",
        "my application",
        "please find attached my cv",
        "passionate",
        "experience",
        "skills",
        "apply",
    ),
    Category.CV_JOB_OFFER: (
        "following your job offer",
        "your job posting",
        "job reference",
        "ref:",
        "job ad",
        "job offer",
        "posted position",
        "welcome to the jungle",
        "indeed",
        "linkedin job",
        "in response to",
        "your advertisement",
    ),
    Category.CANDIDATE_FOLLOW_UP: (
        "follow up",
        "follow-up",
        "following up",
        "getting back to you",
        "no news",
        "haven't heard",
        "application sent",
        "a week ago",
        "reminder",
        "not having received",
    ),
    Category.CANDIDATE_REJECTION: (
        "disappointed",
        "decision",
        "negative answer",
        "not selected",
        "i acknowledge",
        "thank you for your feedback",
        "rejection",
    ),
    Category.INTERVIEW_CONFIRMATION: (
        "confirm my attendance",
        "interview",
        "appointment",
        "see you soon",
        "available on",
        "technical test",
        "video call",
        "presentation",
    ),
    Category.CANDIDATE_QUESTION: (
        "question",
        "clarification",
        "more information",
        "salary",
        "remote work",
        "hiring process",
        "next steps",
    ),
    # business
    Category.HOT_PROSPECT: (
        "interested in",
        "demo",
        "demonstration",
        "budget",
        "our needs",
        "solution",
        "sales meeting",
        "discovery call",
    ),
    Category.EXISTING_CLIENT: (
        "client",
        "subscription",
        "renewal",
        "support",
        "feedback",
        "usage",
        "feature",
        "satisfied",
        "our account",
    ),
    Category.PARTNER: (
        "partnership",
        "collaboration",
        "integration",
        "co-marketing",
        "partner",
        "alliance",
        "joint venture",
    ),
    Category.SUPPLIER: (
        "supplier",
        "vendor",
        "service update",
        "maintenance",
        "aws",
        "openai",
        "stripe",
        "vercel",
        "infrastructure",
    ),
    Category.INVOICE_PAYMENT: (
        "invoice",
        "payment",
        "settlement",
        "due date",
        "amount due",
        "receipt",
        "payment confirmation",
        "billing",
    ),
    Category.QUOTE_PROPOSAL: (
        "quote",
        "quotation",
        "estimate",
        "pricing",
        "commercial offer",
        "price",
        "proposal",
        "budget",
    ),
    # communication
    Category.INTERNAL_TEAM: (
        "team",
        "internal",
        "weekly sync",
        "standup",
        "stand-up",
        "meeting",
        "code review",
        "pull request",
        "merge",
        "deploy",
        "time off",
        "hr",
        "all hands",
    ),
    Category.PLATFORM_NOTIFICATION: (
        "linkedin",
        "indeed",
        "welcome to the jungle",
        "notification",
        "alert",
        "your profile",
        "new applicants",
        "profile views",
        "new connection",
    ),
    Category.USEFUL_NEWSLETTER: (
        "trends",
        "insights",
        "guide",
        "report",
        "study",
        "product hunt",
        "tech",
        "industry",
        "best practices",
        "digest",
    ),
    Category.IGNORABLE_NEWSLETTER: (
        "promo",
        "special offer",
        "deal",
        "discount code",
        "-50%",
        "-70%",
        "black friday",
        "free webinar",
        "sign up now",
        "limited time",
    ),
    # undesirable
    Category.OBVIOUS_SPAM: (
        "prince",
        "nigeria",
        "million dollars",
        "congratulations",
        "winner",
        "bitcoin",
        "crypto",
        "urgent!!!",
        "claim now",
        "free money",
        "lottery",
        "inheritance",
        "wire transfer",
    ),
    Category.AD_PROMO: (
        "upgrade",
        "premium",
        "discount",
        "save",
        "% off",
        "sale",
        "limited offer",
        "exclusive",
        "don't miss",
        "act now",
    ),
    Category.AUTOMATED_EMAIL: (
        "no-reply",
        "noreply",
        "do not reply",
        "automated",
        "automatic",
        "system notification",
        "alert resolved",
    ),
    # other - reachable only through fallback
    Category.UNCLASSIFIED: (),
    Category.DOUBTFUL: (),
}
require_exhaustive(CATEGORY_KEYWORDS, "CATEGORY_KEYWORDS")

# ---------------------------------------------------------------------------
# Reasoning phrases - the first one names the category, the second the evidence
# ---------------------------------------------------------------------------

REASONING_PHRASES: dict[Category, tuple[str, str]] = {
    Category.CV_UNSOLICITED: ("Unsolicited application identified", "CV attachment detected"),
    Category.CV_JOB_OFFER: ("Job offer reference mentioned", "Reply to a job posting"),
    Category.CANDIDATE_FOLLOW_UP: ("Follow-up email detected", "Candidate asking for news"),
    Category.CANDIDATE_REJECTION: ("Reply to a rejection", "Candidate acknowledges a decision"),
    Category.INTERVIEW_CONFIRMATION: ("Attendance confirmation", "Interview date mentioned"),
    Category.CANDIDATE_QUESTION: ("Question about the position", "Request for details"),
    Category.HOT_PROSPECT: ("Commercial interest expressed", "Demo or budget mentioned"),
    Category.EXISTING_CLIENT: ("Existing client identified", "Service or support question"),
    Category.PARTNER: ("Partnership proposal", "Collaboration mentioned"),
    Category.SUPPLIER: ("Supplier communication", "Service update"),
    Category.INVOICE_PAYMENT: ("Invoice or payment", "Amount or due date mentioned"),
    Category.QUOTE_PROPOSAL: ("Quote attached", "Commercial proposal"),
    Category.INTERNAL_TEAM: ("Internal sender", "Team communication"),
    Category.PLATFORM_NOTIFICATION: ("Automatic notification", "Known hiring or service platform"),
    Category.USEFUL_NEWSLETTER: ("Professional newsletter", "Informative content"),
    Category.IGNORABLE_NEWSLETTER: ("Promotional newsletter", "Marketing content"),
    Category.OBVIOUS_SPAM: ("Spam indicators", "Unrealistic promises"),
    Category.AD_PROMO: ("Advertising content", "Unsolicited commercial offer"),
    Category.AUTOMATED_EMAIL: ("Automated email", "No-reply system"),
    Category.UNCLASSIFIED: ("Content not identifiable", "Insufficient signal"),
    Category.DOUBTFUL: ("Uncertain classification", "Manual review required"),
}
require_exhaustive(REASONING_PHRASES, "REASONING_PHRASES")

# ---------------------------------------------------------------------------
# Attachment filename families
# ---------------------------------------------------------------------------

# Boundaries are letters only: "CV_Jane.pdf" and "jane-cv-2024.pdf" match, "cvs.pdf" does not
CV_FILENAME_RE = re.compile(
    r"(?<![a-z])(?:cv|resume|résumé|curriculum[-_ ]?vitae|cover[-_ ]?letter|"
    r"motivation[-_ ]?letter|application)(?![a-z])"
)
INVOICE_FILENAME_RE = re.compile(r"(?<![a-z])(?:invoices?|receipts?|bill|billing)(?![a-z])")
QUOTE_FILENAME_RE = re.compile(r"(?<![a-z])(?:quotes?|quotation|estimate|proposal)(?![a-z])")

PDF_EXTENSIONS: frozenset[str] = frozenset({"pdf"})
WORD_EXTENSIONS: frozenset[str] = frozenset({"doc", "docx", "odt"})
DOCUMENT_EXTENSIONS: frozenset[str] = PDF_EXTENSIONS | WORD_EXTENSIONS

# ---------------------------------------------------------------------------
# CV context keywords (light detection). Subject: first hit only; body: first two.
# ---------------------------------------------------------------------------

CV_CONTEXT_KEYWORDS: tuple[str, ...] = (
    "application",
    "position",
    "job offer",
    "internship",
    "apprenticeship",
    "profile",
    "cv attached",
    "attached my cv",
    "attached cv",
    "my background",
    "my skills",
    "my application",
    "job search",
    "resume",
    "cv",
)

# Cheap pre-check: any of these in the subject is enough to bother with light detection
QUICK_SUBJECT_KEYWORDS: tuple[str, ...] = ("application", "cv", "resume", "position")
