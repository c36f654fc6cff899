"""
Module: defaults
Purpose: The fixed category table - 21 categories, 5 groups, display defaults.
Dependencies: pydantic

Declaration order of `Category` is load-bearing: the classifier breaks score
ties by it. Every per-category table in the package (groups here, keywords
and reasoning phrases in mailmind.classification) is checked at import time
to cover all members exactly once.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict


class CategoryGroup(str, Enum):
    """Top-level buckets. Declaration order is display order."""

    RECRUITMENT = "recruitment"
    BUSINESS = "business"
    COMMUNICATION = "communication"
    UNDESIRABLE = "undesirable"
    OTHER = "other"


class Category(str, Enum):
    """The 21 categories in canonical (tie-break) order."""

    # recruitment
    CV_UNSOLICITED = "cv_unsolicited"
    CV_JOB_OFFER = "cv_job_offer"
    CANDIDATE_FOLLOW_UP = "candidate_follow_up"
    CANDIDATE_REJECTION = "candidate_rejection"
    INTERVIEW_CONFIRMATION = "interview_confirmation"
    CANDIDATE_QUESTION = "candidate_question"
    # business
    HOT_PROSPECT = "hot_prospect"
    EXISTING_CLIENT = "existing_client"
    PARTNER = "partner"
    SUPPLIER = "supplier"
    INVOICE_PAYMENT = "invoice_payment"
    QUOTE_PROPOSAL = "quote_proposal"
    # communication
    INTERNAL_TEAM = "internal_team"
    PLATFORM_NOTIFICATION = "platform_notification"
    USEFUL_NEWSLETTER = "useful_newsletter"
    IGNORABLE_NEWSLETTER = "ignorable_newsletter"
    # undesirable
    OBVIOUS_SPAM = "obvious_spam"
    AD_PROMO = "ad_promo"
    AUTOMATED_EMAIL = "automated_email"
    # other (system)
    UNCLASSIFIED = "unclassified"
    DOUBTFUL = "doubtful"


SYSTEM_CATEGORIES: frozenset[Category] = frozenset({Category.UNCLASSIFIED, Category.DOUBTFUL})


def require_exhaustive(table: Mapping[Category, object], name: str) -> None:
    """Raise if `table` does not have exactly one entry per Category member."""
    missing = [c.value for c in Category if c not in table]
    extra = [str(k) for k in table if not isinstance(k, Category)]
    if missing or extra:
        raise RuntimeError(f"{name} is not exhaustive over Category: missing={missing} extra={extra}")


CATEGORY_GROUPS: dict[Category, CategoryGroup] = {
    Category.CV_UNSOLICITED: CategoryGroup.RECRUITMENT,
    Category.CV_JOB_OFFER: CategoryGroup.RECRUITMENT,
    Category.CANDIDATE_FOLLOW_UP: CategoryGroup.RECRUITMENT,
    Category.CANDIDATE_REJECTION: CategoryGroup.RECRUITMENT,
    Category.INTERVIEW_CONFIRMATION: CategoryGroup.RECRUITMENT,
    Category.CANDIDATE_QUESTION: CategoryGroup.RECRUITMENT,
    Category.HOT_PROSPECT: CategoryGroup.BUSINESS,
    Category.EXISTING_CLIENT: CategoryGroup.BUSINESS,
    Category.PARTNER: CategoryGroup.BUSINESS,
    Category.SUPPLIER: CategoryGroup.BUSINESS,
    Category.INVOICE_PAYMENT: CategoryGroup.BUSINESS,
    Category.QUOTE_PROPOSAL: CategoryGroup.BUSINESS,
    Category.INTERNAL_TEAM: CategoryGroup.COMMUNICATION,
    Category.PLATFORM_NOTIFICATION: CategoryGroup.COMMUNICATION,
    Category.USEFUL_NEWSLETTER: CategoryGroup.COMMUNICATION,
    Category.IGNORABLE_NEWSLETTER: CategoryGroup.COMMUNICATION,
    Category.OBVIOUS_SPAM: CategoryGroup.UNDESIRABLE,
    Category.AD_PROMO: CategoryGroup.UNDESIRABLE,
    Category.AUTOMATED_EMAIL: CategoryGroup.UNDESIRABLE,
    Category.UNCLASSIFIED: CategoryGroup.OTHER,
    Category.DOUBTFUL: CategoryGroup.OTHER,
}
require_exhaustive(CATEGORY_GROUPS, "CATEGORY_GROUPS")

GROUP_ORDER: dict[CategoryGroup, int] = {group: index for index, group in enumerate(CategoryGroup)}


def get_category_group(category: Category | str) -> CategoryGroup:
    """Group of a built-in category. Raises ValueError for unknown ids."""
    return CATEGORY_GROUPS[Category(category)]


class CategoryMetadata(BaseModel):
    """Display metadata for one category, default or user-resolved."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    short_label: str
    group: CategoryGroup
    color: str
    icon: str
    order: int
    is_default: bool = True
    is_system_category: bool = False
    is_hidden: bool = False


class GroupMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: CategoryGroup
    label: str
    icon: str
    color: str
    order: int


GROUP_METADATA: dict[CategoryGroup, GroupMetadata] = {
    CategoryGroup.RECRUITMENT: GroupMetadata(
        id=CategoryGroup.RECRUITMENT, label="Recruitment", icon="Users", color="blue", order=1
    ),
    CategoryGroup.BUSINESS: GroupMetadata(
        id=CategoryGroup.BUSINESS, label="Business", icon="Briefcase", color="emerald", order=2
    ),
    CategoryGroup.COMMUNICATION: GroupMetadata(
        id=CategoryGroup.COMMUNICATION,
        label="Communication",
        icon="MessageSquare",
        color="purple",
        order=3,
    ),
    CategoryGroup.UNDESIRABLE: GroupMetadata(
        id=CategoryGroup.UNDESIRABLE, label="Undesirable", icon="ShieldAlert", color="gray", order=4
    ),
    CategoryGroup.OTHER: GroupMetadata(
        id=CategoryGroup.OTHER, label="Other", icon="MoreHorizontal", color="slate", order=5
    ),
}

# (label, short label, color, icon) per category; order is position within the group
_DISPLAY: dict[Category, tuple[str, str, str, str]] = {
    Category.CV_UNSOLICITED: ("Unsolicited application", "Unsolicited CV", "blue", "FileUser"),
    Category.CV_JOB_OFFER: ("Application to a job offer", "Job offer CV", "indigo", "FileCheck"),
    Category.CANDIDATE_FOLLOW_UP: ("Candidate follow-up", "Follow-up", "cyan", "RotateCcw"),
    Category.CANDIDATE_REJECTION: ("Candidate reply to rejection", "Rejection", "rose", "UserX"),
    Category.INTERVIEW_CONFIRMATION: ("Interview confirmation", "Interview", "teal", "CalendarCheck"),
    Category.CANDIDATE_QUESTION: ("Candidate question", "Question", "sky", "HelpCircle"),
    Category.HOT_PROSPECT: ("Hot prospect", "Prospect", "emerald", "Flame"),
    Category.EXISTING_CLIENT: ("Existing client", "Client", "green", "UserCheck"),
    Category.PARTNER: ("Partner", "Partner", "lime", "Handshake"),
    Category.SUPPLIER: ("Supplier", "Supplier", "amber", "Package"),
    Category.INVOICE_PAYMENT: ("Invoice / payment", "Invoice", "orange", "Receipt"),
    Category.QUOTE_PROPOSAL: ("Quote / proposal", "Quote", "yellow", "FileText"),
    Category.INTERNAL_TEAM: ("Internal team", "Team", "purple", "Users"),
    Category.PLATFORM_NOTIFICATION: ("Platform notification", "Notification", "violet", "Bell"),
    Category.USEFUL_NEWSLETTER: ("Useful newsletter", "Newsletter", "fuchsia", "Newspaper"),
    Category.IGNORABLE_NEWSLETTER: ("Ignorable newsletter", "Low-value news", "pink", "MailMinus"),
    Category.OBVIOUS_SPAM: ("Obvious spam", "Spam", "red", "ShieldX"),
    Category.AD_PROMO: ("Advertising / promotion", "Promo", "gray", "Megaphone"),
    Category.AUTOMATED_EMAIL: ("Automated email", "Automated", "zinc", "Bot"),
    Category.UNCLASSIFIED: ("Unclassified", "Unclassified", "slate", "Inbox"),
    Category.DOUBTFUL: ("Doubtful - needs review", "Doubtful", "amber", "AlertCircle"),
}
require_exhaustive(_DISPLAY, "_DISPLAY")


def _build_defaults() -> tuple[CategoryMetadata, ...]:
    position: dict[CategoryGroup, int] = {}
    rows = []
    for category in Category:
        group = CATEGORY_GROUPS[category]
        position[group] = position.get(group, 0) + 1
        label, short_label, color, icon = _DISPLAY[category]
        rows.append(
            CategoryMetadata(
                id=category.value,
                label=label,
                short_label=short_label,
                group=group,
                color=color,
                icon=icon,
                order=position[group],
                is_default=True,
                is_system_category=category in SYSTEM_CATEGORIES,
            )
        )
    return tuple(rows)


DEFAULT_CATEGORIES: tuple[CategoryMetadata, ...] = _build_defaults()
DEFAULTS_BY_ID: dict[str, CategoryMetadata] = {row.id: row for row in DEFAULT_CATEGORIES}

AVAILABLE_COLORS: tuple[str, ...] = (
    "blue",
    "indigo",
    "cyan",
    "rose",
    "teal",
    "sky",
    "emerald",
    "green",
    "lime",
    "amber",
    "orange",
    "yellow",
    "purple",
    "violet",
    "fuchsia",
    "pink",
    "red",
    "gray",
    "zinc",
    "slate",
)

AVAILABLE_ICONS: tuple[str, ...] = tuple(
    dict.fromkeys([icon for _, _, _, icon in _DISPLAY.values()] + ["Tag", "Folder", "Star", "Heart", "Bookmark"])
)
