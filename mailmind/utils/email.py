"""
Sender address helpers.
"""

from __future__ import annotations

import re

_ANGLE_RE = re.compile(r"<([^>]+)>")


def extract_email_address(sender: str) -> str:
    """
    Normalize a sender to a bare lowercase address.

    Examples:
        >>> extract_email_address("John Doe <John@Company.com>")
        'john@company.com'

        >>> extract_email_address("not-an-address")
        'not-an-address'
    """
    if not sender:
        return ""

    lowered = sender.lower().strip()
    match = _ANGLE_RE.search(lowered)
    if match:
        lowered = match.group(1).strip()
    return lowered


def extract_domain(sender: str) -> str:
    """
    Domain part of a sender address, or "" when there is none.

    Examples:
        >>> extract_domain("jobs-noreply@linkedin.com")
        'linkedin.com'

        >>> extract_domain("Team <dev@eu.mailmind.io>")
        'eu.mailmind.io'
    """
    address = extract_email_address(sender)
    if "@" not in address:
        return ""
    return address.rsplit("@", 1)[1]


def domain_matches(domain: str, candidates: tuple[str, ...] | list[str]) -> str | None:
    """
    Return the first candidate that equals `domain` or is a parent of it.

    Examples:
        >>> domain_matches("eu.mailmind.io", ("mailmind.io",))
        'mailmind.io'

        >>> domain_matches("notmailmind.io", ("mailmind.io",)) is None
        True
    """
    if not domain:
        return None
    for candidate in candidates:
        if domain == candidate or domain.endswith("." + candidate):
            return candidate
    return None
