"""
Redaction helpers for logs and prompts.

- redact(): stable hash for correlating a value without exposing it
- redact_subject(): short prefix + hash, for debug logs
- sanitize_for_prompt(): strip prompt-injection markers from email text
"""

from __future__ import annotations

import re
from hashlib import sha256

INJECTION_PATTERNS = [
    r"ignore\s+(previous|above|all)\s+instructions?",
    r"disregard\s+(previous|above|all)\s+instructions?",
    r"forget\s+(previous|above|all)\s+instructions?",
    r"new\s+instructions?:",
    r"^\s*(system|assistant|user)\s*:",
    r"\[/?INST\]",
    r"<\|im_(start|end)\|>",
]
INJECTION_REGEX = re.compile("|".join(INJECTION_PATTERNS), re.IGNORECASE | re.MULTILINE)


def redact(value: str | None) -> str:
    """Return a stable hash representation of a sensitive string."""
    if not value:
        return "hash:missing"
    digest = sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def redact_subject(subject: str | None, max_length: int = 20) -> str:
    """
    Partially redact an email subject for logging.

    Example:
        "Spontaneous application - Backend developer" ->
        "Spontaneous applicat... (h:3f9a1c)"
    """
    if not subject:
        return "(no subject)"

    visible = subject[:max_length] + "..." if len(subject) > max_length else subject
    digest = sha256(subject.encode("utf-8")).hexdigest()[:6]
    return f"{visible} (h:{digest})"


def sanitize_for_prompt(text: str | None, max_length: int = 8000) -> str:
    """
    Sanitize email or CV text before it goes into an LLM prompt.

    Truncates, neutralises known injection markers and drops template braces
    so the text cannot break str.format() placeholders.
    """
    if not text:
        return ""

    text = text[:max_length]
    text = INJECTION_REGEX.sub("[REDACTED]", text)
    text = re.sub(r"[{}<>|\\]", "", text)
    return text.strip()
