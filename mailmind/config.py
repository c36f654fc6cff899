"""
Runtime configuration for MailMind.

Environment-driven knobs for the LLM path and batch processing. Scoring
thresholds and signal weights are policy, not environment, and live in
config/mailmind_policy.yaml (see mailmind.observability.confidence).
"""

from __future__ import annotations

import os

from mailmind import __version__
from mailmind.infrastructure.settings import (  # noqa: F401
    API_HOST,
    API_PORT,
    DEBUG,
    ENV,
    GEMINI_LOCATION,
    GEMINI_MODEL,
    GOOGLE_CLOUD_PROJECT,
)

APP_VERSION = __version__

# Feature flag: use Gemini for full CV extraction, otherwise the simulator
USE_LLM = os.getenv("MAILMIND_USE_LLM", "false").lower() == "true"

# LLM call configuration
LLM_TIMEOUT_SECONDS = float(os.getenv("MAILMIND_LLM_TIMEOUT", "30"))
LLM_MAX_RETRIES = int(os.getenv("MAILMIND_LLM_MAX_RETRIES", "3"))

# Batch classification
LLM_MAX_WORKERS = int(os.getenv("MAILMIND_LLM_MAX_WORKERS", "8"))
MAX_EMAILS_PER_BATCH = int(os.getenv("MAILMIND_MAX_EMAILS_PER_BATCH", "100"))
