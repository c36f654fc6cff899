"""
Gemini model factory.

Supports two backends:
  1. Vertex AI SDK (production) - uses GOOGLE_CLOUD_PROJECT + service account
  2. google-generativeai (local dev) - uses GOOGLE_API_KEY

The base model is cached; models with a system instruction are built per
call because Gemini binds system instructions to the model instance.
"""

from __future__ import annotations

import os
from functools import lru_cache

from mailmind.infrastructure.settings import GEMINI_LOCATION, GEMINI_MODEL, GOOGLE_CLOUD_PROJECT
from mailmind.observability.logging import get_logger

logger = get_logger(__name__)

# "vertexai" or "genai", set by the first successful get_gemini_model()
_backend: str | None = None


class GeminiInitializationError(RuntimeError):
    """Raised when no Gemini backend can be initialized."""


@lru_cache(maxsize=1)
def get_gemini_model():
    """
    Shared Gemini model without system instruction.

    Tries Vertex AI first, then google-generativeai with GOOGLE_API_KEY.

    Raises:
        GeminiInitializationError: If neither backend is usable
    """
    global _backend
    # Read env fresh: .env may have been loaded after settings was imported
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    location = os.getenv("GEMINI_LOCATION") or GEMINI_LOCATION

    try:
        import vertexai
        from vertexai.generative_models import GenerativeModel

        if project:
            vertexai.init(project=project, location=location)
            model = GenerativeModel(GEMINI_MODEL)
            _backend = "vertexai"
            logger.info(
                "Initialized Gemini model (Vertex AI): project=%s, location=%s, model=%s",
                project,
                location,
                GEMINI_MODEL,
            )
            return model
        logger.info("GOOGLE_CLOUD_PROJECT not set, trying google-generativeai")
    except ImportError:
        logger.info("Vertex AI SDK not installed, trying google-generativeai")

    try:
        import google.generativeai as genai
    except ImportError as e:
        raise GeminiInitializationError(
            "No Gemini SDK available. Install google-cloud-aiplatform or google-generativeai."
        ) from e

    api_key = os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise GeminiInitializationError("Neither GOOGLE_CLOUD_PROJECT nor GOOGLE_API_KEY is set.")

    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(GEMINI_MODEL)
    _backend = "genai"
    logger.info("Initialized Gemini model (google-generativeai): model=%s", GEMINI_MODEL)
    return model


def get_gemini_model_with_options(system_instruction: str | None = None) -> object:
    """Gemini model, optionally bound to a system instruction."""
    if system_instruction is None:
        return get_gemini_model()

    # Sets _backend
    get_gemini_model()

    if _backend == "vertexai":
        from vertexai.generative_models import GenerativeModel

        return GenerativeModel(GEMINI_MODEL, system_instruction=system_instruction)

    import google.generativeai as genai

    return genai.GenerativeModel(GEMINI_MODEL, system_instruction=system_instruction)


def clear_model_cache() -> None:
    """Forget the cached model (tests, credential rotation)."""
    global _backend
    get_gemini_model.cache_clear()
    _backend = None
    logger.info("Cleared Gemini model cache")
