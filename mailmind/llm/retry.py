"""Gemini call with retry on transient failures.

Vertex AI exceptions are converted to builtin types so tenacity can retry on
them: DeadlineExceeded -> TimeoutError, ServiceUnavailable/InternalServerError
-> ConnectionError, ResourceExhausted -> OSError. Anything else is raised to
the caller untouched.
"""

from __future__ import annotations

import concurrent.futures
from typing import Any

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from mailmind.config import LLM_MAX_RETRIES, LLM_TIMEOUT_SECONDS
from mailmind.infrastructure.settings import GEMINI_MAX_TOKENS, GEMINI_TEMPERATURE
from mailmind.llm.gemini import get_gemini_model_with_options
from mailmind.observability.logging import get_logger
from mailmind.observability.telemetry import counter

logger = get_logger(__name__)


@retry(
    stop=stop_after_attempt(LLM_MAX_RETRIES),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((TimeoutError, ConnectionError, OSError)),
    reraise=True,
)
def call_llm(
    contents: str | list[dict[str, Any]],
    counter_prefix: str = "llm",
    system_instruction: str | None = None,
    json_output: bool = False,
) -> str:
    """Call Gemini and return the response text.

    Args:
        contents: Prompt text, or a list of {"role", "parts"} turns.
        counter_prefix: Telemetry counter prefix (e.g. "cv.extractor").
        system_instruction: Optional system instruction.
        json_output: Ask for application/json output.

    Raises:
        TimeoutError / ConnectionError / OSError: transient, retried first.
        Exception: anything else, not retried.
    """
    from google.api_core.exceptions import (
        DeadlineExceeded,
        InternalServerError,
        ResourceExhausted,
        ServiceUnavailable,
    )

    model = get_gemini_model_with_options(system_instruction=system_instruction)

    generation_config: dict[str, Any] = {
        "temperature": GEMINI_TEMPERATURE,
        "max_output_tokens": GEMINI_MAX_TOKENS,
    }
    if json_output:
        generation_config["response_mime_type"] = "application/json"

    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(model.generate_content, contents, generation_config=generation_config)
        response = future.result(timeout=LLM_TIMEOUT_SECONDS)
        counter(f"{counter_prefix}.call")
        return response.text
    except concurrent.futures.TimeoutError:
        counter(f"{counter_prefix}.timeout")
        logger.warning("LLM call exceeded %ss, will retry", LLM_TIMEOUT_SECONDS)
        raise TimeoutError(f"LLM call exceeded {LLM_TIMEOUT_SECONDS}s") from None
    except DeadlineExceeded as e:
        counter(f"{counter_prefix}.timeout")
        logger.warning("LLM call hit its deadline, will retry: %s", e)
        raise TimeoutError(f"LLM call timed out: {e}") from e
    except ServiceUnavailable as e:
        counter(f"{counter_prefix}.service_unavailable")
        logger.warning("LLM service unavailable, will retry: %s", e)
        raise ConnectionError(f"LLM service unavailable: {e}") from e
    except ResourceExhausted as e:
        counter(f"{counter_prefix}.rate_limited")
        logger.warning("LLM rate limited (429), will retry: %s", e)
        raise OSError(f"LLM rate limited: {e}") from e
    except InternalServerError as e:
        counter(f"{counter_prefix}.internal_error")
        logger.warning("LLM internal error (500), will retry: %s", e)
        raise ConnectionError(f"LLM internal error: {e}") from e
    finally:
        executor.shutdown(wait=False)
