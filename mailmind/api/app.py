"""FastAPI server for MailMind email triage"""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mailmind.api.routes.categories import router as categories_router
from mailmind.api.routes.categories import set_category_registry
from mailmind.api.routes.classify import router as classify_router
from mailmind.api.routes.classify import set_classifier
from mailmind.api.routes.config import router as config_router
from mailmind.api.routes.cv import router as cv_router
from mailmind.api.routes.cv import set_cv_funnel
from mailmind.api.routes.health import router as health_router
from mailmind.categories.errors import CategoryNotFound, InvalidCategoryInput, SystemCategoryProtected
from mailmind.categories.registry import CategoryRegistry
from mailmind.classification.classifier import EmailClassifier
from mailmind.config import API_HOST, API_PORT, APP_VERSION, ENV
from mailmind.cv.funnel import CVDetectionFunnel, default_extractor
from mailmind.cv.types import ExtractionFailed, ExtractionTimeout
from mailmind.observability.logging import get_logger
from mailmind.observability.telemetry import counter
from mailmind.utils.redaction import redact

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)

app = FastAPI(title="MailMind API", version=APP_VERSION)


# Custom validation error handler to prevent information leakage
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Sanitized 422: field names only, never the validation rules or values.

    Side Effects:
        - Logs detailed validation errors for debugging (with PII redaction)
        - Increments validation error counter for monitoring
    """
    logger.warning("Validation error on %s: %s", redact(str(request.url)), exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


@app.exception_handler(CategoryNotFound)
async def category_not_found_handler(request: Request, exc: CategoryNotFound) -> JSONResponse:
    counter("api.categories.not_found")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(SystemCategoryProtected)
async def system_category_handler(request: Request, exc: SystemCategoryProtected) -> JSONResponse:
    counter("api.categories.protected")
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(InvalidCategoryInput)
async def invalid_category_handler(request: Request, exc: InvalidCategoryInput) -> JSONResponse:
    counter("api.categories.invalid")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "error_count": 1, "invalid_fields": []},
    )


# ExtractionTimeout subclasses ExtractionFailed; Starlette picks the most
# specific handler along the MRO
@app.exception_handler(ExtractionTimeout)
async def extraction_timeout_handler(request: Request, exc: ExtractionTimeout) -> JSONResponse:
    counter("api.cv.timeout")
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content={"detail": "CV extraction timed out", "errors": exc.messages},
    )


@app.exception_handler(ExtractionFailed)
async def extraction_failed_handler(request: Request, exc: ExtractionFailed) -> JSONResponse:
    counter("api.cv.failed")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "CV extraction failed", "errors": exc.messages},
    )


ALLOWED_ORIGINS = [origin for origin in os.getenv("MAILMIND_ALLOWED_ORIGINS", "").split(",") if origin]

# Allow localhost in development only
if ENV == "development":
    ALLOWED_ORIGINS.extend(
        [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

# Initialize services
set_classifier(EmailClassifier())
set_category_registry(CategoryRegistry())
set_cv_funnel(CVDetectionFunnel(default_extractor()))

app.include_router(health_router)
app.include_router(classify_router)
app.include_router(cv_router)
app.include_router(categories_router)
app.include_router(config_router)


@app.get("/")
def root() -> dict[str, Any]:
    return {"service": "MailMind API", "version": APP_VERSION, "docs": "/docs"}


def main() -> None:
    import uvicorn

    logger.info("Starting MailMind API on %s:%d (env=%s)", API_HOST, API_PORT, ENV)
    uvicorn.run("mailmind.api.app:app", host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
