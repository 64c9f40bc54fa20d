"""Article Digest — turns a web article URL into a structured summary.

FastAPI application entry-point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import Settings, settings
from engine.errors import FetchError, ModelError, PipelineError
from engine.pipeline import SummaryPipeline, build_pipeline
from schemas.request import SummarizeRequest
from schemas.response import ArticleSummary, ErrorResponse, HealthResponse

VERSION = "1.0.0"

# ── Logging ────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("digest")


# ── Dependencies ───────────────────────────────────────────────────────

def get_settings() -> Settings:
    return settings


async def get_pipeline(cfg: Settings = Depends(get_settings)) -> AsyncIterator[SummaryPipeline]:
    """A new pipeline per request; its model client is closed afterwards."""
    pipeline = build_pipeline(cfg)
    try:
        yield pipeline
    finally:
        await pipeline.aclose()


async def run_with_retry(
    pipeline: SummaryPipeline,
    url: str,
    *,
    attempts: int,
    backoff: float,
) -> ArticleSummary:
    """Caller-side retry policy around the pipeline.

    Only transient boundary failures (fetch / model) are retried; with
    ``attempts == 1`` the pipeline runs exactly once.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=backoff, max=10),
        retry=retry_if_exception_type((FetchError, ModelError)),
        reraise=True,
    ):
        with attempt:
            if attempt.retry_state.attempt_number > 1:
                logger.info("Retrying %s (attempt %d/%d)", url, attempt.retry_state.attempt_number, attempts)
            summary = await pipeline.run(url)
    return summary


# ── Lifespan ───────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    logger.info(
        "Digest service starting — provider=%s prompt_budget=%d retry_attempts=%d",
        settings.llm_provider,
        settings.max_prompt_chars,
        settings.retry_attempts,
    )
    yield
    logger.info("Digest service shutting down.")


# ── App ────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Article Digest",
    description="Fetches a web article, isolates its text and returns an AI-generated structured summary.",
    version=VERSION,
    lifespan=lifespan,
)

# Parse allowed_origins (comma-separated string → list)
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error handlers ─────────────────────────────────────────────────────

_MISSING_VALUE_ERRORS = {"missing", "string_too_short"}


def _validation_message(errors) -> str:
    """One human-readable line for a rejected request body."""
    if not errors or all(err["type"] in _MISSING_VALUE_ERRORS for err in errors):
        return "articleUrl is required"
    if any(err["type"] == "json_invalid" for err in errors):
        return "Request body must be valid JSON"
    first = next(err for err in errors if err["type"] not in _MISSING_VALUE_ERRORS)
    field = first["loc"][-1] if first["loc"] else "body"
    return f"Invalid value for '{field}': {first['msg']}"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: ARG001
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error=_validation_message(exc.errors())).model_dump(),
    )


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:  # noqa: ARG001
    logger.warning("Pipeline failed at %s stage: %s", exc.stage, exc.message)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=f"Failed to summarize the article. {exc.message}").model_dump(),
    )


# ── Routes ─────────────────────────────────────────────────────────────

@app.get("/health", response_model=HealthResponse)
async def health(cfg: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        service="article-digest",
        version=VERSION,
        llm_provider=cfg.llm_provider,
    )


@app.post(
    "/api/parse",
    response_model=ArticleSummary,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Summarize a web article",
    description="Fetches the article at ``articleUrl``, extracts its main text and "
    "returns a heading, a descriptive paragraph, bullet points and a neutral opinion.",
)
async def parse_article(
    payload: SummarizeRequest,
    pipeline: SummaryPipeline = Depends(get_pipeline),
    cfg: Settings = Depends(get_settings),
) -> ArticleSummary:
    try:
        return await run_with_retry(
            pipeline,
            payload.article_url,
            attempts=cfg.retry_attempts,
            backoff=cfg.retry_backoff,
        )
    except PipelineError:
        raise
    except Exception as exc:
        logger.exception("Pipeline crashed")
        raise PipelineError("An unexpected error occurred.", cause=exc) from exc


# ── Dev runner ─────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=True,
    )
