"""FastAPI application factory.

``create_app`` builds a fully configured ``FastAPI`` instance with:

* CORS middleware
* Request-logging / exception-handling middleware
* Malformed bodies reported as 400 validation failures
* Quote routes
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from travel_quote.api.middleware import ExceptionHandlerMiddleware, RequestLoggingMiddleware
from travel_quote.api.routes.quotes import router as quotes_router
from travel_quote.logging.setup import setup_logging
from travel_quote.pipelines.factory import create_pipeline
from travel_quote.schemas.results import (
    IssueSeverity,
    QuoteOutcome,
    QuoteStatus,
    ValidationIssue,
    ValidationOutcome,
)

if TYPE_CHECKING:
    from omegaconf import DictConfig

    from travel_quote.pipelines.base import BasePipeline


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Application startup complete")
    yield
    logger.info("Application shutting down")


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unparseable bodies (bad dates, wrong types) like any other validation failure."""
    issues = tuple(
        ValidationIssue(
            field=".".join(str(part) for part in error["loc"] if part != "body") or "body",
            message=error["msg"],
            severity=IssueSeverity.ERROR,
            code="validation.invalid_format",
        )
        for error in exc.errors()
    )
    logger.warning("Malformed quote request: {n} error(s)", n=len(issues))
    outcome = QuoteOutcome(status=QuoteStatus.VALIDATION_FAILED, validation=ValidationOutcome(issues=issues))
    return JSONResponse(status_code=400, content=outcome.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_app(cfg: DictConfig, pipeline: Optional[BasePipeline] = None) -> FastAPI:
    """Build and return a fully configured :class:`FastAPI` application.

    Parameters
    ----------
    cfg:
        The merged Hydra configuration.
    pipeline:
        Pipeline to serve. Built from *cfg* when omitted.

    Returns
    -------
    FastAPI
        Ready-to-run application instance.
    """
    # ── Logging ──────────────────────────────────────────────────────────
    setup_logging(cfg.logging)

    # ── App ──────────────────────────────────────────────────────────────
    app = FastAPI(
        title="Travel Insurance Quote Service",
        description="Validation, pricing, discounts and underwriting for travel insurance quotes",
        version="1.0.0",
        lifespan=_lifespan,
    )
    app.state.cfg = cfg

    # ── Pipeline ─────────────────────────────────────────────────────────
    app.state.pipeline = pipeline or create_pipeline(cfg)

    # ── CORS ─────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.server.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Custom middleware (outermost = first to run) ─────────────────────
    app.add_middleware(ExceptionHandlerMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # ── Errors & routes ──────────────────────────────────────────────────
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(quotes_router, prefix="/api/v1")

    return app
