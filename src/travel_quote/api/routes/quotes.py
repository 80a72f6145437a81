"""Quote API routes.

Endpoints
---------
POST /api/v1/quotes
    Accept a ``QuoteRequest`` JSON body, run the pipeline, return the
    ``QuoteOutcome`` with a status code matching its status.

GET  /api/v1/health
    Lightweight health-check.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from travel_quote.core.exceptions import QuoteComputationError
from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.results import QuoteOutcome, QuoteStatus

router = APIRouter()

STATUS_CODES = {
    QuoteStatus.SUCCESS: 200,
    QuoteStatus.REQUIRES_MANUAL_REVIEW: 202,
    QuoteStatus.VALIDATION_FAILED: 400,
    QuoteStatus.DECLINED: 422,
}


# ---------------------------------------------------------------------------
# POST /quotes
# ---------------------------------------------------------------------------

@router.post(
    "/quotes",
    response_model=QuoteOutcome,
    summary="Calculate a travel insurance quote",
    description="Validate, price, discount and underwrite a quote request.",
    responses={
        202: {"model": QuoteOutcome, "description": "Quote requires manual review"},
        400: {"model": QuoteOutcome, "description": "Request failed validation"},
        422: {"model": QuoteOutcome, "description": "Quote declined by underwriting"},
        500: {"description": "Quote computation failed"},
    },
)
async def calculate_quote(quote: QuoteRequest, request: Request) -> JSONResponse:
    pipeline = request.app.state.pipeline

    try:
        outcome: QuoteOutcome = pipeline.calculate(quote)
    except QuoteComputationError as exc:
        logger.error("API: quote computation failed in {stage}", stage=exc.stage)
        return JSONResponse(status_code=500, content={"detail": "Quote computation failed"})

    logger.info("API: quote finished with {status}", status=outcome.status.value)
    return JSONResponse(
        status_code=STATUS_CODES[outcome.status],
        content=outcome.model_dump(mode="json"),
    )


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------

@router.get(
    "/health",
    summary="Health check",
    description="Returns service health status.",
)
async def health() -> dict:
    """Return a lightweight health-check response."""
    return {"status": "healthy"}
