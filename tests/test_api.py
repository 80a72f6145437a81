"""Integration tests for the FastAPI application.

Uses ``httpx.AsyncClient`` (via ``pytest-asyncio``). Most tests run against
a mocked pipeline; ``TestLivePipeline`` wires the real pipeline over the
in-memory reference fixture.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from omegaconf import DictConfig

from travel_quote.api.app import create_app
from travel_quote.core.exceptions import QuoteComputationError
from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.results import (
    QuoteOutcome,
    QuoteStatus,
    UnderwritingDecision,
    UnderwritingResult,
    ValidationIssue,
    ValidationOutcome,
)

# ---------------------------------------------------------------------------
# App fixtures (no lifespan, no reference loading)
# ---------------------------------------------------------------------------


@pytest.fixture()
def app(test_cfg: DictConfig, mock_pipeline: MagicMock) -> FastAPI:
    """Build the app with the pipeline mocked out."""
    return create_app(test_cfg, pipeline=mock_pipeline)


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def payload(valid_request: QuoteRequest) -> dict[str, Any]:
    return valid_request.model_dump(mode="json", exclude_none=True)


# ═══════════════════════════════════════════════════════════════════════
# Tests
# ═══════════════════════════════════════════════════════════════════════


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health_returns_ok(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}


class TestStatusCodes:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "http_status"),
        [
            (QuoteStatus.SUCCESS, 200),
            (QuoteStatus.REQUIRES_MANUAL_REVIEW, 202),
            (QuoteStatus.VALIDATION_FAILED, 400),
            (QuoteStatus.DECLINED, 422),
        ],
    )
    async def test_outcome_status_maps_to_http_status(
        self,
        client: AsyncClient,
        mock_pipeline: MagicMock,
        payload: dict[str, Any],
        status: QuoteStatus,
        http_status: int,
    ) -> None:
        mock_pipeline.calculate.return_value = QuoteOutcome(status=status)
        resp = await client.post("/api/v1/quotes", json=payload)

        assert resp.status_code == http_status
        assert resp.json()["status"] == status.value

    @pytest.mark.asyncio
    async def test_request_reaches_pipeline(
        self, client: AsyncClient, mock_pipeline: MagicMock, payload: dict[str, Any], valid_request
    ) -> None:
        await client.post("/api/v1/quotes", json=payload)

        mock_pipeline.calculate.assert_called_once()
        (received,) = mock_pipeline.calculate.call_args.args
        assert received == valid_request

    @pytest.mark.asyncio
    async def test_body_carries_outcome(
        self, client: AsyncClient, mock_pipeline: MagicMock, payload: dict[str, Any]
    ) -> None:
        mock_pipeline.calculate.return_value = QuoteOutcome(
            status=QuoteStatus.DECLINED,
            validation=ValidationOutcome(issues=(ValidationIssue(field="x", message="warn", severity="WARNING"),)),
            underwriting=UnderwritingResult(decision=UnderwritingDecision.DECLINED, reason="Too risky"),
        )
        body = (await client.post("/api/v1/quotes", json=payload)).json()

        assert body["underwriting"]["reason"] == "Too risky"
        assert body["validation"]["issues"][0]["severity"] == "WARNING"
        assert body["pricing"] is None


class TestErrors:
    @pytest.mark.asyncio
    async def test_malformed_body_is_a_validation_failure(self, client: AsyncClient, mock_pipeline) -> None:
        resp = await client.post("/api/v1/quotes", json={"person_birth_date": "not-a-date"})

        assert resp.status_code == 400
        body = resp.json()
        assert body["status"] == "VALIDATION_FAILED"
        (issue,) = body["validation"]["issues"]
        assert issue["field"] == "person_birth_date"
        assert issue["code"] == "validation.invalid_format"
        mock_pipeline.calculate.assert_not_called()

    @pytest.mark.asyncio
    async def test_computation_error_is_500(
        self, client: AsyncClient, mock_pipeline: MagicMock, payload: dict[str, Any]
    ) -> None:
        mock_pipeline.calculate.side_effect = QuoteComputationError("pricing")
        resp = await client.post("/api/v1/quotes", json=payload)

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Quote computation failed"}

    @pytest.mark.asyncio
    async def test_unexpected_error_hides_details(
        self, client: AsyncClient, mock_pipeline: MagicMock, payload: dict[str, Any]
    ) -> None:
        mock_pipeline.calculate.side_effect = RuntimeError("secret internals")
        resp = await client.post("/api/v1/quotes", json=payload)

        assert resp.status_code == 500
        assert "secret" not in resp.text


class TestLivePipeline:
    """Requests through the real pipeline, dated relative to the actual day."""

    @pytest_asyncio.fixture()
    async def live_client(self, test_cfg: DictConfig, pipeline) -> AsyncClient:
        transport = ASGITransport(app=create_app(test_cfg, pipeline=pipeline))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

    @staticmethod
    def _quote(**overrides: Any) -> dict[str, Any]:
        start = date.today() + timedelta(days=30)
        body = {
            "person_first_name": "Jane",
            "person_last_name": "Doe",
            "person_birth_date": "1990-01-01",
            "trip_start_date": start.isoformat(),
            "trip_end_date": (start + timedelta(days=14)).isoformat(),
            "country_iso_code": "ES",
            "coverage_level_code": "50000",
        }
        body.update(overrides)
        return body

    @pytest.mark.asyncio
    async def test_approved(self, live_client: AsyncClient) -> None:
        resp = await live_client.post("/api/v1/quotes", json=self._quote())
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "SUCCESS"
        assert body["pricing"]["days"] == 14
        assert body["discounts"]["final_premium"] == body["pricing"]["premium"]

    @pytest.mark.asyncio
    async def test_review(self, live_client: AsyncClient) -> None:
        born = date(date.today().year - 76, 1, 1).isoformat()
        resp = await live_client.post(
            "/api/v1/quotes", json=self._quote(person_birth_date=born, coverage_level_code="200000")
        )
        assert resp.status_code == 202
        assert resp.json()["pricing"] is None

    @pytest.mark.asyncio
    async def test_declined(self, live_client: AsyncClient) -> None:
        resp = await live_client.post("/api/v1/quotes", json=self._quote(country_iso_code="AF"))
        assert resp.status_code == 422
        assert resp.json()["underwriting"]["decision"] == "DECLINED"

    @pytest.mark.asyncio
    async def test_missing_fields(self, live_client: AsyncClient) -> None:
        resp = await live_client.post("/api/v1/quotes", json={})
        assert resp.status_code == 400
        (issue,) = resp.json()["validation"]["issues"]
        assert issue["severity"] == "CRITICAL"
        assert issue["code"] == "validation.not_null"
