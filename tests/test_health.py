"""
Tests for health probes, metrics exposition and error body shape
"""
import pytest
from httpx import AsyncClient, ASGITransport

from conftest import insert_campaign
from fundflow.main import app


class TestHealth:

    @pytest.mark.asyncio
    async def test_liveness(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_readiness_pings_database(self, client):
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"


class TestMetrics:

    @pytest.mark.asyncio
    async def test_request_metrics_use_route_template(self, client):
        await client.get("/campaigns/some-id")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert 'endpoint="/campaigns/{campaign_id}"' in response.text
        assert "donations_recorded_total" in response.text


class TestErrorBodies:

    @pytest.mark.asyncio
    async def test_not_found_body_shape(self, client):
        response = await client.get("/campaigns/some-id")

        assert response.status_code == 404
        assert response.json() == {"message": "Campaign not found or not approved", "error": "NotFoundError"}

    @pytest.mark.asyncio
    async def test_validation_error_lists_fields(self, client):
        response = await client.post("/auth/login", json={"email": "x@example.com"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert any("password" in error["loc"] for error in body["details"])

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_internal_error(self, client, db_session, creator, payment_client):
        _, user = creator
        campaign = insert_campaign(db_session, user["id"])
        payment_client.create_payment_intent.side_effect = RuntimeError("unexpected failure")

        # Server errors are re-raised to the transport after the response is sent
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
            response = await raw_client.post(
                "/donations/create-payment-intent",
                json={"amount": 10, "campaign_id": campaign.id},
            )

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error", "error": "InternalError"}
