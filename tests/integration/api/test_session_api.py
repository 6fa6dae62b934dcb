"""Integration tests for the dashboard session API."""

import pytest
from httpx import AsyncClient

from api.runtime import DashboardRuntime


class TestSession:
    @pytest.mark.asyncio
    async def test_runtime_starts_anonymous(self, client: AsyncClient, runtime, auth_headers):
        response = await client.get("/api/v1/session", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["is_anonymous"] is True
        assert body["uid"].startswith("anon-")
        assert body["subscriptions"] == 6

    @pytest.mark.asyncio
    async def test_sign_in_switches_identity(
        self, client: AsyncClient, runtime: DashboardRuntime, auth_headers, test_user
    ):
        anonymous_subscriptions = runtime.gate.subscriptions

        response = await client.post("/api/v1/session", headers=auth_headers)
        await runtime.documents.wait_idle()

        body = response.json()
        assert body["uid"] == test_user.id
        assert body["email"] == "admin@flourish.example"
        assert body["display_name"] == "Shop Admin"
        assert body["is_anonymous"] is False
        assert body["subscriptions"] == 6
        assert not any(s.active for s in anonymous_subscriptions)
        assert runtime.documents.subscription_count() == 6

    @pytest.mark.asyncio
    async def test_session_start_survives_sign_in(
        self, client: AsyncClient, runtime: DashboardRuntime, auth_headers
    ):
        before = (await client.get("/api/v1/session", headers=auth_headers)).json()

        after = (await client.post("/api/v1/session", headers=auth_headers)).json()

        assert after["started_at"] == before["started_at"]

    @pytest.mark.asyncio
    async def test_sign_out_returns_to_anonymous(
        self, client: AsyncClient, runtime: DashboardRuntime, auth_headers
    ):
        await client.post("/api/v1/session", headers=auth_headers)
        await runtime.documents.wait_idle()

        response = await client.delete("/api/v1/session", headers=auth_headers)
        await runtime.documents.wait_idle()

        assert response.json()["is_anonymous"] is True
        assert runtime.documents.subscription_count() == 6

    @pytest.mark.asyncio
    async def test_sign_in_with_bad_token_is_401(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/session", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_feed_survives_identity_change(
        self, client: AsyncClient, runtime: DashboardRuntime, auth_headers
    ):
        await client.post(
            "/api/v1/feedback", json={"rating": 3}, headers=auth_headers
        )
        await runtime.documents.wait_idle()

        await client.post("/api/v1/session", headers=auth_headers)
        await runtime.documents.wait_idle()

        assert len(runtime.aggregator.notifications) == 1
