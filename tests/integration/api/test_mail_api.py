"""Integration tests for the order status email relay endpoint."""

from typing import Any

import pytest
from httpx import AsyncClient

from api.runtime import DashboardRuntime
from domain.entities.document import Collections

VALID_PAYLOAD = {
    "customerEmail": "ana@x.com",
    "customerName": "Ana",
    "orderId": "order-1",
    "status": "Delivered",
    "productName": "Rose Bouquet",
}


async def _seed_order(runtime: DashboardRuntime, order_id: str = "order-1") -> None:
    await runtime.documents.set(
        Collections.ORDERS,
        order_id,
        {"customerName": "Ana", "customerEmail": "ana@x.com", "status": "Pending"},
    )
    await runtime.documents.wait_idle()


async def _send(client: AsyncClient, payload: Any) -> Any:
    return await client.post("/send-order-email", json=payload)


class TestSendOrderEmail:
    @pytest.mark.asyncio
    async def test_sends_email_and_updates_order(self, client: AsyncClient, runtime, mailer):
        await _seed_order(runtime)

        response = await _send(client, VALID_PAYLOAD)
        await runtime.documents.wait_idle()

        assert response.status_code == 200
        assert response.json() == {
            "message": "Order email sent and database updated successfully",
            "info": "250 2.0.0 OK queued",
        }
        to, subject, html = mailer.send.await_args.args
        assert to == "ana@x.com"
        assert subject == "Order order-1 - Status Update: Delivered"
        assert "Rose Bouquet" in html
        order = await runtime.documents.get(Collections.ORDERS, "order-1")
        assert order.data["status"] == "Delivered"
        assert order.data["customerName"] == "Ana"

    @pytest.mark.asyncio
    async def test_product_name_is_optional(self, client: AsyncClient, runtime, mailer):
        await _seed_order(runtime)
        payload = {k: v for k, v in VALID_PAYLOAD.items() if k != "productName"}

        response = await _send(client, payload)

        assert response.status_code == 200
        assert "Product:" not in mailer.send.await_args.args[2]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["customerEmail", "customerName", "orderId", "status"])
    async def test_missing_field_is_400(self, client: AsyncClient, mailer, missing: str):
        payload = {k: v for k, v in VALID_PAYLOAD.items() if k != missing}

        response = await _send(client, payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields for order email"}
        mailer.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_field_is_400(self, client: AsyncClient, mailer):
        response = await _send(client, {**VALID_PAYLOAD, "status": ""})

        assert response.status_code == 400
        mailer.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_object_body_is_400(self, client: AsyncClient):
        response = await _send(client, ["not", "an", "object"])

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_mail_failure_is_500_and_order_untouched(
        self, client: AsyncClient, runtime, mailer
    ):
        await _seed_order(runtime)
        mailer.send.side_effect = RuntimeError("SMTP auth failed")

        response = await _send(client, VALID_PAYLOAD)

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to send order email or update the order",
            "details": "SMTP auth failed",
        }
        order = await runtime.documents.get(Collections.ORDERS, "order-1")
        assert order.data["status"] == "Pending"

    @pytest.mark.asyncio
    async def test_unknown_order_is_500_after_sending(self, client: AsyncClient, mailer):
        response = await _send(client, {**VALID_PAYLOAD, "orderId": "missing"})

        assert response.status_code == 500
        assert "missing" in response.json()["details"]
        mailer.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_status_is_not_validated(self, client: AsyncClient, runtime):
        await _seed_order(runtime)

        response = await _send(client, {**VALID_PAYLOAD, "status": "Out for delivery"})
        await runtime.documents.wait_idle()

        assert response.status_code == 200
        order = await runtime.documents.get(Collections.ORDERS, "order-1")
        assert order.data["status"] == "Out for delivery"
