"""HTTP client for the order-status email relay."""

import httpx
import structlog

logger = structlog.get_logger()


class MailRelayClient:
    """IOrderMailer that posts to ``{base_url}/send-order-email``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/send-order-email"
        self._timeout = timeout
        self._transport = transport

    async def send_order_status(
        self,
        customer_email: str,
        customer_name: str,
        order_id: str,
        status: str,
        product_name: str,
    ) -> bool:
        payload = {
            "customerEmail": customer_email,
            "customerName": customer_name,
            "orderId": order_id,
            "status": status,
            "productName": product_name,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._url, json=payload)
        except httpx.HTTPError:
            logger.exception("mail_relay_request_failed", order_id=order_id)
            return False

        if response.is_success:
            logger.info("mail_relay_accepted", order_id=order_id, status=status)
            return True

        logger.warning(
            "mail_relay_rejected",
            order_id=order_id,
            status_code=response.status_code,
            body=response.text[:200],
        )
        return False
