"""Protocols for outbound side effects: mail and the top-sellers cache."""

from typing import Protocol


class IMailer(Protocol):
    """Mail transport."""

    async def send(self, to: str, subject: str, html: str) -> str:
        """Send an HTML email. Returns the provider's response text."""
        ...


class IOrderMailer(Protocol):
    """Client of the order-status email relay."""

    async def send_order_status(
        self,
        customer_email: str,
        customer_name: str,
        order_id: str,
        status: str,
        product_name: str,
    ) -> bool:
        """Request a status email. Returns True if the relay accepted it."""
        ...


class ITopSellersPublisher(Protocol):
    """Destination of the top-sellers cache document."""

    async def publish(self, product_names: list[str]) -> None:
        """Write the ordered list of best-selling product names."""
        ...
