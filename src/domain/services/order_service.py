"""Order placement and status updates."""

import structlog

from core.clock import utc_now
from core.exceptions import DocumentNotFoundError, InvalidOrderStatusError, OrderNotFoundError
from domain.entities.document import Collections
from domain.entities.records import LineItem, OrderRecord, OrderStatus
from domain.repositories.live_query import IDocumentStore
from domain.repositories.outbound import IOrderMailer

logger = structlog.get_logger()


class OrderService:
    """Service layer for writing order documents."""

    def __init__(self, store: IDocumentStore, mailer: IOrderMailer | None = None) -> None:
        self._store = store
        self._mailer = mailer

    async def place_order(
        self,
        user_id: str,
        customer_name: str,
        customer_email: str,
        items: list[LineItem],
        customer_phone: str | None = None,
        total_amount: float | None = None,
    ) -> OrderRecord:
        """Create a pending order.

        Without an explicit total, the order total is the sum of priced lines.
        """
        if total_amount is None:
            total_amount = sum((item.price or 0) * item.quantity for item in items)

        data = {
            "userId": user_id,
            "customerName": customer_name,
            "customerEmail": customer_email,
            "customerPhone": customer_phone,
            "status": OrderStatus.PENDING,
            "totalAmount": total_amount,
            "timestamp": utc_now(),
        }
        if len(items) == 1:
            data["product"] = items[0].to_data()
        else:
            data["products"] = [item.to_data() for item in items]

        document = await self._store.add(Collections.ORDERS, data)
        logger.info("order_placed", order_id=document.id, user_id=user_id)
        return OrderRecord.from_document(document)

    async def get_order(self, order_id: str) -> OrderRecord:
        document = await self._store.get(Collections.ORDERS, order_id)
        if document is None:
            raise OrderNotFoundError(order_id)
        return OrderRecord.from_document(document)

    async def update_status(self, order_id: str, status: str) -> tuple[OrderRecord, bool]:
        """Write a new status and ask the relay to email the customer.

        Returns the updated order and whether the status email was accepted.
        Email failures are logged; the status change stands either way.
        """
        if status not in OrderStatus.ALL:
            raise InvalidOrderStatusError(status)

        order = await self.apply_status(order_id, status)

        if self._mailer is None or not order.customer_email:
            return order, False

        product_name = order.product.name if order.product else "Product"
        try:
            sent = await self._mailer.send_order_status(
                customer_email=order.customer_email,
                customer_name=order.customer_name or "Customer",
                order_id=order.id,
                status=status,
                product_name=product_name,
            )
        except Exception:
            logger.exception("order_status_email_failed", order_id=order_id)
            sent = False
        return order, sent

    async def apply_status(self, order_id: str, status: str) -> OrderRecord:
        """Write a status into an existing order document."""
        try:
            document = await self._store.update(Collections.ORDERS, order_id, {"status": status})
        except DocumentNotFoundError:
            raise OrderNotFoundError(order_id) from None
        logger.info("order_status_updated", order_id=order_id, status=status)
        return OrderRecord.from_document(document)
