"""Unit tests for the order, message and feedback services."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from core.exceptions import (
    ChatThreadNotFoundError,
    DocumentNotFoundError,
    InvalidOrderStatusError,
    OrderNotFoundError,
)
from domain.entities.document import Collections, Document
from domain.entities.records import LineItem, OrderStatus
from domain.services.feedback_service import FeedbackService
from domain.services.message_service import MessageService
from domain.services.order_service import OrderService


def _echo(collection, *args):
    """Fake store write that returns what was written."""
    if len(args) == 1:
        return Document(id="generated", data=args[0])
    return Document(id=args[0], data=args[1])


@pytest.fixture
def store() -> AsyncMock:
    store = AsyncMock()
    store.add.side_effect = _echo
    store.set.side_effect = _echo
    store.merge.side_effect = _echo
    return store


@pytest.fixture
def order_mailer() -> AsyncMock:
    mailer = AsyncMock()
    mailer.send_order_status.return_value = True
    return mailer


@pytest.fixture
def service(store: AsyncMock, order_mailer: AsyncMock) -> OrderService:
    return OrderService(store, order_mailer)


def _stored_order(status: str = OrderStatus.PROCESSING, **extra) -> Document:
    data = {
        "customerName": "Ana",
        "customerEmail": "ana@x.com",
        "status": status,
        "product": {"name": "Rose", "quantity": 1},
        **extra,
    }
    return Document(id="order-1", data=data)


class TestPlaceOrder:
    @pytest.mark.asyncio
    async def test_single_item_is_written_as_product(self, service: OrderService, store):
        order = await service.place_order(
            user_id="u1",
            customer_name="Ana",
            customer_email="ana@x.com",
            items=[LineItem(name="Rose", quantity=2, price=50)],
        )

        collection, data = store.add.await_args.args
        assert collection == Collections.ORDERS
        assert data["product"] == {"name": "Rose", "quantity": 2, "price": 50}
        assert "products" not in data
        assert data["status"] == OrderStatus.PENDING
        assert data["userId"] == "u1"
        assert isinstance(data["timestamp"], datetime)
        assert data["timestamp"].utcoffset() == timedelta(0)
        assert order.total_amount == 100

    @pytest.mark.asyncio
    async def test_several_items_are_written_as_products(self, service: OrderService, store):
        await service.place_order(
            user_id="u1",
            customer_name="Ana",
            customer_email="ana@x.com",
            items=[LineItem(name="Rose"), LineItem(name="Lily", price=10)],
            total_amount=42,
        )

        _, data = store.add.await_args.args
        assert [p["name"] for p in data["products"]] == ["Rose", "Lily"]
        assert data["totalAmount"] == 42


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_writes_status_and_requests_email(
        self, service: OrderService, store, order_mailer
    ):
        store.update.return_value = _stored_order(OrderStatus.DELIVERED)

        order, sent = await service.update_status("order-1", OrderStatus.DELIVERED)

        store.update.assert_awaited_once_with(
            Collections.ORDERS, "order-1", {"status": OrderStatus.DELIVERED}
        )
        order_mailer.send_order_status.assert_awaited_once_with(
            customer_email="ana@x.com",
            customer_name="Ana",
            order_id="order-1",
            status=OrderStatus.DELIVERED,
            product_name="Rose",
        )
        assert order.status == OrderStatus.DELIVERED
        assert sent is True

    @pytest.mark.asyncio
    async def test_order_without_product_mails_placeholder_name(
        self, service: OrderService, store, order_mailer
    ):
        document = _stored_order()
        del document.data["product"]
        store.update.return_value = document

        await service.update_status("order-1", OrderStatus.PROCESSING)

        assert order_mailer.send_order_status.await_args.kwargs["product_name"] == "Product"

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, service: OrderService, store):
        with pytest.raises(InvalidOrderStatusError):
            await service.update_status("order-1", "Shipped")

        store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_order_raises(self, service: OrderService, store):
        store.update.side_effect = DocumentNotFoundError(Collections.ORDERS, "order-1")

        with pytest.raises(OrderNotFoundError):
            await service.update_status("order-1", OrderStatus.CANCELLED)

    @pytest.mark.asyncio
    async def test_mail_failure_keeps_status(self, service: OrderService, store, order_mailer):
        store.update.return_value = _stored_order(OrderStatus.CANCELLED)
        order_mailer.send_order_status.side_effect = RuntimeError("relay down")

        order, sent = await service.update_status("order-1", OrderStatus.CANCELLED)

        assert order.status == OrderStatus.CANCELLED
        assert sent is False

    @pytest.mark.asyncio
    async def test_without_mailer_no_email(self, store):
        store.update.return_value = _stored_order()

        _, sent = await OrderService(store).update_status("order-1", OrderStatus.PROCESSING)

        assert sent is False

    @pytest.mark.asyncio
    async def test_get_missing_order_raises(self, service: OrderService, store):
        store.get.return_value = None

        with pytest.raises(OrderNotFoundError):
            await service.get_order("nope")


class TestMessageService:
    @pytest.mark.asyncio
    async def test_post_merges_unread_message_into_thread(self, store):
        thread = await MessageService(store).post_customer_message("t1", "u1", "Cy", "Hello?")

        collection, thread_id, data = store.merge.await_args.args
        store.get.assert_not_awaited()
        store.set.assert_not_awaited()
        assert (collection, thread_id) == (Collections.CHATS, "t1")
        assert data["isRead"] is False
        assert data["lastMessage"] == "Hello?"
        assert thread.is_read is False
        assert thread.last_message == "Hello?"

    @pytest.mark.asyncio
    async def test_mark_read_missing_thread_raises(self, store):
        store.update.side_effect = DocumentNotFoundError(Collections.CHATS, "t1")

        with pytest.raises(ChatThreadNotFoundError):
            await MessageService(store).mark_read("t1")


class TestFeedbackService:
    @pytest.mark.asyncio
    async def test_submit_stamps_created_at(self, store):
        feedback = await FeedbackService(store).submit("u1", "Bo", 5, "Lovely bouquet")

        collection, data = store.add.await_args.args
        assert collection == Collections.FEEDBACK
        assert isinstance(data["createdAt"], datetime)
        assert "timestamp" not in data
        assert feedback.rating == 5
        assert feedback.created_at is not None
