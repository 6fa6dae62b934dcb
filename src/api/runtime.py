"""Process-wide wiring of the dashboard's long-lived objects."""

from collections.abc import Callable
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.config import Settings
from domain.repositories.outbound import IMailer, IOrderMailer
from domain.services.feedback_service import FeedbackService
from domain.services.message_service import MessageService
from domain.services.notification_aggregator import NotificationAggregator
from domain.services.notification_store import NotificationStore
from domain.services.order_service import OrderService
from domain.services.rollups import CustomerRollupView, SalesDashboardView, TopSellersView
from domain.services.session_gate import SessionGate
from infrastructure.auth.identity_provider import AdminIdentityProvider
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.live_query.document_store import LiveDocumentStore
from infrastructure.live_query.top_sellers_publisher import DocumentTopSellersPublisher
from infrastructure.mail.relay_client import MailRelayClient
from infrastructure.mail.smtp_mailer import SMTPMailer

logger = structlog.get_logger()


class DashboardRuntime:
    """Holds the document store, the feed, the rollups and the session gate.

    ``start`` restores the persisted feed and then lets the gate open the
    live queries; ``stop`` closes them again. Both are idempotent.
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        mailer: IMailer | None = None,
        order_mailer: IOrderMailer | None = None,
    ) -> None:
        self.settings = settings
        self.session_factory = session_factory
        self.uow_factory = self._make_uow_factory(session_factory)

        self.documents = LiveDocumentStore(self.uow_factory)
        self.notification_store = NotificationStore(
            self.uow_factory, settings.notification_storage_key
        )
        self.aggregator = NotificationAggregator(
            self.notification_store, settings.notification_cap
        )

        self.customers = CustomerRollupView(
            self.documents,
            active_min_orders=settings.active_customer_min_orders,
            new_max_orders=settings.new_customer_max_orders,
        )
        self.top_sellers = TopSellersView(
            DocumentTopSellersPublisher(
                self.documents,
                settings.top_sellers_collection,
                settings.top_sellers_document,
            ),
            limit=settings.top_sellers_limit,
        )
        self.sales = SalesDashboardView(
            ZoneInfo(settings.shop_timezone), per_page=settings.recent_orders_per_page
        )

        self.auth_provider = JWTAuthProvider(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expire_minutes=settings.jwt_expire_minutes,
        )
        self.identity = AdminIdentityProvider(self.auth_provider)
        self.gate = SessionGate(
            self.identity,
            self.documents,
            [self.aggregator, self.customers, self.top_sellers, self.sales],
            started_at=self.aggregator.session_started_at,
        )

        self.mailer: IMailer = mailer or SMTPMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            sender=settings.mail_from,
        )
        if order_mailer is None and settings.mail_relay_url:
            order_mailer = MailRelayClient(
                settings.mail_relay_url, timeout=settings.mail_relay_timeout_seconds
            )
        self.orders = OrderService(self.documents, order_mailer)
        self.messages = MessageService(self.documents)
        self.feedback = FeedbackService(self.documents)

        self._started = False

    @staticmethod
    def _make_uow_factory(
        session_factory: async_sessionmaker[AsyncSession],
    ) -> Callable[[], SQLAlchemyUnitOfWork]:
        def factory() -> SQLAlchemyUnitOfWork:
            return SQLAlchemyUnitOfWork(session_factory)

        return factory

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        if self._started:
            return
        self._started = True
        await self.aggregator.restore()
        await self.gate.start()
        logger.info("dashboard_runtime_started")

    async def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        await self.gate.stop()
        await self.documents.close()
        logger.info("dashboard_runtime_stopped")
