"""Identity-gated lifecycle of the dashboard's live query subscriptions."""

import asyncio
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol

import structlog

from domain.entities.session import AdminSession, Identity
from domain.repositories.identity_provider import IIdentityProvider
from domain.repositories.live_query import ILiveQuerySource, Subscription

logger = structlog.get_logger()


class SessionConsumer(Protocol):
    """Something that opens live queries for a session."""

    async def subscribe(
        self,
        source: ILiveQuerySource,
        session: AdminSession,
    ) -> list[Subscription]: ...


class SessionGate:
    """Opens subscriptions once an identity exists and reopens them when it changes.

    Without a signed-in identity the gate asks the provider for an anonymous
    one and waits for it to arrive. Every session it creates shares the same
    ``started_at``, fixed when the gate is built.
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        source: ILiveQuerySource,
        consumers: Sequence[SessionConsumer],
        started_at: datetime,
    ) -> None:
        self._identity_provider = identity_provider
        self._source = source
        self._consumers = list(consumers)
        self._started_at = started_at
        self._session: AdminSession | None = None
        self._subscriptions: list[Subscription] = []
        self._remove_listener: Callable[[], None] | None = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> AdminSession | None:
        return self._session

    @property
    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions)

    async def start(self) -> None:
        """Begin following the identity provider."""
        if self._remove_listener is not None:
            return
        self._remove_listener = self._identity_provider.add_listener(self.on_identity_changed)
        await self.on_identity_changed(self._identity_provider.current_identity)

    async def stop(self) -> None:
        """Stop following identity changes and close every subscription."""
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None
        async with self._lock:
            self._teardown()
            self._session = None

    async def on_identity_changed(self, identity: Identity | None) -> None:
        if identity is None:
            async with self._lock:
                self._teardown()
                self._session = None
            # The provider reports the new identity back through the listener.
            await self._identity_provider.sign_in_anonymously()
            return

        async with self._lock:
            if self._session is not None and self._session.identity.uid == identity.uid:
                return
            self._teardown()
            session = AdminSession(identity=identity, started_at=self._started_at)
            self._session = session
            for consumer in self._consumers:
                self._subscriptions.extend(await consumer.subscribe(self._source, session))

        logger.info(
            "session_activated",
            uid=identity.uid,
            anonymous=identity.is_anonymous,
            subscriptions=len(self._subscriptions),
        )

    def _teardown(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
