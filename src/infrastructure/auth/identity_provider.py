"""Identity state for the dashboard session."""

from collections.abc import Callable
from typing import Optional
from uuid import uuid4

import structlog

from core.exceptions import AuthenticationError, ErrorCode
from domain.entities.session import Identity
from domain.repositories.identity_provider import IdentityListener
from infrastructure.auth.provider import IAuthProvider

logger = structlog.get_logger()


class AdminIdentityProvider:
    """IIdentityProvider that tracks who the dashboard runs as.

    Listeners are awaited in registration order on every change.
    """

    def __init__(
        self,
        auth_provider: IAuthProvider,
        initial: Optional[Identity] = None,
    ) -> None:
        self._auth_provider = auth_provider
        self._identity = initial
        self._listeners: list[IdentityListener] = []

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._identity

    def add_listener(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def sign_in(self, identity: Identity) -> None:
        await self._set(identity)

    async def sign_in_with_token(self, token: str) -> Identity:
        """Validate a bearer token and sign its user in."""
        user = await self._auth_provider.validate_token(token)
        if user is None:
            raise AuthenticationError(
                message="Invalid or expired token",
                error_code=ErrorCode.INVALID_TOKEN,
            )
        identity = user.to_identity()
        await self._set(identity)
        return identity

    async def sign_in_anonymously(self) -> Identity:
        identity = Identity(uid=f"anon-{uuid4().hex}", is_anonymous=True)
        await self._set(identity)
        return identity

    async def sign_out(self) -> None:
        await self._set(None)

    async def _set(self, identity: Optional[Identity]) -> None:
        self._identity = identity
        logger.info(
            "identity_changed",
            uid=identity.uid if identity else None,
            anonymous=identity.is_anonymous if identity else None,
        )
        for listener in list(self._listeners):
            await listener(identity)
