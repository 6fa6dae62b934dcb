"""Identity provider protocol."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from domain.entities.session import Identity

IdentityListener = Callable[[Identity | None], Awaitable[None]]


class IIdentityProvider(Protocol):
    """The authentication collaborator the dashboard session runs under."""

    @property
    def current_identity(self) -> Identity | None:
        """The signed-in identity, if any."""
        ...

    def add_listener(self, listener: IdentityListener) -> Callable[[], None]:
        """Register for identity changes. Returns a function that removes the listener."""
        ...

    async def sign_in(self, identity: Identity) -> None:
        """Make ``identity`` the current identity."""
        ...

    async def sign_in_anonymously(self) -> Identity:
        """Issue and sign in a fresh anonymous identity."""
        ...

    async def sign_out(self) -> None:
        """Clear the current identity."""
        ...
