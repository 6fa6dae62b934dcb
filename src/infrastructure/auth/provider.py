"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol

from domain.entities.session import Identity


@dataclass
class TokenUser:
    """Represents a user extracted from an auth token."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[str] = None
    is_anonymous: bool = False

    def to_identity(self) -> Identity:
        return Identity(
            uid=self.id,
            email=self.email,
            display_name=self.display_name,
            is_anonymous=self.is_anonymous,
        )


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            TokenUser if valid, None if invalid
        """
        ...

    def create_token(self, user: TokenUser) -> str:
        """
        Create an authentication token for a user.

        Args:
            user: The user to create a token for

        Returns:
            The generated token string
        """
        ...
