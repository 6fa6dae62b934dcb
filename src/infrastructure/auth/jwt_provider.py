"""JWT authentication provider implementation.

Validates bearer tokens issued by the shop's identity platform (ES256,
public keys from a JWKS endpoint) and tokens signed locally with the shared
secret (HS256, used for tests and anonymous dashboard sessions).

Expected payload:
    {
        "sub": "user-id",
        "email": "admin@flourish.example",
        "role": "admin",
        "user_metadata": { "display_name": "Shop Admin" },
        "exp": 1234567890
    }
"""

from datetime import timedelta
from typing import Any, Optional

import httpx
import structlog
from jose import JWTError, jwt
from jose.backends import ECKey

from core.clock import utc_now
from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()

# Module-level JWKS cache (fetched once, reused across requests)
_jwks_cache: dict[str, Any] | None = None


async def _get_jwks_keys() -> dict[str, Any]:
    """Fetch and cache JWKS keys, keyed by ``kid``."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    if not settings.jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(settings.jwks_url, timeout=10.0)
            response.raise_for_status()
            keys = response.json().get("keys", [])
    except (httpx.HTTPError, ValueError):
        logger.exception("jwks_fetch_failed", url=settings.jwks_url)
        return {}

    _jwks_cache = {key["kid"]: key for key in keys if key.get("kid")}
    logger.info("jwks_fetched", key_count=len(_jwks_cache))
    return _jwks_cache


class JWTAuthProvider:
    """JWT-based authentication provider."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT and extract the user it was issued to.

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid, expired or missing ``sub``
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") == "ES256":
                payload = await self._decode_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if not payload or not payload.get("sub"):
            return None

        metadata = payload.get("user_metadata") or {}
        return TokenUser(
            id=str(payload["sub"]),
            email=payload.get("email"),
            display_name=metadata.get("display_name") or metadata.get("name") or payload.get("name"),
            role=payload.get("role"),
            is_anonymous=bool(payload.get("is_anonymous", False)),
        )

    async def _decode_es256(self, token: str, header: dict) -> Optional[dict]:
        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await _get_jwks_keys()).get(kid)
        if key_data is None:
            # Unknown kid: the keys may have rotated, refetch once.
            global _jwks_cache
            _jwks_cache = None
            key_data = (await _get_jwks_keys()).get(kid)
            if key_data is None:
                logger.warning("jwks_key_not_found", kid=kid)
                return None

        return jwt.decode(
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """Create an HS256 token for a user."""
        payload: dict[str, Any] = {
            "sub": user.id,
            "email": user.email,
            "role": user.role or "authenticated",
            "is_anonymous": user.is_anonymous,
            "exp": utc_now() + timedelta(minutes=self._expire_minutes),
            "user_metadata": {"display_name": user.display_name},
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
