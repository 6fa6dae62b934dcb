"""Unit tests for JWTAuthProvider token handling and the ES256/JWKS path."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest
from jose import jwt as jose_jwt

from infrastructure.auth import jwt_provider as jwt_provider_module
from infrastructure.auth.jwt_provider import JWTAuthProvider, _get_jwks_keys
from infrastructure.auth.provider import TokenUser

JWKS_URL = "https://auth.flourish.example/.well-known/jwks.json"

_RealAsyncClient = httpx.AsyncClient


def _make_hs256_token(payload: dict, secret: str = "test-secret") -> str:
    return jose_jwt.encode(payload, secret, algorithm="HS256")


def _jwks_transport(handler):
    """Route the module's httpx client through a mock transport."""
    return patch.object(
        httpx,
        "AsyncClient",
        lambda **kwargs: _RealAsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.fixture(autouse=True)
def _clear_jwks_cache():
    jwt_provider_module._jwks_cache = None
    yield
    jwt_provider_module._jwks_cache = None


@pytest.fixture
def jwks_url():
    with patch.object(jwt_provider_module.settings, "jwks_url", JWKS_URL):
        yield JWKS_URL


@pytest.fixture
def hs256_provider() -> JWTAuthProvider:
    return JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=30)


class TestValidateToken:
    async def test_round_trips_created_token(self, hs256_provider: JWTAuthProvider):
        user = TokenUser(
            id="admin-1", email="admin@flourish.example", display_name="Shop Admin", role="admin"
        )

        result = await hs256_provider.validate_token(hs256_provider.create_token(user))

        assert result == user

    async def test_anonymous_flag_is_carried(self, hs256_provider: JWTAuthProvider):
        user = TokenUser(id="anon-1", is_anonymous=True)

        result = await hs256_provider.validate_token(hs256_provider.create_token(user))

        assert result is not None
        assert result.is_anonymous is True
        assert result.email is None

    async def test_returns_none_without_sub(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token({"email": "user@example.com", "exp": 9999999999})

        assert await hs256_provider.validate_token(token) is None

    async def test_returns_none_with_empty_sub(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token({"sub": "", "exp": 9999999999})

        assert await hs256_provider.validate_token(token) is None

    async def test_token_without_email_is_accepted(self, hs256_provider: JWTAuthProvider):
        user_id = str(uuid4())
        token = _make_hs256_token({"sub": user_id, "exp": 9999999999})

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.id == user_id
        assert result.email is None

    async def test_display_name_falls_back_to_metadata_name(
        self, hs256_provider: JWTAuthProvider
    ):
        token = _make_hs256_token(
            {"sub": "u1", "user_metadata": {"name": "Florist"}, "exp": 9999999999}
        )

        result = await hs256_provider.validate_token(token)

        assert result.display_name == "Florist"

    async def test_garbage_returns_none(self, hs256_provider: JWTAuthProvider):
        assert await hs256_provider.validate_token("not-a-jwt") is None


class TestGetJwksKeys:
    async def test_returns_empty_without_url(self):
        with patch.object(jwt_provider_module.settings, "jwks_url", ""):
            assert await _get_jwks_keys() == {}

    async def test_fetches_and_caches_keys(self, jwks_url):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "keys": [
                        {"kid": "key-1", "kty": "EC", "crv": "P-256", "x": "aa", "y": "bb"},
                        {"kty": "EC", "crv": "P-256", "x": "cc", "y": "dd"},
                    ]
                },
            )

        with _jwks_transport(handler):
            first = await _get_jwks_keys()
            second = await _get_jwks_keys()

        assert list(first) == ["key-1"]
        assert first["key-1"]["kty"] == "EC"
        assert second == first
        assert len(requests) == 1
        assert str(requests[0].url) == jwks_url

    async def test_returns_empty_on_http_error(self, jwks_url):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with _jwks_transport(handler):
            assert await _get_jwks_keys() == {}

        assert jwt_provider_module._jwks_cache is None

    async def test_returns_empty_on_connection_error(self, jwks_url):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with _jwks_transport(handler):
            assert await _get_jwks_keys() == {}


class TestDecodeEs256:
    async def test_returns_none_without_kid(self, hs256_provider: JWTAuthProvider):
        result = await hs256_provider._decode_es256("dummy.token.value", {"alg": "ES256"})

        assert result is None

    async def test_refetches_once_for_unknown_kid(self, hs256_provider: JWTAuthProvider):
        with patch.object(
            jwt_provider_module, "_get_jwks_keys", new_callable=AsyncMock
        ) as mock_get_jwks:
            mock_get_jwks.return_value = {"other-kid": {"kty": "EC"}}

            result = await hs256_provider._decode_es256(
                "dummy.token.value", {"alg": "ES256", "kid": "missing-kid"}
            )

        assert result is None
        assert mock_get_jwks.await_count == 2

    async def test_decodes_with_rotated_key(self, hs256_provider: JWTAuthProvider):
        key_data = {"kid": "rotated-kid", "kty": "EC", "crv": "P-256"}
        payload = {"sub": "u1", "email": "rotated@example.com"}

        with (
            patch.object(
                jwt_provider_module,
                "_get_jwks_keys",
                new_callable=AsyncMock,
                side_effect=[{}, {"rotated-kid": key_data}],
            ),
            patch.object(jwt_provider_module, "ECKey") as mock_eckey_cls,
            patch.object(jwt_provider_module.jwt, "decode", return_value=payload) as mock_decode,
        ):
            mock_eckey_cls.return_value = MagicMock()

            result = await hs256_provider._decode_es256(
                "rotated.token.value", {"alg": "ES256", "kid": "rotated-kid"}
            )

        assert result == payload
        mock_eckey_cls.assert_called_once_with(key_data, algorithm="ES256")
        mock_decode.assert_called_once_with(
            "rotated.token.value",
            mock_eckey_cls.return_value,
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    async def test_validate_token_takes_es256_path(self, hs256_provider: JWTAuthProvider):
        payload = {
            "sub": "u1",
            "email": "es256user@example.com",
            "user_metadata": {"display_name": "ES256 User"},
            "role": "authenticated",
        }

        with (
            patch.object(
                jwt_provider_module.jwt,
                "get_unverified_header",
                return_value={"alg": "ES256", "kid": "k1"},
            ),
            patch.object(hs256_provider, "_decode_es256", new_callable=AsyncMock) as mock_es256,
        ):
            mock_es256.return_value = payload

            result = await hs256_provider.validate_token("es256.token.here")

        mock_es256.assert_awaited_once_with("es256.token.here", {"alg": "ES256", "kid": "k1"})
        assert result == TokenUser(
            id="u1",
            email="es256user@example.com",
            display_name="ES256 User",
            role="authenticated",
        )
