"""
Tests for the Google ID token verifier, with real RS256 tokens.
"""
import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.exceptions import PyJWKClientConnectionError

from geogate.auth_gate import AuthGate
from geogate.errors import AuthFailure, AuthFailureReason
from geogate.identity_providers import GoogleTokenVerifier, PrimaryAuthClient
from geogate.models import IdentityProvider

CLIENT_ID = "test-client.apps.googleusercontent.com"

SIGNING_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)
OTHER_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)


def make_google_token(key=SIGNING_KEY, exp=None, **overrides) -> str:
    """Helper: sign a token shaped like a Google ID token."""
    now = int(time.time())
    payload = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "10987654321",
        "email": "jane@gmail.com",
        "email_verified": True,
        "iat": now,
        "exp": exp or now + 3600,
    }
    payload.update(overrides)
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, key, algorithm="RS256", headers={"kid": "test-kid"})


def make_verifier(client_id=CLIENT_ID) -> GoogleTokenVerifier:
    verifier = GoogleTokenVerifier(client_id, "https://certs.test/oauth2/v3/certs")
    verifier.jwks_client = MagicMock()
    verifier.jwks_client.get_signing_key_from_jwt.return_value = SimpleNamespace(
        key=SIGNING_KEY.public_key()
    )
    return verifier


class TestGoogleTokenVerifier:

    @pytest.mark.asyncio
    async def test_valid_token(self):
        verifier = make_verifier()
        token = make_google_token()

        claims = await verifier.verify(token)

        assert claims["sub"] == "10987654321"
        assert claims["email"] == "jane@gmail.com"
        verifier.jwks_client.get_signing_key_from_jwt.assert_called_once_with(token)

    @pytest.mark.asyncio
    async def test_bare_issuer_accepted(self):
        claims = await make_verifier().verify(make_google_token(iss="accounts.google.com"))
        assert claims["iss"] == "accounts.google.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token_factory", [
        lambda: make_google_token(aud="someone-else.apps.googleusercontent.com"),
        lambda: make_google_token(iss="https://evil.example.com"),
        lambda: make_google_token(exp=int(time.time()) - 600, iat=int(time.time()) - 4200),
        lambda: make_google_token(key=OTHER_KEY),
        lambda: make_google_token(sub=None),
    ], ids=["audience", "issuer", "expired", "signature", "no-sub"])
    async def test_invalid_tokens(self, token_factory):
        with pytest.raises(AuthFailure) as exc_info:
            await make_verifier().verify(token_factory())
        assert exc_info.value.reason == AuthFailureReason.INVALID

    @pytest.mark.asyncio
    async def test_hs256_token_rejected(self):
        token = jwt.encode(
            {"iss": "accounts.google.com", "aud": CLIENT_ID, "sub": "1", "iat": 1, "exp": 2**31},
            "shared-secret-that-is-long-enough-for-hs256",
            algorithm="HS256",
        )
        with pytest.raises(AuthFailure) as exc_info:
            await make_verifier().verify(token)
        assert exc_info.value.reason == AuthFailureReason.INVALID

    @pytest.mark.asyncio
    async def test_signing_keys_unreachable(self):
        verifier = make_verifier()
        verifier.jwks_client.get_signing_key_from_jwt.side_effect = PyJWKClientConnectionError(
            "Fail to fetch data from the url"
        )

        with pytest.raises(AuthFailure) as exc_info:
            await verifier.verify(make_google_token())
        assert exc_info.value.reason == AuthFailureReason.VERIFICATION_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_no_client_id_configured(self):
        verifier = make_verifier(client_id="")

        with pytest.raises(AuthFailure) as exc_info:
            await verifier.verify(make_google_token())

        assert exc_info.value.reason == AuthFailureReason.INVALID
        verifier.jwks_client.get_signing_key_from_jwt.assert_not_called()


class TestGoogleFallbackEndToEnd:

    @pytest.mark.asyncio
    async def test_google_token_accepted_after_malformed_jwt_signal(self):
        calls = []

        def primary_backend(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(401, json={
                "code": 401,
                "error_code": "bad_jwt",
                "msg": "invalid JWT: unable to parse or verify signature, "
                       "token contains an invalid number of segments",
            })

        http = httpx.AsyncClient(transport=httpx.MockTransport(primary_backend))
        gate = AuthGate(PrimaryAuthClient(http, "https://auth.test", "anon-key"), make_verifier())

        identity = await gate.verify(f"Bearer {make_google_token()}")

        assert identity.provider == IdentityProvider.GOOGLE
        assert identity.subject == "10987654321"
        assert identity.email == "jane@gmail.com"
        assert len(calls) == 1
        assert gate.google.jwks_client.get_signing_key_from_jwt.call_count == 1

    @pytest.mark.asyncio
    async def test_google_token_without_email_rejected(self):
        def primary_backend(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={
                "error_code": "bad_jwt",
                "msg": "token contains an invalid number of segments",
            })

        http = httpx.AsyncClient(transport=httpx.MockTransport(primary_backend))
        gate = AuthGate(PrimaryAuthClient(http, "https://auth.test", "anon-key"), make_verifier())

        with pytest.raises(AuthFailure) as exc_info:
            await gate.verify(f"Bearer {make_google_token(email=None)}")
        assert exc_info.value.reason == AuthFailureReason.INVALID
