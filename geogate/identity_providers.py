# geogate/identity_providers.py
"""
The two credential verifiers AuthGate chains:

- PrimaryAuthClient: the hosted auth backend echoes the user's profile back
  for a valid session token (GET /auth/v1/user).
- GoogleTokenVerifier: local RS256 verification of a Google ID token against
  Google's published signing keys.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
import jwt
from jwt.exceptions import PyJWKClientConnectionError

from geogate.errors import AuthFailure, AuthFailureReason, UpstreamError

log = logging.getLogger(__name__)

PRIMARY_SERVICE_NAME = "primary-auth"

MALFORMED_JWT_ERROR_CODE = "bad_jwt"
MALFORMED_JWT_MESSAGE = "invalid number of segments"

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class PrimaryAuthRejected(Exception):
    """The primary backend answered with a 4xx for this token."""

    def __init__(self, status_code: int, error_code: Optional[str] = None, msg: Optional[str] = None):
        self.status_code = status_code
        self.error_code = error_code
        self.msg = msg
        super().__init__(f"primary auth rejected token ({status_code}, {error_code})")

    @property
    def is_malformed_jwt(self) -> bool:
        # Exact signal only. Widening this would send well-formed but invalid
        # session tokens to the Google verifier.
        return (
            self.error_code == MALFORMED_JWT_ERROR_CODE
            and MALFORMED_JWT_MESSAGE in (self.msg or "")
        )


def _error_fields(response: httpx.Response) -> Dict[str, Optional[str]]:
    try:
        body = response.json()
    except ValueError:
        return {"error_code": None, "msg": None}
    if not isinstance(body, dict):
        return {"error_code": None, "msg": None}

    error_code = body.get("error_code")
    msg = body.get("msg")
    return {
        "error_code": error_code if isinstance(error_code, str) else None,
        "msg": msg if isinstance(msg, str) else None,
    }


class PrimaryAuthClient:
    def __init__(self, http: httpx.AsyncClient, base_url: str, api_key: str):
        self.http = http
        self.user_url = f"{base_url.rstrip('/')}/auth/v1/user"
        self.api_key = api_key

    async def fetch_user(self, token: str) -> Dict[str, Any]:
        """
        Returns the user profile for a valid token.

        Raises:
            PrimaryAuthRejected: 4xx from the backend.
            UpstreamError: 5xx or an unusable success body.
            AuthFailure(VERIFICATION_UNAVAILABLE): backend unreachable.
        """
        try:
            r = await self.http.get(
                self.user_url,
                headers={"Authorization": f"Bearer {token}", "apikey": self.api_key},
            )
        except httpx.HTTPError as e:
            log.warning("Primary auth backend unreachable (%s)", type(e).__name__)
            raise AuthFailure(AuthFailureReason.VERIFICATION_UNAVAILABLE) from e

        if 200 <= r.status_code < 300:
            try:
                profile = r.json()
            except ValueError as e:
                raise UpstreamError(PRIMARY_SERVICE_NAME, "invalid JSON profile") from e
            if not isinstance(profile, dict):
                raise UpstreamError(PRIMARY_SERVICE_NAME, "unexpected profile shape")
            return profile

        if r.status_code >= 500:
            log.error("HTTP %s from %s", r.status_code, PRIMARY_SERVICE_NAME)
            raise UpstreamError(
                PRIMARY_SERVICE_NAME, f"HTTP {r.status_code}", {"status_code": r.status_code}
            )

        raise PrimaryAuthRejected(r.status_code, **_error_fields(r))


class GoogleTokenVerifier:
    def __init__(self, client_id: str, certs_url: str):
        self.client_id = client_id
        self.jwks_client = jwt.PyJWKClient(certs_url)

    def _verify_sync(self, token: str) -> Dict[str, Any]:
        signing_key = self.jwks_client.get_signing_key_from_jwt(token)
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=self.client_id,
            options={"require": ["exp", "iat", "sub"]},
        )
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise jwt.InvalidIssuerError("Invalid issuer")
        return claims

    async def verify(self, token: str) -> Dict[str, Any]:
        if not self.client_id:
            log.warning("Google ID token received but no Google client id is configured")
            raise AuthFailure(AuthFailureReason.INVALID, "google verification disabled")

        try:
            return await asyncio.to_thread(self._verify_sync, token)
        except PyJWKClientConnectionError as e:
            log.warning("Google signing keys unavailable")
            raise AuthFailure(AuthFailureReason.VERIFICATION_UNAVAILABLE) from e
        except jwt.PyJWTError as e:
            raise AuthFailure(AuthFailureReason.INVALID, f"google: {type(e).__name__}") from e
