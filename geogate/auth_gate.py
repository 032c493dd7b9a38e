# geogate/auth_gate.py
"""
Per-request bearer credential verification.

AuthGate.verify() either returns a VerifiedIdentity or raises AuthFailure.
UpstreamError from the primary backend (5xx) is not swallowed: it propagates
as a server-side failure.

Order of checks:
1. `Authorization: Bearer <token>` present            -> else MISSING_CREDENTIAL
2. token has three dot-separated segments             -> else MALFORMED
3. primary auth backend accepts the token             -> PRIMARY_AUTH identity
4. primary reports the malformed-JWT signal only      -> Google ID token check
5. anything else                                      -> INVALID

Nothing is cached between requests and nothing is retried.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from geogate.errors import AuthFailure, AuthFailureReason
from geogate.identity_providers import (
    GoogleTokenVerifier,
    PrimaryAuthClient,
    PrimaryAuthRejected,
)
from geogate.models import IdentityProvider, VerifiedIdentity

log = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthFailure(AuthFailureReason.MISSING_CREDENTIAL)

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthFailure(AuthFailureReason.MISSING_CREDENTIAL)
    return token


def looks_like_jwt(token: str) -> bool:
    """Structural check only (header.payload.signature); nothing is verified."""
    parts = token.split(".")
    return len(parts) == 3 and all(parts)


def _identity_from_profile(profile: Dict[str, Any]) -> VerifiedIdentity:
    subject = profile.get("id") or profile.get("sub")
    if not subject:
        raise AuthFailure(AuthFailureReason.INVALID, "primary profile without subject")

    return VerifiedIdentity(
        subject=str(subject),
        email=profile.get("email") or None,
        provider=IdentityProvider.PRIMARY_AUTH,
        raw_claims=profile,
    )


def _identity_from_google_claims(claims: Dict[str, Any]) -> VerifiedIdentity:
    if not claims.get("sub") or not claims.get("email"):
        raise AuthFailure(AuthFailureReason.INVALID, "google claims missing sub/email")

    return VerifiedIdentity(
        subject=str(claims["sub"]),
        email=str(claims["email"]),
        provider=IdentityProvider.GOOGLE,
        raw_claims=claims,
    )


class AuthGate:
    def __init__(self, primary: PrimaryAuthClient, google: GoogleTokenVerifier):
        self.primary = primary
        self.google = google

    async def verify(self, authorization: Optional[str]) -> VerifiedIdentity:
        token = extract_bearer_token(authorization)

        if not looks_like_jwt(token):
            raise AuthFailure(AuthFailureReason.MALFORMED)

        try:
            profile = await self.primary.fetch_user(token)
        except PrimaryAuthRejected as rejected:
            if not rejected.is_malformed_jwt:
                raise AuthFailure(
                    AuthFailureReason.INVALID,
                    f"primary auth rejected token ({rejected.status_code})",
                ) from rejected

            log.info("Primary auth reported malformed JWT; trying Google ID token")
            claims = await self.google.verify(token)
            return _identity_from_google_claims(claims)

        return _identity_from_profile(profile)
