"""
Recortes Backend - Identity Resolver
=====================================

What:  Turns an `Authorization: Bearer <token>` header into an Identity.
Why:   Every /cuts operation is scoped to its owner; the owner must come
       from a verified credential, never from anything the client asserts.
How:   1. Extract the bearer token from the header
       2. Verify it as a Google ID token issued for our client id (google-auth)
       3. Resolve or provision the local user (UserService)
       4. Return a typed Identity that routes pass into CutService
Who:   Route handlers declare `identity: Identity = Depends(get_current_identity)`.

Failure policy:
    Missing header, empty token and rejected token all become AuthError
    (HTTP 401) with one uniform message. The specific reason goes to the log.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request, Security
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPBearer
from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from sqlalchemy.ext.asyncio import AsyncSession

from recortes.config import settings
from recortes.database import get_db_session
from recortes.exceptions import AuthError
from recortes.schemas.common import Identity
from recortes.services.user_service import UserService

logger = logging.getLogger(__name__)

# Declares the bearer scheme in the OpenAPI document; the header itself is
# parsed by extract_bearer_token so that failure reasons can be logged
bearer_scheme = HTTPBearer(auto_error=False, description="Google ID token")


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header value.

    Raises:
        AuthError(missing_header): no header at all
        AuthError(missing_token):  header present but no token segment
        AuthError(invalid_token):  scheme other than Bearer
    """
    if not authorization or not authorization.strip():
        raise AuthError(AuthError.MISSING_HEADER)
    parts = authorization.split()
    if len(parts) < 2:
        raise AuthError(AuthError.MISSING_TOKEN)
    if parts[0].lower() != "bearer":
        raise AuthError(AuthError.INVALID_TOKEN, context={"scheme": parts[0]})
    return parts[1]


class GoogleTokenVerifier:
    """
    Verifies Google-issued ID tokens against a fixed audience.

    verify_oauth2_token checks signature (against Google's cached public
    certs), expiry, issuer and audience. It is synchronous and may fetch
    certificates over HTTP, so it runs in the threadpool.
    """

    def __init__(self, client_id: Optional[str] = None):
        self.client_id = client_id if client_id is not None else settings.google_client_id
        self._transport = google_requests.Request()

    async def verify(self, token: str) -> Dict[str, Any]:
        """
        Returns:
            The verified claims (sub, email, name, ...).

        Raises:
            AuthError(invalid_token): any verification failure
        """
        if not self.client_id:
            raise AuthError(AuthError.INVALID_TOKEN, context={"detail": "GOOGLE_CLIENT_ID not configured"})
        try:
            claims = await run_in_threadpool(
                id_token.verify_oauth2_token, token, self._transport, self.client_id
            )
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            raise AuthError(AuthError.INVALID_TOKEN, context={"detail": str(e)}) from e
        if not claims:
            raise AuthError(AuthError.INVALID_TOKEN, context={"detail": "empty token payload"})
        return claims


# ── Singleton Instance ────────────────────────────────────────────────────
token_verifier = GoogleTokenVerifier()


def get_token_verifier() -> GoogleTokenVerifier:
    """FastAPI dependency; tests override it with a verifier that skips Google."""
    return token_verifier


async def get_current_identity(
    request: Request,
    _credentials=Security(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
    verifier: GoogleTokenVerifier = Depends(get_token_verifier),
) -> Identity:
    """
    Authenticate the request and return the caller's Identity.

    Shares the request's database session, so a user provisioned here is
    committed together with whatever the handler writes.
    """
    try:
        token = extract_bearer_token(request.headers.get("Authorization"))
        claims = await verifier.verify(token)
    except AuthError as e:
        logger.warning("Authentication failed (%s) for %s %s", e.reason, request.method, request.url.path)
        raise

    return await UserService(db).resolve_identity(claims)
