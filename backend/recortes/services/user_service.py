"""
Recortes Backend - User Service (Just-in-Time Provisioning)
============================================================

What:  Maps verified identity-provider claims to a local user record.
Why:   Cuts reference a local user id; users are never registered explicitly,
       they appear the first time a valid token is presented.
How:   Select by provider subject; insert when missing. The unique
       constraint on google_id decides concurrent first logins, and the
       loser of that race re-reads the winner's row.
Who:   Called by the Identity Resolver (recortes.auth) on every request.
"""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recortes.exceptions import AuthError, DatabaseError
from recortes.models.user import User
from recortes.schemas.common import Identity

logger = logging.getLogger(__name__)


class UserService:
    """Upsert-by-subject over the `users` table. Stateless; bound to one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_google_id(self, google_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.google_id == google_id))
        return result.scalar_one_or_none()

    async def resolve_identity(self, claims: Mapping[str, Any]) -> Identity:
        """
        Return the Identity for verified token claims, creating the user if needed.

        Idempotent: repeated calls with the same `sub` never create a second row.

        Raises:
            AuthError: the claims lack a subject or an email
            DatabaseError: the users table could not be read or written
        """
        google_id = claims.get("sub")
        email = claims.get("email")
        if not google_id or not email:
            raise AuthError(AuthError.INVALID_TOKEN, context={"detail": "token lacks sub/email claims"})

        try:
            user = await self.get_by_google_id(google_id)
            if user is None:
                user = await self._provision(google_id, email, claims.get("name"))
        except SQLAlchemyError as e:
            logger.error("Database error resolving user %s: %s", google_id, e, exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        return Identity(id=user.id, email=user.email, name=user.name or None)

    async def _provision(self, google_id: str, email: str, name: Optional[str]) -> User:
        user = User(google_id=google_id, email=email, name=name)
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Authentication runs before any other write of the request,
            # so rolling back the whole session discards nothing else
            await self.db.rollback()
            logger.warning("Concurrent first login for %s; reusing existing user", google_id)
            existing = await self.get_by_google_id(google_id)
            if existing is None:
                raise
            return existing

        logger.info("Provisioned user %s (%s)", user.id, email)
        return user
