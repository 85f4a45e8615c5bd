"""
Recortes Backend - User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table: local records of identity-provider subjects.
Who:   Created lazily by UserService on the first successful authentication;
       referenced by every cut through `cuts.user_id`.

Table Design Rationale:
    - UUID primary key: the id is exposed as `userId` on every cut; a
      non-sequential value does not reveal how many users exist
    - google_id UNIQUE: the upsert-by-subject lookup key; the constraint is
      what makes concurrent first logins converge on a single row
    - Users are never deleted by this service
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from recortes.database import Base


class User(Base):
    """A person allowed to own cuts, keyed by the provider's subject identifier."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # The `sub` claim of the verified ID token
    google_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Identity provider subject identifier",
    )

    email: Mapped[str] = mapped_column(String(320), nullable=False)

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
