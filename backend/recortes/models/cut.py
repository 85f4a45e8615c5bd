"""
Recortes Backend - Cut SQLAlchemy Model
========================================

What:  ORM model representing the `cuts` table.
Why:   Maps cut metadata rows to Python objects for type-safe queries.
Who:   Used by CutService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - Integer primary key: ids are used in URLs (/cuts/42) and the original
      clients already depend on numeric ids
    - Seven free-text attributes, all NOT NULL: every cut is fully described
      at creation; updates can change values but never clear them
    - image_url: the public URL handed back by the blob store; the object
      name is recovered from it when the cut is deleted
    - user_id: owner, assigned once; every query filters on it

    Index on (user_id, display_order):
        The default listing is "my cuts ordered by display order", so the
        composite index serves both the ownership filter and the sort.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from recortes.database import Base


class CutStatus(str, enum.Enum):
    """Business status of a cut. Not a deletion marker."""

    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    PENDING = "PENDING"


# Bounds of the column types below (int4 ids and orders, varchar(255) text)
INT4_MAX = 2**31 - 1
TEXT_MAX_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Cut(Base):
    """
    One cutting-pattern variant with its associated image.

    Lifecycle:
        1. Created by CutService.create after the image upload succeeded
        2. Updated in place (partial field replacement, optional new image)
        3. Deleted permanently; the blob is removed on a best-effort basis
    """

    __tablename__ = "cuts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    sku: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)
    model_name: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)
    cut_type: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)
    position: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)
    product_type: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)
    material: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)
    material_color: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)

    display_order: Mapped[int] = mapped_column(Integer, nullable=False)

    # Defaults to ACTIVE when the client does not send a status
    status: Mapped[CutStatus] = mapped_column(
        Enum(CutStatus, name="cut_status"),
        nullable=False,
        default=CutStatus.ACTIVE,
        server_default=text("'ACTIVE'"),
    )

    image_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Public URL of the cut image in the object store",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_cuts_user_display_order", "user_id", "display_order"),
    )

    def __repr__(self) -> str:
        return f"<Cut(id={self.id}, sku='{self.sku}', user_id={self.user_id})>"
