"""Create users and cuts tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: `users` (provisioned on first login) and `cuts`
       (one row per cut image, owned by a user).
How:   PostgreSQL types: native UUID, TIMESTAMP WITH TIME ZONE, and an
       enum type for the cut status.

Rollback: downgrade() drops both tables and the enum type (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

cut_status = postgresql.ENUM("ACTIVE", "EXPIRED", "PENDING", name="cut_status", create_type=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "google_id",
            sa.String(255),
            nullable=False,
            comment="Identity provider subject identifier",
        ),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique: concurrent first logins of one subject must converge on one row
    op.create_index("ix_users_google_id", "users", ["google_id"], unique=True)

    cut_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "cuts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sku", sa.String(255), nullable=False),
        sa.Column("model_name", sa.String(255), nullable=False),
        sa.Column("cut_type", sa.String(255), nullable=False),
        sa.Column("position", sa.String(255), nullable=False),
        sa.Column("product_type", sa.String(255), nullable=False),
        sa.Column("material", sa.String(255), nullable=False),
        sa.Column("material_color", sa.String(255), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            cut_status,
            nullable=False,
            server_default=sa.text("'ACTIVE'"),
        ),
        sa.Column(
            "image_url",
            sa.Text(),
            nullable=False,
            comment="Public URL of the cut image in the object store",
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )

    # Default listing: one owner's cuts ordered by display order
    op.create_index(
        "idx_cuts_user_display_order",
        "cuts",
        ["user_id", "display_order"],
    )


def downgrade() -> None:
    """Drop both tables. WARNING: destructive, all cut records are lost."""
    op.drop_index("idx_cuts_user_display_order", table_name="cuts")
    op.drop_table("cuts")
    cut_status.drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_users_google_id", table_name="users")
    op.drop_table("users")
