"""Create profiles table.

Revision ID: 002_profiles
Revises: 001_users
Create Date: 2026-10-17

One profile per user. Holds common fields, the tagged tier sub-document,
wizard progress (watermark, per-step outcomes, completion time), and the
optimistic-concurrency version.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "002_profiles"
down_revision: str | None = "001_users"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column(
            "id",
            sa.UUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("tier", sa.String(20), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column(
            "interests",
            JSONB(),
            nullable=True,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("latitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("longitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("tier_profile", JSONB(), nullable=True),
        sa.Column(
            "photos",
            JSONB(),
            nullable=True,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("wizard_step", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "wizard_outcomes",
            JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "wizard_completed_at", sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "tier IN ('spark', 'connect', 'forever')",
            name="ck_profiles_tier",
        ),
        sa.CheckConstraint(
            "wizard_step >= 0 AND wizard_step <= 4",
            name="ck_profiles_wizard_step_range",
        ),
        sa.CheckConstraint(
            "gender IS NULL OR gender IN ('male', 'female', 'non_binary', 'other')",
            name="ck_profiles_gender",
        ),
    )
    op.create_index("idx_profile_user_id", "profiles", ["user_id"], unique=True)
    op.create_index("idx_profile_tier", "profiles", ["tier"])


def downgrade() -> None:
    op.drop_index("idx_profile_tier", table_name="profiles")
    op.drop_index("idx_profile_user_id", table_name="profiles")
    op.drop_table("profiles")
