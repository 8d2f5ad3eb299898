"""Profile model - a user's dating profile.

References User (1:1). Holds the common profile fields, the
tagged tier sub-document, and the profile wizard state.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User

_DEFAULT_EMPTY_JSONB_LIST = text("'[]'::jsonb")
_DEFAULT_EMPTY_JSONB_OBJECT = text("'{}'::jsonb")


class Profile(Base, TimestampMixin):
    """Dating profile, one per user.

    ``tier_profile`` stores the sub-document of a single tier tagged with
    that tier, e.g. ``{"tier": "connect", "values": [...]}``. Only the
    variant matching ``tier`` is considered active.

    ``wizard_outcomes`` maps a wizard step number (string key) to
    ``"saved"`` or ``"skipped"``.

    ``version`` is the optimistic-concurrency counter; SQLAlchemy bumps it
    on every UPDATE and raises StaleDataError when a concurrent write won.
    """

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "tier IN ('spark', 'connect', 'forever')",
            name="ck_profiles_tier",
        ),
        CheckConstraint(
            "wizard_step >= 0 AND wizard_step <= 4",
            name="ck_profiles_wizard_step_range",
        ),
        CheckConstraint(
            "gender IS NULL OR gender IN ('male', 'female', 'non_binary', 'other')",
            name="ck_profiles_gender",
        ),
    )

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    )

    # User reference (1:1)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    tier: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    # Registration fields
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    last_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    birth_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    gender: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    # Basic info (wizard step 1)
    bio: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    age: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    interests: Mapped[list[str] | None] = mapped_column(
        JSONB,
        nullable=True,
        server_default=_DEFAULT_EMPTY_JSONB_LIST,
        default=list,
    )

    # Location (wizard step 2)
    city: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    country: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    latitude: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 7),
        nullable=True,
    )
    longitude: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 7),
        nullable=True,
    )

    # Tier sub-document (wizard step 3)
    tier_profile: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB,
        nullable=True,
    )

    # Photos (wizard step 4), index 0 is the main photo
    photos: Mapped[list[str] | None] = mapped_column(
        JSONB,
        nullable=True,
        server_default=_DEFAULT_EMPTY_JSONB_LIST,
        default=list,
    )

    # Wizard state
    wizard_step: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("0"),
        default=0,
    )
    wizard_outcomes: Mapped[dict[str, str]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=_DEFAULT_EMPTY_JSONB_OBJECT,
        default=dict,
    )
    wizard_completed_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )

    # Optimistic concurrency
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("1"),
    )

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="profile",
    )
