"""SQLAlchemy ORM models for Kindling.

All models are exported from this module for convenient imports:
    from app.models import User, Profile

Models are organized by domain:
- user.py: User (account, product tier)
- profile.py: Profile (1:1 with User, wizard progress)
"""

from app.models.base import Base, TimestampMixin
from app.models.profile import Profile
from app.models.user import User

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Accounts
    "User",
    # Profiles
    "Profile",
]
