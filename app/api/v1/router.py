"""API v1 router aggregator.

URL structure with /api/v1 prefix. All v1 endpoint routers are included
here.
"""

from fastapi import APIRouter

from app.api.v1 import auth, profiles, tiers, wizard

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])

# =============================================================================
# Core Resource Routers
# =============================================================================

# Wizard routes first: they share the /profiles prefix with /{profile_id}.
router.include_router(wizard.router, prefix="/profiles", tags=["wizard"])
router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
router.include_router(tiers.router, prefix="/tiers", tags=["tiers"])
