"""Tiers API router.

Read-only catalogue of tier profile schemas and feature entitlements.
"""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter

from app.core.responses import DataResponse
from app.services.tier_schema import TierSchema, get_tier_schema, list_tier_schemas

router = APIRouter()


def _schema_to_dict(schema: TierSchema) -> dict[str, Any]:
    return {
        "tier": schema.tier.value,
        "fields": [
            {
                "name": field_spec.name,
                "kind": field_spec.kind.value,
                "required": field_spec.required,
                "choices": list(field_spec.choices),
                "min_length": field_spec.min_length,
            }
            for field_spec in schema.fields
        ],
        "features": asdict(schema.features),
    }


@router.get("")
async def list_tiers() -> DataResponse[list[dict]]:
    """List all tiers with their schemas and features."""
    return DataResponse(data=[_schema_to_dict(s) for s in list_tier_schemas()])


@router.get("/{tier}")
async def get_tier(tier: str) -> DataResponse[dict]:
    """Get one tier's schema and features. Unknown tier → 422."""
    return DataResponse(data=_schema_to_dict(get_tier_schema(tier)))
