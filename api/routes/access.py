"""Access check endpoint.

Lets clients ask whether the caller can see an entity before rendering
it. Non-ALLOW outcomes surface as 404/403/503 like every other route.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from access import AccessOutcome, EntityType, OwnershipChain, Principal, TenantAccessResolver
from api.dependencies import get_principal, get_resolver


router = APIRouter()


class AccessCheckResponse(BaseModel):
    """Resolution for an allowed entity."""
    outcome: AccessOutcome
    entity_type: EntityType
    entity_id: str
    chain: Optional[OwnershipChain] = None


@router.get("/{entity_type}/{entity_id}", response_model=AccessCheckResponse)
def check_access(
    entity_type: EntityType,
    entity_id: str,
    principal: Principal = Depends(get_principal),
    resolver: TenantAccessResolver = Depends(get_resolver),
) -> AccessCheckResponse:
    """Resolve the caller's access to an entity."""
    resolution = resolver.resolve_access(principal, entity_type, entity_id)
    chain = resolution.raise_for_outcome()
    return AccessCheckResponse(
        outcome=resolution.outcome,
        entity_type=resolution.entity_type,
        entity_id=resolution.entity_id,
        chain=chain,
    )
