"""User endpoints."""

from fastapi import APIRouter, Depends

from access import Principal
from api.dependencies import get_principal, get_user_service
from qc import UserRecord, UserService


router = APIRouter()


@router.get("/{user_id}", response_model=UserRecord)
def get_user(
    user_id: str,
    principal: Principal = Depends(get_principal),
    service: UserService = Depends(get_user_service),
) -> UserRecord:
    """Get a user in the caller's company."""
    return service.get_user(principal, user_id)
