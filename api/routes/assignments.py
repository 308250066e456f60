"""PO assignment endpoints (supervisor only)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel

from access import Principal
from api.dependencies import get_assignment_service, get_principal
from qc import AssignmentRecord, AssignmentService


router = APIRouter()


class CreateAssignmentRequest(BaseModel):
    """Grant a user access to a PO."""
    po_id: str
    user_id: str


@router.get("", response_model=List[AssignmentRecord])
def list_assignments(
    po_id: Optional[str] = Query(None, description="Filter by PO"),
    user_id: Optional[str] = Query(None, description="Filter by user"),
    principal: Principal = Depends(get_principal),
    service: AssignmentService = Depends(get_assignment_service),
) -> List[AssignmentRecord]:
    return service.list_assignments(principal, po_id=po_id, user_id=user_id)


@router.post("", response_model=AssignmentRecord, status_code=201)
def create_assignment(
    request: CreateAssignmentRequest,
    principal: Principal = Depends(get_principal),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentRecord:
    return service.create_assignment(principal, request.po_id, request.user_id)


@router.delete("/{assignment_id}", status_code=204)
def delete_assignment(
    assignment_id: str,
    principal: Principal = Depends(get_principal),
    service: AssignmentService = Depends(get_assignment_service),
) -> Response:
    service.delete_assignment(principal, assignment_id)
    return Response(status_code=204)
