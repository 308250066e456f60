"""Bale endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from access import Principal
from api.dependencies import get_bale_service, get_principal
from qc import BaleCreate, BaleRecord, BaleService, BaleUpdate


router = APIRouter()


class CreateBaleRequest(BaleCreate):
    """Bale input plus the container it goes into."""
    container_id: str = Field(..., description="Container the bale belongs to")

    def to_create(self) -> BaleCreate:
        return BaleCreate(**self.model_dump(exclude={"container_id"}))


class BulkCreateBalesRequest(BaseModel):
    bales: List[CreateBaleRequest] = Field(..., min_length=1, max_length=500)


class BulkCreateBalesResponse(BaseModel):
    count: int
    bales: List[BaleRecord]


@router.get("", response_model=List[BaleRecord])
def list_bales(
    container_id: Optional[str] = Query(default=None),
    shipment_id: Optional[str] = Query(default=None),
    po_id: Optional[str] = Query(default=None),
    inspector_id: Optional[str] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    principal: Principal = Depends(get_principal),
    service: BaleService = Depends(get_bale_service),
) -> List[BaleRecord]:
    """List bales in the caller's company, ordered by bale number."""
    return service.list_bales(
        principal,
        container_id=container_id,
        shipment_id=shipment_id,
        po_id=po_id,
        inspector_id=inspector_id,
        limit=limit,
    )


@router.post("", response_model=BaleRecord, status_code=201)
def create_bale(
    request: CreateBaleRequest,
    principal: Principal = Depends(get_principal),
    service: BaleService = Depends(get_bale_service),
) -> BaleRecord:
    """Create a bale. Grade and ancestor IDs are computed server-side."""
    return service.create_bale(principal, request.container_id, request.to_create())


@router.post("/bulk", response_model=BulkCreateBalesResponse, status_code=201)
def create_bales(
    request: BulkCreateBalesRequest,
    principal: Principal = Depends(get_principal),
    service: BaleService = Depends(get_bale_service),
) -> BulkCreateBalesResponse:
    """Create several bales at once. Either all are stored or none."""
    records = service.create_bales(
        principal, [(item.container_id, item.to_create()) for item in request.bales]
    )
    return BulkCreateBalesResponse(count=len(records), bales=records)


@router.get("/{bale_id}", response_model=BaleRecord)
def get_bale(
    bale_id: str,
    principal: Principal = Depends(get_principal),
    service: BaleService = Depends(get_bale_service),
) -> BaleRecord:
    return service.get_bale(principal, bale_id)


@router.put("/{bale_id}", response_model=BaleRecord)
def update_bale(
    bale_id: str,
    changes: BaleUpdate,
    principal: Principal = Depends(get_principal),
    service: BaleService = Depends(get_bale_service),
) -> BaleRecord:
    return service.update_bale(principal, bale_id, changes)


@router.delete("/{bale_id}", status_code=204)
def delete_bale(
    bale_id: str,
    principal: Principal = Depends(get_principal),
    service: BaleService = Depends(get_bale_service),
) -> Response:
    service.delete_bale(principal, bale_id)
    return Response(status_code=204)
