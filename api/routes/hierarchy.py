"""Purchase order, shipment and container endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel

from access import OwnershipChain, Principal
from api.dependencies import get_hierarchy_service, get_principal
from qc import (
    ContainerRecord,
    ContainerUpdate,
    HierarchyService,
    POStatus,
    PurchaseOrderRecord,
    PurchaseOrderUpdate,
    ShipmentRecord,
    ShipmentUpdate,
)


router = APIRouter()


class CreatePurchaseOrderRequest(BaseModel):
    po_number: str
    customer_name: Optional[str] = None


class CreateShipmentRequest(BaseModel):
    po_id: str
    shipment_number: str


class CreateContainerRequest(BaseModel):
    shipment_id: str
    container_code: str


# =============================================================================
# Purchase orders
# =============================================================================

@router.get("/purchase-orders", response_model=List[PurchaseOrderRecord])
def list_purchase_orders(
    status: Optional[POStatus] = Query(default=None),
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> List[PurchaseOrderRecord]:
    """List POs visible to the caller, newest first."""
    return service.list_purchase_orders(principal, status)


@router.post("/purchase-orders", response_model=OwnershipChain, status_code=201)
def create_purchase_order(
    request: CreatePurchaseOrderRequest,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> OwnershipChain:
    return service.create_purchase_order(principal, request.po_number, request.customer_name)


@router.get("/purchase-orders/{po_id}", response_model=PurchaseOrderRecord)
def get_purchase_order(
    po_id: str,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> PurchaseOrderRecord:
    return service.get_purchase_order(principal, po_id)


@router.put("/purchase-orders/{po_id}", response_model=PurchaseOrderRecord)
def update_purchase_order(
    po_id: str,
    changes: PurchaseOrderUpdate,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> PurchaseOrderRecord:
    return service.update_purchase_order(principal, po_id, changes)


@router.delete("/purchase-orders/{po_id}", status_code=204)
def delete_purchase_order(
    po_id: str,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> Response:
    service.delete_purchase_order(principal, po_id)
    return Response(status_code=204)


# =============================================================================
# Shipments
# =============================================================================

@router.get("/shipments", response_model=List[ShipmentRecord])
def list_shipments(
    po_id: str = Query(..., description="PO to list shipments for"),
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> List[ShipmentRecord]:
    return service.list_shipments(principal, po_id)


@router.post("/shipments", response_model=OwnershipChain, status_code=201)
def create_shipment(
    request: CreateShipmentRequest,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> OwnershipChain:
    return service.create_shipment(principal, request.po_id, request.shipment_number)


@router.get("/shipments/{shipment_id}", response_model=ShipmentRecord)
def get_shipment(
    shipment_id: str,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> ShipmentRecord:
    return service.get_shipment(principal, shipment_id)


@router.put("/shipments/{shipment_id}", response_model=ShipmentRecord)
def update_shipment(
    shipment_id: str,
    changes: ShipmentUpdate,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> ShipmentRecord:
    return service.update_shipment(principal, shipment_id, changes)


@router.delete("/shipments/{shipment_id}", status_code=204)
def delete_shipment(
    shipment_id: str,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> Response:
    service.delete_shipment(principal, shipment_id)
    return Response(status_code=204)


# =============================================================================
# Containers
# =============================================================================

@router.get("/containers", response_model=List[ContainerRecord])
def list_containers(
    shipment_id: str = Query(..., description="Shipment to list containers for"),
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> List[ContainerRecord]:
    return service.list_containers(principal, shipment_id)


@router.post("/containers", response_model=OwnershipChain, status_code=201)
def create_container(
    request: CreateContainerRequest,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> OwnershipChain:
    return service.create_container(principal, request.shipment_id, request.container_code)


@router.get("/containers/{container_id}", response_model=ContainerRecord)
def get_container(
    container_id: str,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> ContainerRecord:
    return service.get_container(principal, container_id)


@router.put("/containers/{container_id}", response_model=ContainerRecord)
def update_container(
    container_id: str,
    changes: ContainerUpdate,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> ContainerRecord:
    return service.update_container(principal, container_id, changes)


@router.delete("/containers/{container_id}", status_code=204)
def delete_container(
    container_id: str,
    principal: Principal = Depends(get_principal),
    service: HierarchyService = Depends(get_hierarchy_service),
) -> Response:
    service.delete_container(principal, container_id)
    return Response(status_code=204)
