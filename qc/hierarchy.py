"""Hierarchy Workflows.

Creates, lists, reads, updates and deletes purchase orders, shipments and
containers. The parent's company always comes from the resolved ownership
chain (or, for a PO, from the principal), never from the request.

Updates need can_edit_any and deletes need can_delete_any. A delete
cascades to everything below the entity.
"""

import sqlite3
from pathlib import Path
from typing import List, Optional

from access import db
from access.errors import ForbiddenError
from access.models import EntityType, OwnershipChain, Principal, ViewScope
from access.policy import get_capabilities
from access.resolver import TenantAccessResolver
from core.observability.logging import get_logger
from qc.errors import DuplicateError
from qc.models import (
    ContainerRecord,
    ContainerUpdate,
    POStatus,
    PurchaseOrderRecord,
    PurchaseOrderUpdate,
    ShipmentRecord,
    ShipmentUpdate,
    changed_fields,
)


logger = get_logger(__name__)


def _label(entity_type: EntityType) -> str:
    return entity_type.value.replace("_", " ")


class HierarchyService:
    """PO → Shipment → Container entities within a tenant."""

    def __init__(self, resolver: TenantAccessResolver, db_path: Path):
        self.resolver = resolver
        self.db_path = db_path

    def _require_create(self, principal: Principal, entity_type: EntityType) -> None:
        if not get_capabilities(principal.role).can_create_entities:
            raise ForbiddenError(
                entity_type.value,
                message=f"Access denied. Your role cannot create a {_label(entity_type)}.",
            )

    def _require_edit(self, principal: Principal, entity_type: EntityType, entity_id: str) -> None:
        if not get_capabilities(principal.role).can_edit_any:
            raise ForbiddenError(
                entity_type.value, entity_id,
                message=f"Access denied. Only supervisors can update a {_label(entity_type)}.",
            )
        self.resolver.require_access(principal, entity_type, entity_id)

    def _require_delete(self, principal: Principal, entity_type: EntityType, entity_id: str) -> None:
        if not get_capabilities(principal.role).can_delete_any:
            raise ForbiddenError(
                entity_type.value, entity_id,
                message=f"Access denied. Only supervisors can delete a {_label(entity_type)}.",
            )
        self.resolver.require_access(principal, entity_type, entity_id)

    # -------------------------------------------------------------------------
    # Purchase orders
    # -------------------------------------------------------------------------

    def create_purchase_order(
        self,
        principal: Principal,
        po_number: str,
        customer_name: Optional[str] = None,
    ) -> OwnershipChain:
        """Create a PO in the principal's company.

        Raises:
            DuplicateError: The PO number is already used in the company
        """
        self._require_create(principal, EntityType.PURCHASE_ORDER)
        try:
            po_id = db.add_purchase_order(
                principal.company_id, po_number, customer_name=customer_name, db_path=self.db_path
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateError("PO number already exists", code="DUPLICATE_PO") from e
        logger.info(f"Purchase order {po_number} created", extra_fields={"po_id": po_id})
        return OwnershipChain(company_id=principal.company_id, po_id=po_id)

    def list_purchase_orders(
        self,
        principal: Principal,
        status: Optional[POStatus] = None,
    ) -> List[PurchaseOrderRecord]:
        """List POs in the principal's company.

        Roles limited to assigned POs see only the POs they are assigned to.
        """
        caps = get_capabilities(principal.role)
        rows = db.list_purchase_orders(
            principal.company_id,
            status=status.value if status else None,
            assigned_user_id=None if caps.view_scope == ViewScope.ALL_IN_COMPANY else principal.user_id,
            db_path=self.db_path,
        )
        return [PurchaseOrderRecord(**row) for row in rows]

    def get_purchase_order(self, principal: Principal, po_id: str) -> PurchaseOrderRecord:
        self.resolver.require_access(principal, EntityType.PURCHASE_ORDER, po_id)
        return PurchaseOrderRecord(**db.get_purchase_order(po_id, db_path=self.db_path))

    def update_purchase_order(
        self,
        principal: Principal,
        po_id: str,
        changes: PurchaseOrderUpdate,
    ) -> PurchaseOrderRecord:
        """Update a PO. customer_name may be cleared with null.

        Raises:
            QCValidationError: po_number or status sent as null
            DuplicateError: The new PO number is already used in the company
        """
        self._require_edit(principal, EntityType.PURCHASE_ORDER, po_id)
        fields = changed_fields(changes, nullable=frozenset({"customer_name"}))
        try:
            db.update_purchase_order(po_id, fields, db_path=self.db_path)
        except sqlite3.IntegrityError as e:
            raise DuplicateError("PO number already exists", code="DUPLICATE_PO") from e
        return self.get_purchase_order(principal, po_id)

    def delete_purchase_order(self, principal: Principal, po_id: str) -> None:
        """Delete a PO and everything under it."""
        self._require_delete(principal, EntityType.PURCHASE_ORDER, po_id)
        db.delete_purchase_order(po_id, db_path=self.db_path)
        logger.info("Purchase order deleted", extra_fields={"po_id": po_id})

    # -------------------------------------------------------------------------
    # Shipments
    # -------------------------------------------------------------------------

    def create_shipment(self, principal: Principal, po_id: str, shipment_number: str) -> OwnershipChain:
        """Create a shipment under a PO the principal can access.

        The first shipment moves an OPEN PO to IN_PROGRESS.
        """
        self._require_create(principal, EntityType.SHIPMENT)
        chain = self.resolver.require_access(principal, EntityType.PURCHASE_ORDER, po_id)
        shipment_id = db.add_shipment(chain.po_id, shipment_number, db_path=self.db_path)

        po = db.get_purchase_order(chain.po_id, db_path=self.db_path)
        if po["status"] == POStatus.OPEN.value:
            db.update_purchase_order(chain.po_id, {"status": POStatus.IN_PROGRESS.value},
                                     db_path=self.db_path)

        logger.info(f"Shipment {shipment_number} created", extra_fields={"shipment_id": shipment_id})
        return chain.model_copy(update={"shipment_id": shipment_id})

    def list_shipments(self, principal: Principal, po_id: str) -> List[ShipmentRecord]:
        """List shipments under a PO the principal can access."""
        self.resolver.require_access(principal, EntityType.PURCHASE_ORDER, po_id)
        return [ShipmentRecord(**row) for row in db.list_shipments(po_id, db_path=self.db_path)]

    def get_shipment(self, principal: Principal, shipment_id: str) -> ShipmentRecord:
        self.resolver.require_access(principal, EntityType.SHIPMENT, shipment_id)
        return ShipmentRecord(**db.get_shipment(shipment_id, db_path=self.db_path))

    def update_shipment(
        self,
        principal: Principal,
        shipment_id: str,
        changes: ShipmentUpdate,
    ) -> ShipmentRecord:
        self._require_edit(principal, EntityType.SHIPMENT, shipment_id)
        db.update_shipment(shipment_id, changed_fields(changes), db_path=self.db_path)
        return self.get_shipment(principal, shipment_id)

    def delete_shipment(self, principal: Principal, shipment_id: str) -> None:
        """Delete a shipment with its containers and bales."""
        self._require_delete(principal, EntityType.SHIPMENT, shipment_id)
        db.delete_shipment(shipment_id, db_path=self.db_path)
        logger.info("Shipment deleted", extra_fields={"shipment_id": shipment_id})

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    def create_container(self, principal: Principal, shipment_id: str, container_code: str) -> OwnershipChain:
        """Create a container under a shipment the principal can access."""
        self._require_create(principal, EntityType.CONTAINER)
        chain = self.resolver.require_access(principal, EntityType.SHIPMENT, shipment_id)
        container_id = db.add_container(chain.shipment_id, container_code, db_path=self.db_path)
        logger.info(f"Container {container_code} created", extra_fields={"container_id": container_id})
        return chain.model_copy(update={"container_id": container_id})

    def list_containers(self, principal: Principal, shipment_id: str) -> List[ContainerRecord]:
        """List containers in a shipment the principal can access."""
        self.resolver.require_access(principal, EntityType.SHIPMENT, shipment_id)
        return [ContainerRecord(**row) for row in db.list_containers(shipment_id, db_path=self.db_path)]

    def get_container(self, principal: Principal, container_id: str) -> ContainerRecord:
        self.resolver.require_access(principal, EntityType.CONTAINER, container_id)
        return ContainerRecord(**db.get_container(container_id, db_path=self.db_path))

    def update_container(
        self,
        principal: Principal,
        container_id: str,
        changes: ContainerUpdate,
    ) -> ContainerRecord:
        self._require_edit(principal, EntityType.CONTAINER, container_id)
        db.update_container(container_id, changed_fields(changes), db_path=self.db_path)
        return self.get_container(principal, container_id)

    def delete_container(self, principal: Principal, container_id: str) -> None:
        """Delete a container with its bales."""
        self._require_delete(principal, EntityType.CONTAINER, container_id)
        db.delete_container(container_id, db_path=self.db_path)
        logger.info("Container deleted", extra_fields={"container_id": container_id})
