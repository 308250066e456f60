"""Bale Workflows.

Creating a bale:
1. Only roles with can_create_bales may create bales
2. The container must resolve to ALLOW for the principal
3. The grade is recomputed by the classifier; a client grade is ignored
4. The decision must be consistent with the recomputed grade
5. shipment_id / po_id are copied from the container's ownership chain
6. inspector_id is always the principal

Bulk creation applies the same rules to every bale, resolves each
distinct container once and stores the batch in a single transaction.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from access import db
from access.errors import ForbiddenError, NotFoundError
from access.models import EntityType, OwnershipChain, Principal, ViewScope
from access.policy import get_capabilities
from access.resolver import TenantAccessResolver
from core.observability.logging import get_logger, with_correlation
from grading.classifier import decision_allowed, explain_grade
from grading.models import Decision
from qc.errors import DuplicateError, QCValidationError
from qc.models import (
    BALE_NULLABLE_FIELDS,
    BaleCreate,
    BaleRecord,
    BaleUpdate,
    changed_fields,
)


logger = get_logger(__name__)


@contextmanager
def _unique_bale_numbers():
    try:
        yield
    except sqlite3.IntegrityError as e:
        if "UNIQUE" in str(e):
            raise DuplicateError(
                "Bale number already exists for this container",
                code="DUPLICATE_BALE",
            ) from e
        raise


class BaleService:
    """Bale create/read/update/delete behind the access resolver."""

    def __init__(self, resolver: TenantAccessResolver, db_path: Path):
        self.resolver = resolver
        self.db_path = db_path

    def _require_create(self, principal: Principal) -> None:
        if not get_capabilities(principal.role).can_create_bales:
            raise ForbiddenError(
                EntityType.BALE.value,
                message="Access denied. Only inspectors and supervisors can create bales.",
            )

    def create_bale(self, principal: Principal, container_id: str, data: BaleCreate) -> BaleRecord:
        """Create a bale in a container.

        Raises:
            ForbiddenError: Role cannot create bales, or missing PO assignment
            NotFoundError: Container missing or in another company
            OwnershipLookupError: The ownership store failed
            QCValidationError: Decision inconsistent with the grade
            DuplicateError: Bale number already used in this container
        """
        self._require_create(principal)
        chain = self.resolver.require_access(principal, EntityType.CONTAINER, container_id)

        with with_correlation(entity_type=EntityType.CONTAINER.value, entity_id=container_id):
            values = self._prepare(principal, chain, data)

            with _unique_bale_numbers():
                bale_id = db.add_bale(values, db_path=self.db_path)

            logger.info(
                f"Bale {data.bale_id_display} created",
                extra_fields={"bale_id": bale_id, "grade": values["grade"]},
            )

        return self._load(bale_id)

    def create_bales(
        self,
        principal: Principal,
        items: Sequence[Tuple[str, BaleCreate]],
    ) -> List[BaleRecord]:
        """Create several bales, each given as (container_id, data).

        Nothing is stored unless every bale passes the access, grading and
        uniqueness checks.

        Raises:
            Same as create_bale, for the first failing bale
        """
        self._require_create(principal)
        if not items:
            raise QCValidationError("No bales to create", code="EMPTY_BATCH")

        chains: Dict[str, OwnershipChain] = {}
        for container_id, _ in items:
            if container_id not in chains:
                chains[container_id] = self.resolver.require_access(
                    principal, EntityType.CONTAINER, container_id
                )

        rows = [self._prepare(principal, chains[container_id], data) for container_id, data in items]

        with _unique_bale_numbers():
            bale_ids = db.add_bales(rows, db_path=self.db_path)

        logger.info(
            f"{len(bale_ids)} bales created",
            extra_fields={"containers": len(chains)},
        )
        return [self._load(bale_id) for bale_id in bale_ids]

    def list_bales(
        self,
        principal: Principal,
        container_id: Optional[str] = None,
        shipment_id: Optional[str] = None,
        po_id: Optional[str] = None,
        inspector_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[BaleRecord]:
        """List bales in the principal's company.

        The most specific hierarchy filter given must resolve to ALLOW.
        Roles limited to assigned POs only ever see bales under those POs.
        """
        for entity_type, entity_id in (
            (EntityType.CONTAINER, container_id),
            (EntityType.SHIPMENT, shipment_id),
            (EntityType.PURCHASE_ORDER, po_id),
        ):
            if entity_id:
                self.resolver.require_access(principal, entity_type, entity_id)
                break

        caps = get_capabilities(principal.role)
        rows = db.list_bales(
            principal.company_id,
            container_id=container_id,
            shipment_id=shipment_id,
            po_id=po_id,
            inspector_id=inspector_id,
            assigned_user_id=None if caps.view_scope == ViewScope.ALL_IN_COMPANY else principal.user_id,
            limit=limit,
            db_path=self.db_path,
        )
        return [BaleRecord(**row) for row in rows]

    def get_bale(self, principal: Principal, bale_id: str) -> BaleRecord:
        """Read a bale the principal can access."""
        self.resolver.require_access(principal, EntityType.BALE, bale_id)
        return self._load(bale_id)

    def update_bale(self, principal: Principal, bale_id: str, changes: BaleUpdate) -> BaleRecord:
        """Update inspection fields and regrade.

        Requires can_edit_any. The grade is recomputed from the merged
        measurements. Only moisture_pct, reject_reason and notes may be
        cleared with null.

        Raises:
            QCValidationError: A non-nullable field was sent as null, or the
                decision is inconsistent with the new grade
        """
        if not get_capabilities(principal.role).can_edit_any:
            raise ForbiddenError(EntityType.BALE.value, bale_id,
                                 message="Access denied. Only supervisors can update bales.")

        self.resolver.require_access(principal, EntityType.BALE, bale_id)
        current = self._load(bale_id)

        changed_fields(changes, nullable=BALE_NULLABLE_FIELDS)
        merged = current.model_copy(update=changes.model_dump(exclude_unset=True))
        explanation = self._grade(
            merged.moisture_pct, merged.color, merged.wetness, merged.mold,
            merged.contamination, merged.decision,
        )

        fields: Dict[str, Any] = {
            "weight_kg": merged.weight_kg,
            "moisture_pct": merged.moisture_pct,
            "color": merged.color.value,
            "stems": merged.stems.value,
            "wetness": merged.wetness.value,
            "contamination": int(merged.contamination),
            "mixed_material": int(merged.mixed_material),
            "mold": int(merged.mold),
            "grade": explanation.grade.value,
            "decision": merged.decision.value,
            "reject_reason": merged.reject_reason,
            "notes": merged.notes,
        }
        db.update_bale_fields(bale_id, fields, db_path=self.db_path)

        return self._load(bale_id)

    def delete_bale(self, principal: Principal, bale_id: str) -> None:
        """Delete a bale. Requires can_delete_any."""
        if not get_capabilities(principal.role).can_delete_any:
            raise ForbiddenError(EntityType.BALE.value, bale_id,
                                 message="Access denied. Only supervisors can delete bales.")

        self.resolver.require_access(principal, EntityType.BALE, bale_id)

        db.delete_bale(bale_id, db_path=self.db_path)

    def _prepare(self, principal: Principal, chain: OwnershipChain, data: BaleCreate) -> Dict[str, Any]:
        """Grade a new bale and build its row from the container's chain."""
        explanation = self._grade(
            data.moisture_pct, data.color, data.wetness, data.mold, data.contamination,
            data.decision,
        )

        if data.grade is not None and data.grade != explanation.grade:
            logger.warning(
                "Client grade overridden",
                extra_fields={
                    "client_grade": data.grade.value,
                    "grade": explanation.grade.value,
                    "rule": explanation.rule,
                },
            )

        if (data.po_id and data.po_id != chain.po_id) or \
           (data.shipment_id and data.shipment_id != chain.shipment_id):
            logger.warning(
                "Client ancestor IDs ignored",
                extra_fields={
                    "client_po_id": data.po_id,
                    "client_shipment_id": data.shipment_id,
                },
            )

        values = data.model_dump(exclude={"grade", "po_id", "shipment_id"})
        values.update(
            container_id=chain.container_id,
            shipment_id=chain.shipment_id,
            po_id=chain.po_id,
            inspector_id=principal.user_id,
            grade=explanation.grade.value,
            color=data.color.value,
            stems=data.stems.value,
            wetness=data.wetness.value,
            decision=data.decision.value,
        )
        return values

    def _grade(self, moisture_pct, color, wetness, mold, contamination, decision: Decision):
        explanation = explain_grade(moisture_pct, color, wetness, mold, contamination)
        if not decision_allowed(explanation.grade, decision):
            raise QCValidationError(
                f"Decision {decision.value} is not allowed for grade {explanation.grade.value}",
                code="DECISION_GRADE_MISMATCH",
            )
        return explanation

    def _load(self, bale_id: str) -> BaleRecord:
        row = db.get_bale(bale_id, db_path=self.db_path)
        if row is None:
            raise NotFoundError(EntityType.BALE.value, bale_id)
        return BaleRecord(**row)
