"""PO Assignment Workflows.

Assignments grant CUSTOMER/SUPPLIER users visibility into one purchase
order. Only supervisors manage them, and only for POs and users in their
own company.
"""

import sqlite3
from pathlib import Path
from typing import List, Optional

from access import db
from access.errors import NotFoundError, UnknownRoleError
from access.models import AccessOutcome, EntityType, Principal, Role
from access.policy import ASSIGNABLE_ROLES, require_role
from access.resolver import TenantAccessResolver
from core.observability.logging import get_logger
from qc.errors import DuplicateError, QCValidationError
from qc.models import AssignmentRecord


logger = get_logger(__name__)


class AssignmentService:
    """Supervisor-only management of POUserAssignment grants."""

    def __init__(self, resolver: TenantAccessResolver, db_path: Path):
        self.resolver = resolver
        self.db_path = db_path

    def list_assignments(
        self,
        principal: Principal,
        po_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[AssignmentRecord]:
        """List assignments in the principal's company, optionally filtered."""
        require_role(principal, Role.SUPERVISOR)
        if po_id:
            self.resolver.require_access(principal, EntityType.PURCHASE_ORDER, po_id)

        rows = db.list_assignments(principal.company_id, po_id=po_id, user_id=user_id,
                                   db_path=self.db_path)
        return [AssignmentRecord(**row) for row in rows]

    def create_assignment(self, principal: Principal, po_id: str, user_id: str) -> AssignmentRecord:
        """Grant a customer or supplier access to a PO.

        Raises:
            RoleNotAllowedError: Principal is not a supervisor
            NotFoundError: PO or user missing or in another company
            QCValidationError: Target user's role does not use assignments
            DuplicateError: The user is already assigned to this PO
        """
        require_role(principal, Role.SUPERVISOR)
        self.resolver.require_access(principal, EntityType.PURCHASE_ORDER, po_id)
        self.resolver.require_access(principal, EntityType.USER, user_id)

        user = db.get_user(user_id, db_path=self.db_path)
        try:
            role = Role.parse(user["role"])
        except UnknownRoleError:
            role = None
        if role not in ASSIGNABLE_ROLES:
            raise QCValidationError(
                f"Users with role {user['role']} see every PO in their company and cannot be assigned",
                code="ROLE_NOT_ASSIGNABLE",
            )

        try:
            assignment_id = db.add_assignment(po_id, user_id, db_path=self.db_path)
        except sqlite3.IntegrityError as e:
            raise DuplicateError("User already assigned to this PO",
                                 code="DUPLICATE_ASSIGNMENT") from e

        logger.info(
            "PO assignment created",
            extra_fields={"po_id": po_id, "assigned_user_id": user_id},
        )
        return AssignmentRecord(**db.get_assignment(assignment_id, db_path=self.db_path))

    def delete_assignment(self, principal: Principal, assignment_id: str) -> None:
        """Revoke an assignment.

        An assignment on another company's PO is reported as not found.
        """
        require_role(principal, Role.SUPERVISOR)

        assignment = db.get_assignment(assignment_id, db_path=self.db_path)
        if assignment is None:
            raise NotFoundError("po_assignment", assignment_id)

        resolution = self.resolver.resolve_access(
            principal, EntityType.PURCHASE_ORDER, assignment["po_id"]
        )
        if resolution.outcome == AccessOutcome.NOT_FOUND:
            raise NotFoundError("po_assignment", assignment_id)
        resolution.raise_for_outcome()

        db.delete_assignment(assignment_id, db_path=self.db_path)
        logger.info(
            "PO assignment deleted",
            extra_fields={"po_id": assignment["po_id"], "assigned_user_id": assignment["user_id"]},
        )
