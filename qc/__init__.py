"""QC Workflows Package.

Composes the access resolver and the grade classifier into the
operations route handlers call:
- BaleService: create (with server-side grading), bulk create, list, read,
  update, delete
- HierarchyService: create, list, read, update and delete POs, shipments
  and containers
- AssignmentService: supervisor-only PO grants for customers/suppliers
- NoteService: PO notes with per-role edit and delete scope
- UserService: same-company user reads
"""

from qc.errors import QCError, QCValidationError, DuplicateError
from qc.models import (
    BaleCreate,
    BaleUpdate,
    BaleRecord,
    POStatus,
    ShipmentStatus,
    ContainerStatus,
    PurchaseOrderRecord,
    PurchaseOrderUpdate,
    ShipmentRecord,
    ShipmentUpdate,
    ContainerRecord,
    ContainerUpdate,
    AssignmentRecord,
    NoteRecord,
    UserRecord,
)
from qc.bales import BaleService
from qc.hierarchy import HierarchyService
from qc.assignments import AssignmentService
from qc.notes import NoteService
from qc.users import UserService

__all__ = [
    # Errors
    "QCError",
    "QCValidationError",
    "DuplicateError",
    # Models
    "BaleCreate",
    "BaleUpdate",
    "BaleRecord",
    "POStatus",
    "ShipmentStatus",
    "ContainerStatus",
    "PurchaseOrderRecord",
    "PurchaseOrderUpdate",
    "ShipmentRecord",
    "ShipmentUpdate",
    "ContainerRecord",
    "ContainerUpdate",
    "AssignmentRecord",
    "NoteRecord",
    "UserRecord",
    # Services
    "BaleService",
    "HierarchyService",
    "AssignmentService",
    "NoteService",
    "UserService",
]
