"""QC Workflow Models.

Pydantic models for the records the QC workflows read and write:
- BaleCreate / BaleUpdate: Inspector input for a bale
- BaleRecord: A stored bale
- PurchaseOrder/Shipment/Container records and their partial updates
- AssignmentRecord, NoteRecord, UserRecord: Supporting records
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, Field

from access.models import Role
from grading.models import Color, Decision, Grade, Stems, Wetness
from qc.errors import QCValidationError


class POStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ShipmentStatus(str, Enum):
    PENDING = "PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    INSPECTED = "INSPECTED"
    COMPLETED = "COMPLETED"


class ContainerStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON_HOLD"


def changed_fields(changes: BaseModel, nullable: FrozenSet[str] = frozenset()) -> Dict[str, Any]:
    """Return the fields a client actually sent, as storable values.

    An explicit null is only accepted for fields listed in nullable.

    Raises:
        QCValidationError: A non-nullable field was sent as null
    """
    fields = changes.model_dump(mode="json", exclude_unset=True)
    for name, value in fields.items():
        if value is None and name not in nullable:
            raise QCValidationError(f"{name} cannot be null", code="FIELD_NOT_NULLABLE")
    return fields


class BaleCreate(BaseModel):
    """Inspector input for a new bale.

    grade, po_id and shipment_id may be sent by older clients. They are
    advisory only: the grade is recomputed and the ancestor IDs come from
    the container's ownership chain.
    """
    bale_number: int = Field(..., gt=0, description="Bale number within the container")
    bale_id_display: str = Field(..., min_length=1, description="Printed bale label")
    weight_kg: float = Field(..., gt=0, description="Weight in kg")
    moisture_pct: Optional[float] = Field(default=None, ge=0, le=100, description="Moisture reading")
    color: Color
    stems: Stems
    wetness: Wetness
    contamination: bool = False
    mixed_material: bool = False
    mold: bool = False
    decision: Decision
    reject_reason: Optional[str] = None
    notes: Optional[str] = None

    grade: Optional[Grade] = Field(default=None, description="Client-computed grade (ignored)")
    po_id: Optional[str] = Field(default=None, description="Client-supplied PO (ignored)")
    shipment_id: Optional[str] = Field(default=None, description="Client-supplied shipment (ignored)")


class BaleUpdate(BaseModel):
    """Partial update of a bale's inspection fields."""
    weight_kg: Optional[float] = Field(default=None, gt=0)
    moisture_pct: Optional[float] = Field(default=None, ge=0, le=100)
    color: Optional[Color] = None
    stems: Optional[Stems] = None
    wetness: Optional[Wetness] = None
    contamination: Optional[bool] = None
    mixed_material: Optional[bool] = None
    mold: Optional[bool] = None
    decision: Optional[Decision] = None
    reject_reason: Optional[str] = None
    notes: Optional[str] = None


# Only these may be cleared with an explicit null
BALE_NULLABLE_FIELDS = frozenset({"moisture_pct", "reject_reason", "notes"})


class BaleRecord(BaseModel):
    """A stored bale."""
    id: str
    container_id: str
    shipment_id: str
    po_id: str
    inspector_id: str
    bale_number: int
    bale_id_display: str
    weight_kg: float
    moisture_pct: Optional[float] = None
    color: Color
    stems: Stems
    wetness: Wetness
    contamination: bool
    mixed_material: bool
    mold: bool
    grade: Grade
    decision: Decision
    reject_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class AssignmentRecord(BaseModel):
    """A POUserAssignment grant."""
    id: str
    po_id: str
    user_id: str
    created_at: datetime


class NoteRecord(BaseModel):
    """A note on a purchase order."""
    id: str
    po_id: str
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime


class UserRecord(BaseModel):
    """A user as visible to colleagues in the same company."""
    id: str
    company_id: str
    email: str
    name: str
    role: Role
    is_active: bool


class PurchaseOrderRecord(BaseModel):
    """A stored purchase order."""
    id: str
    company_id: str
    po_number: str
    customer_name: Optional[str] = None
    status: POStatus
    created_at: datetime


class PurchaseOrderUpdate(BaseModel):
    po_number: Optional[str] = Field(default=None, min_length=1)
    customer_name: Optional[str] = None
    status: Optional[POStatus] = None


class ShipmentRecord(BaseModel):
    """A stored shipment."""
    id: str
    po_id: str
    shipment_number: str
    status: ShipmentStatus
    created_at: datetime


class ShipmentUpdate(BaseModel):
    shipment_number: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ShipmentStatus] = None


class ContainerRecord(BaseModel):
    """A stored container."""
    id: str
    shipment_id: str
    container_code: str
    status: ContainerStatus
    created_at: datetime


class ContainerUpdate(BaseModel):
    container_code: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ContainerStatus] = None
