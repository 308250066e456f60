"""Access Control Data Models.

This module defines the Pydantic models for tenant-scoped access resolution:
- Role / ViewScope / NoteEditScope: Closed sets used by the capability policy
- Capabilities: What a role may do
- Principal: The already verified caller
- EntityType / OwnershipChain: What is being resolved and its ancestors
- AccessOutcome / AccessResolution: The result of access resolution
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from access.errors import (
    ForbiddenError,
    NotFoundError,
    OwnershipLookupError,
    UnknownRoleError,
)


class Role(str, Enum):
    """User roles. Any other value is rejected at the boundary."""
    SUPERVISOR = "SUPERVISOR"
    INSPECTOR = "INSPECTOR"
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Parse a role string, rejecting anything outside the closed set.

        Raises:
            UnknownRoleError: If value is not a known role
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownRoleError(value) from None


class ViewScope(str, Enum):
    """How much of its company a role can see."""
    ALL_IN_COMPANY = "ALL_IN_COMPANY"  # Every entity in the principal's company
    ASSIGNED_ONLY = "ASSIGNED_ONLY"    # Only POs with a POUserAssignment


class NoteEditScope(str, Enum):
    """Which PO notes a role can edit."""
    OWN_ONLY = "OWN_ONLY"
    ANY = "ANY"


class Capabilities(BaseModel):
    """Capability flags for a role."""
    can_create_entities: bool = Field(default=False, description="Create PO/Shipment/Container")
    can_create_bales: bool = Field(default=False, description="Create bales")
    can_edit_any: bool = Field(default=False, description="Edit any entity instance")
    can_delete_any: bool = Field(default=False, description="Delete any entity instance")
    view_scope: ViewScope = Field(default=ViewScope.ASSIGNED_ONLY)
    note_edit_scope: NoteEditScope = Field(default=NoteEditScope.OWN_ONLY)

    class Config:
        frozen = True


class Principal(BaseModel):
    """Verified identity of the caller.

    Produced by token verification outside this package. The role has
    already been parsed into the closed Role set.
    """
    user_id: str = Field(..., description="User ID")
    company_id: str = Field(..., description="Company (tenant) ID")
    role: Role = Field(..., description="User role")

    class Config:
        frozen = True


class EntityType(str, Enum):
    """Entity types the resolver can gate."""
    PURCHASE_ORDER = "purchase_order"
    SHIPMENT = "shipment"
    CONTAINER = "container"
    BALE = "bale"
    USER = "user"  # Same-company rule only; no ownership chain


class OwnershipChain(BaseModel):
    """An entity's ancestor IDs up to its company.

    Fields below the requested entity type are None, e.g. a shipment chain
    has no container_id or bale_id.
    """
    company_id: str = Field(..., description="Root company (tenant)")
    po_id: str = Field(..., description="Root purchase order")
    shipment_id: Optional[str] = None
    container_id: Optional[str] = None
    bale_id: Optional[str] = None

    class Config:
        frozen = True


class AccessOutcome(str, Enum):
    """Decision produced by the resolver."""
    ALLOW = "ALLOW"
    NOT_FOUND = "NOT_FOUND"        # Absent OR another tenant's; never distinguished
    FORBIDDEN = "FORBIDDEN"        # Same tenant, missing PO assignment
    LOOKUP_ERROR = "LOOKUP_ERROR"  # The ownership store failed to answer


class AccessResolution(BaseModel):
    """Result of access resolution.

    Only ALLOW carries an ownership chain (and not for users). Only
    LOOKUP_ERROR carries an error.

    Attributes:
        outcome: The decision
        entity_type: The entity type that was resolved
        entity_id: The entity ID that was resolved
        chain: Ownership chain (ALLOW only)
        error: The store failure (LOOKUP_ERROR only)
    """
    outcome: AccessOutcome
    entity_type: EntityType
    entity_id: str
    chain: Optional[OwnershipChain] = None
    error: Optional[OwnershipLookupError] = None

    class Config:
        arbitrary_types_allowed = True

    @property
    def allowed(self) -> bool:
        return self.outcome == AccessOutcome.ALLOW

    def raise_for_outcome(self) -> OwnershipChain:
        """Return the chain on ALLOW, otherwise raise the matching error.

        Raises:
            NotFoundError: On NOT_FOUND
            ForbiddenError: On FORBIDDEN
            OwnershipLookupError: On LOOKUP_ERROR
        """
        if self.outcome == AccessOutcome.ALLOW:
            return self.chain
        if self.outcome == AccessOutcome.NOT_FOUND:
            raise NotFoundError(self.entity_type.value, self.entity_id)
        if self.outcome == AccessOutcome.FORBIDDEN:
            raise ForbiddenError(self.entity_type.value, self.entity_id)
        raise self.error
