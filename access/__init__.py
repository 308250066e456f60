"""Access - Tenant-scoped authorization for the QC hierarchy.

This package decides whether a verified principal may see an entity in the
Company → PurchaseOrder → Shipment → Container → Bale hierarchy:
- Company isolation: other tenants' entities look exactly like missing ones
- PO assignment: customers and suppliers only see POs granted to them
- Role capability policy: static role → capability table

Usage:
    from access import TenantAccessResolver, SQLiteOwnershipLoader, Principal, Role, EntityType

    resolver = TenantAccessResolver(SQLiteOwnershipLoader(db_path))
    principal = Principal(user_id="u-1", company_id="co-1", role=Role.parse("CUSTOMER"))

    resolution = resolver.resolve_access(principal, EntityType.CONTAINER, container_id)
    if resolution.allowed:
        shipment_id = resolution.chain.shipment_id
"""

from access.errors import (
    AccessError,
    NotFoundError,
    ForbiddenError,
    RoleNotAllowedError,
    OwnershipLookupError,
    UnknownRoleError,
)
from access.models import (
    Role,
    ViewScope,
    NoteEditScope,
    Capabilities,
    Principal,
    EntityType,
    OwnershipChain,
    AccessOutcome,
    AccessResolution,
)
from access.policy import (
    NO_CAPABILITIES,
    ROLE_CAPABILITIES,
    ASSIGNABLE_ROLES,
    get_capabilities,
    require_role,
    can_edit_note,
)
from access.loader import OwnershipLoader, SQLiteOwnershipLoader
from access.resolver import TenantAccessResolver
from access.db import init_db, seed_sample_data

__all__ = [
    # Errors
    "AccessError",
    "NotFoundError",
    "ForbiddenError",
    "RoleNotAllowedError",
    "OwnershipLookupError",
    "UnknownRoleError",
    # Models
    "Role",
    "ViewScope",
    "NoteEditScope",
    "Capabilities",
    "Principal",
    "EntityType",
    "OwnershipChain",
    "AccessOutcome",
    "AccessResolution",
    # Policy
    "NO_CAPABILITIES",
    "ROLE_CAPABILITIES",
    "ASSIGNABLE_ROLES",
    "get_capabilities",
    "require_role",
    "can_edit_note",
    # Loading / resolution
    "OwnershipLoader",
    "SQLiteOwnershipLoader",
    "TenantAccessResolver",
    # Database
    "init_db",
    "seed_sample_data",
]
