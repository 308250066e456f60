"""Role Capability Policy.

Static mapping from role to capabilities. Lookups never fail: anything
that is not a Role member gets NO_CAPABILITIES.
"""

from typing import Dict

from access.errors import RoleNotAllowedError
from access.models import Capabilities, NoteEditScope, Principal, Role, ViewScope


NO_CAPABILITIES = Capabilities()

ROLE_CAPABILITIES: Dict[Role, Capabilities] = {
    Role.SUPERVISOR: Capabilities(
        can_create_entities=True,
        can_create_bales=True,
        can_edit_any=True,
        can_delete_any=True,
        view_scope=ViewScope.ALL_IN_COMPANY,
        note_edit_scope=NoteEditScope.ANY,
    ),
    Role.INSPECTOR: Capabilities(
        can_create_entities=True,
        can_create_bales=True,
        view_scope=ViewScope.ALL_IN_COMPANY,
        note_edit_scope=NoteEditScope.OWN_ONLY,
    ),
    Role.CUSTOMER: Capabilities(
        view_scope=ViewScope.ASSIGNED_ONLY,
        note_edit_scope=NoteEditScope.OWN_ONLY,
    ),
    Role.SUPPLIER: Capabilities(
        view_scope=ViewScope.ASSIGNED_ONLY,
        note_edit_scope=NoteEditScope.OWN_ONLY,
    ),
}

# Roles that only see POs they are assigned to
ASSIGNABLE_ROLES = frozenset(
    role for role, caps in ROLE_CAPABILITIES.items()
    if caps.view_scope == ViewScope.ASSIGNED_ONLY
)


def get_capabilities(role: Role) -> Capabilities:
    """Get the capabilities for a role."""
    if not isinstance(role, Role):
        return NO_CAPABILITIES
    return ROLE_CAPABILITIES.get(role, NO_CAPABILITIES)


def require_role(principal: Principal, *roles: Role) -> Principal:
    """Require the principal to hold one of the given roles.

    Raises:
        RoleNotAllowedError: If the principal's role is not in roles
    """
    if principal.role not in roles:
        raise RoleNotAllowedError(principal.role.value, [r.value for r in roles])
    return principal


def can_edit_note(principal: Principal, author_id: str) -> bool:
    """Whether the principal may edit a note written by author_id."""
    caps = get_capabilities(principal.role)
    if caps.note_edit_scope == NoteEditScope.ANY:
        return True
    return author_id == principal.user_id
