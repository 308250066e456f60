"""Role parsing and capability policy tests."""

import pytest
from pydantic import ValidationError

from access import (
    ASSIGNABLE_ROLES,
    NO_CAPABILITIES,
    ForbiddenError,
    NoteEditScope,
    Principal,
    Role,
    RoleNotAllowedError,
    UnknownRoleError,
    ViewScope,
    can_edit_note,
    get_capabilities,
    require_role,
)


class TestRoleParsing:

    @pytest.mark.parametrize("value", ["SUPERVISOR", "INSPECTOR", "CUSTOMER", "SUPPLIER"])
    def test_known_roles(self, value):
        assert Role.parse(value).value == value

    @pytest.mark.parametrize("value", ["ADMIN", "supervisor", "", "Inspector "])
    def test_unknown_roles_rejected(self, value):
        with pytest.raises(UnknownRoleError):
            Role.parse(value)

    def test_unknown_role_is_value_error(self):
        with pytest.raises(ValueError):
            Role.parse("OWNER")

    def test_principal_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            Principal(user_id="u-1", company_id="co-1", role="ADMIN")


class TestCapabilities:

    def test_supervisor(self):
        caps = get_capabilities(Role.SUPERVISOR)
        assert caps.can_create_entities and caps.can_create_bales
        assert caps.can_edit_any and caps.can_delete_any
        assert caps.view_scope == ViewScope.ALL_IN_COMPANY
        assert caps.note_edit_scope == NoteEditScope.ANY

    def test_inspector(self):
        caps = get_capabilities(Role.INSPECTOR)
        assert caps.can_create_entities and caps.can_create_bales
        assert not caps.can_edit_any
        assert not caps.can_delete_any
        assert caps.view_scope == ViewScope.ALL_IN_COMPANY
        assert caps.note_edit_scope == NoteEditScope.OWN_ONLY

    @pytest.mark.parametrize("role", [Role.CUSTOMER, Role.SUPPLIER])
    def test_restricted_roles(self, role):
        caps = get_capabilities(role)
        assert not any([caps.can_create_entities, caps.can_create_bales,
                        caps.can_edit_any, caps.can_delete_any])
        assert caps.view_scope == ViewScope.ASSIGNED_ONLY
        assert caps.note_edit_scope == NoteEditScope.OWN_ONLY

    @pytest.mark.parametrize("role", ["ADMIN", None, 42])
    def test_non_role_gets_no_capabilities(self, role):
        assert get_capabilities(role) is NO_CAPABILITIES

    def test_no_capabilities_is_most_restrictive(self):
        assert NO_CAPABILITIES.view_scope == ViewScope.ASSIGNED_ONLY
        assert not NO_CAPABILITIES.can_create_bales

    def test_capabilities_are_immutable(self):
        with pytest.raises(ValidationError):
            get_capabilities(Role.INSPECTOR).can_delete_any = True

    def test_assignable_roles(self):
        assert ASSIGNABLE_ROLES == {Role.CUSTOMER, Role.SUPPLIER}


class TestRoleGates:

    def test_require_role_passes(self):
        principal = Principal(user_id="u-1", company_id="co-1", role=Role.SUPERVISOR)
        assert require_role(principal, Role.SUPERVISOR) is principal

    def test_require_role_rejects(self):
        principal = Principal(user_id="u-1", company_id="co-1", role=Role.INSPECTOR)

        with pytest.raises(RoleNotAllowedError) as exc_info:
            require_role(principal, Role.SUPERVISOR)

        assert isinstance(exc_info.value, ForbiddenError)
        assert exc_info.value.message == "Access denied. Required roles: SUPERVISOR"

    def test_supervisor_edits_any_note(self):
        principal = Principal(user_id="u-1", company_id="co-1", role=Role.SUPERVISOR)
        assert can_edit_note(principal, "someone-else")

    @pytest.mark.parametrize("role", [Role.INSPECTOR, Role.CUSTOMER, Role.SUPPLIER])
    def test_others_edit_only_own_notes(self, role):
        principal = Principal(user_id="u-1", company_id="co-1", role=role)
        assert can_edit_note(principal, "u-1")
        assert not can_edit_note(principal, "u-2")
