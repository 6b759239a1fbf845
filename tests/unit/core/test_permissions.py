"""Tests for the role permission matrix."""

from uuid import uuid4

from supportsignal.core.permissions import (
    Permissions,
    Roles,
    can_assign_role,
    get_role_permissions,
    has_permission,
)


class TestRolePermissions:
    """Tests for role inheritance and permission checks."""

    def test_frontline_worker_permissions(self):
        assert get_role_permissions(Roles.FRONTLINE_WORKER) == {
            Permissions.CREATE_INCIDENT,
            Permissions.EDIT_OWN_INCIDENT_CAPTURE,
            Permissions.VIEW_MY_INCIDENTS,
        }

    def test_team_lead_inherits_frontline_capture(self):
        permissions = get_role_permissions(Roles.TEAM_LEAD)

        assert Permissions.EDIT_OWN_INCIDENT_CAPTURE in permissions
        assert Permissions.PERFORM_ANALYSIS in permissions
        assert Permissions.MANAGE_USERS not in permissions

    def test_system_admin_has_every_permission(self):
        every = {value for key, value in vars(Permissions).items() if key.isupper()}

        assert get_role_permissions(Roles.SYSTEM_ADMIN) == every

    def test_only_system_admin_configures_system(self):
        assert has_permission(Roles.SYSTEM_ADMIN, Permissions.SYSTEM_CONFIGURATION)
        for role in (Roles.DEMO_ADMIN, Roles.COMPANY_ADMIN, Roles.TEAM_LEAD, Roles.FRONTLINE_WORKER):
            assert not has_permission(role, Permissions.SYSTEM_CONFIGURATION)

    def test_unknown_role_has_no_permissions(self):
        assert get_role_permissions("visitor") == set()
        assert not has_permission("visitor", Permissions.CREATE_INCIDENT)

    def test_ownership_grants_capture_edit(self):
        owner = uuid4()

        assert has_permission("visitor", Permissions.EDIT_OWN_INCIDENT_CAPTURE, owner, owner)
        assert not has_permission("visitor", Permissions.EDIT_OWN_INCIDENT_CAPTURE, uuid4(), owner)
        assert not has_permission("visitor", Permissions.VIEW_MY_INCIDENTS, owner, owner)


class TestRoleAssignment:
    """Tests for who may assign which role."""

    def test_system_admin_role_reserved(self):
        assert can_assign_role(Roles.SYSTEM_ADMIN, Roles.SYSTEM_ADMIN)
        assert not can_assign_role(Roles.COMPANY_ADMIN, Roles.SYSTEM_ADMIN)

    def test_other_roles_assignable(self):
        assert can_assign_role(Roles.COMPANY_ADMIN, Roles.TEAM_LEAD)

    def test_unknown_role_rejected(self):
        assert not can_assign_role(Roles.SYSTEM_ADMIN, "superuser")
