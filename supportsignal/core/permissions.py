"""Role-based permission matrix.

Higher roles inherit every permission of the roles below them in
``ROLE_HIERARCHY``.
"""

from typing import Dict, List, Optional, Set
from uuid import UUID


class Roles:
    SYSTEM_ADMIN = "system_admin"
    DEMO_ADMIN = "demo_admin"
    COMPANY_ADMIN = "company_admin"
    TEAM_LEAD = "team_lead"
    FRONTLINE_WORKER = "frontline_worker"

    ALL = (SYSTEM_ADMIN, DEMO_ADMIN, COMPANY_ADMIN, TEAM_LEAD, FRONTLINE_WORKER)


class Permissions:
    CREATE_INCIDENT = "create_incident"
    EDIT_OWN_INCIDENT_CAPTURE = "edit_own_incident_capture"
    VIEW_MY_INCIDENTS = "view_my_incidents"
    VIEW_ALL_COMPANY_INCIDENTS = "view_all_company_incidents"
    PERFORM_ANALYSIS = "perform_analysis"

    MANAGE_USERS = "manage_users"
    INVITE_USERS = "invite_users"
    VIEW_USER_PROFILES = "view_user_profiles"

    SYSTEM_CONFIGURATION = "system_configuration"
    COMPANY_CONFIGURATION = "company_configuration"
    MANAGE_COMPANY = "manage_company"
    MANAGE_ALL_COMPANIES = "manage_all_companies"

    VIEW_AUDIT_LOGS = "view_audit_logs"
    VIEW_SECURITY_LOGS = "view_security_logs"
    IMPERSONATE_USERS = "impersonate_users"

    SAMPLE_DATA = "sample_data"


_FRONTLINE = [
    Permissions.CREATE_INCIDENT,
    Permissions.EDIT_OWN_INCIDENT_CAPTURE,
    Permissions.VIEW_MY_INCIDENTS,
]

_TEAM_LEAD = [
    Permissions.CREATE_INCIDENT,
    Permissions.VIEW_MY_INCIDENTS,
    Permissions.VIEW_ALL_COMPANY_INCIDENTS,
    Permissions.PERFORM_ANALYSIS,
    Permissions.VIEW_USER_PROFILES,
]

_COMPANY_ADMIN = _FRONTLINE + [
    Permissions.VIEW_ALL_COMPANY_INCIDENTS,
    Permissions.PERFORM_ANALYSIS,
    Permissions.MANAGE_USERS,
    Permissions.INVITE_USERS,
    Permissions.VIEW_USER_PROFILES,
    Permissions.COMPANY_CONFIGURATION,
    Permissions.MANAGE_COMPANY,
    Permissions.VIEW_AUDIT_LOGS,
]

_DEMO_ADMIN = _COMPANY_ADMIN + [
    Permissions.MANAGE_ALL_COMPANIES,
    Permissions.SAMPLE_DATA,
]

_SYSTEM_ADMIN = _DEMO_ADMIN + [
    Permissions.SYSTEM_CONFIGURATION,
    Permissions.VIEW_SECURITY_LOGS,
    Permissions.IMPERSONATE_USERS,
]

ROLE_PERMISSIONS: Dict[str, List[str]] = {
    Roles.SYSTEM_ADMIN: _SYSTEM_ADMIN,
    Roles.DEMO_ADMIN: _DEMO_ADMIN,
    Roles.COMPANY_ADMIN: _COMPANY_ADMIN,
    Roles.TEAM_LEAD: _TEAM_LEAD,
    Roles.FRONTLINE_WORKER: _FRONTLINE,
}

ROLE_HIERARCHY: Dict[str, List[str]] = {
    Roles.SYSTEM_ADMIN: [Roles.DEMO_ADMIN, Roles.COMPANY_ADMIN, Roles.TEAM_LEAD, Roles.FRONTLINE_WORKER],
    Roles.DEMO_ADMIN: [Roles.COMPANY_ADMIN, Roles.TEAM_LEAD, Roles.FRONTLINE_WORKER],
    Roles.COMPANY_ADMIN: [Roles.TEAM_LEAD, Roles.FRONTLINE_WORKER],
    Roles.TEAM_LEAD: [Roles.FRONTLINE_WORKER],
    Roles.FRONTLINE_WORKER: [],
}


def get_role_permissions(role: str) -> Set[str]:
    """Direct plus inherited permissions for a role."""
    permissions = set(ROLE_PERMISSIONS.get(role, []))
    for inherited in ROLE_HIERARCHY.get(role, []):
        permissions.update(ROLE_PERMISSIONS.get(inherited, []))
    return permissions


def has_permission(
    role: str,
    permission: str,
    user_id: Optional[UUID] = None,
    resource_owner_id: Optional[UUID] = None,
) -> bool:
    """Check whether a role grants a permission.

    Args:
        role: The user's role
        permission: Permission key from ``Permissions``
        user_id: The acting user's id, for ownership checks
        resource_owner_id: Creator of the resource being edited

    Returns:
        True if granted by role or by owning the resource being captured
    """
    if permission in get_role_permissions(role):
        return True

    if resource_owner_id is not None and permission == Permissions.EDIT_OWN_INCIDENT_CAPTURE:
        return user_id is not None and resource_owner_id == user_id

    return False


def can_assign_role(actor_role: str, target_role: str) -> bool:
    """Only system admins may create or promote other system admins."""
    if target_role not in Roles.ALL:
        return False
    if target_role == Roles.SYSTEM_ADMIN:
        return actor_role == Roles.SYSTEM_ADMIN
    return True
