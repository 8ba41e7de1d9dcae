"""
Research Library Server - Authorization Policy

Pure decision functions over the caller's session snapshot and the target.
No database or session access happens here; callers look up whatever the
rule needs (target id, admin count) and pass it in.

Roles are the closed set in models.database.role.Role. 'editor' is treated
as 'viewer' by every rule below that does not name it.
"""

from enum import Enum
from typing import FrozenSet, Iterable, Optional

from exceptions import AuthenticationError, AuthorizationError
from models.auth import SessionUser
from models.database.role import Role


class Action(str, Enum):
    """Every action the server authorizes"""
    # Public
    PAPER_READ = "paper_read"
    STRAND_READ = "strand_read"
    STATS_READ = "stats_read"
    # Any signed-in user
    SESSION_READ = "session_read"
    PAPER_CREATE = "paper_create"
    PAPER_UPDATE = "paper_update"
    STRAND_CREATE = "strand_create"
    STRAND_UPDATE = "strand_update"
    STRAND_DELETE = "strand_delete"
    DASHBOARD_READ = "dashboard_read"
    # Admin only
    PAPER_DELETE = "paper_delete"
    LOG_READ = "log_read"
    LOG_DELETE = "log_delete"
    USER_LIST = "user_list"
    USER_CREATE = "user_create"
    USER_KICK = "user_kick"
    SESSION_LIST = "session_list"
    SETTINGS_READ = "settings_read"
    SETTINGS_UPDATE = "settings_update"
    # Self or admin
    USER_UPDATE = "user_update"
    USER_DELETE = "user_delete"


ALL_ROLES: FrozenSet[Role] = frozenset(Role)
ADMIN_ONLY: FrozenSet[Role] = frozenset({Role.ADMIN})

PUBLIC_ACTIONS = frozenset({Action.PAPER_READ, Action.STRAND_READ, Action.STATS_READ})

# Roles allowed per action once the caller is authenticated
ACTION_ROLES = {
    Action.SESSION_READ: ALL_ROLES,
    Action.PAPER_CREATE: ALL_ROLES,
    Action.PAPER_UPDATE: ALL_ROLES,
    Action.STRAND_CREATE: ALL_ROLES,
    Action.STRAND_UPDATE: ALL_ROLES,
    Action.STRAND_DELETE: ALL_ROLES,
    Action.DASHBOARD_READ: ALL_ROLES,
    Action.PAPER_DELETE: ADMIN_ONLY,
    Action.LOG_READ: ADMIN_ONLY,
    Action.LOG_DELETE: ADMIN_ONLY,
    Action.USER_LIST: ADMIN_ONLY,
    Action.USER_CREATE: ADMIN_ONLY,
    Action.USER_KICK: ADMIN_ONLY,
    Action.SESSION_LIST: ADMIN_ONLY,
    Action.SETTINGS_READ: ADMIN_ONLY,
    Action.SETTINGS_UPDATE: ADMIN_ONLY,
}

SELF_OR_ADMIN_ACTIONS = frozenset({Action.USER_UPDATE, Action.USER_DELETE})

SELF_EDITABLE_FIELDS = frozenset({"full_name", "username", "role", "password"})
ADMIN_EDITABLE_FIELDS = frozenset({"full_name"})


def CallerRole(caller: Optional[SessionUser]) -> Optional[Role]:
    """Parse the caller's role; an unknown stored role counts as viewer"""
    if caller is None:
        return None
    try:
        return Role.Parse(caller.role)
    except ValueError:
        return Role.VIEWER


def IsAuthenticated(caller: Optional[SessionUser]) -> bool:
    return caller is not None and bool(caller.id)


def HasRole(caller: Optional[SessionUser], allowed_roles: Iterable[Role]) -> bool:
    if not IsAuthenticated(caller):
        return False
    return CallerRole(caller) in set(allowed_roles)


def IsAdmin(caller: Optional[SessionUser]) -> bool:
    return HasRole(caller, ADMIN_ONLY)


def IsSelf(caller: Optional[SessionUser], target_user_id: Optional[str]) -> bool:
    if not IsAuthenticated(caller) or target_user_id is None:
        return False
    return str(caller.id).strip() == str(target_user_id).strip()


def CanPerform(caller: Optional[SessionUser], action: Action, target_user_id: Optional[str] = None) -> bool:
    """
    Decide whether caller may perform action

    Args:
        caller: Session snapshot, or None when unauthenticated
        action: Action being attempted
        target_user_id: Target account for user actions

    Returns:
        bool: True to allow
    """
    if action in PUBLIC_ACTIONS:
        return True

    if not IsAuthenticated(caller):
        return False

    if action in SELF_OR_ADMIN_ACTIONS:
        return IsSelf(caller, target_user_id) or IsAdmin(caller)

    return HasRole(caller, ACTION_ROLES.get(action, ADMIN_ONLY))


def Require(caller: Optional[SessionUser], action: Action, target_user_id: Optional[str] = None) -> SessionUser:
    """
    CanPerform that raises instead of returning False

    Raises:
        AuthenticationError: Caller has no session and the action is not public
        AuthorizationError: Caller is signed in but not allowed
    """
    if action not in PUBLIC_ACTIONS and not IsAuthenticated(caller):
        raise AuthenticationError("Unauthorized")

    if not CanPerform(caller, action, target_user_id):
        if action in SELF_OR_ADMIN_ACTIONS:
            raise AuthorizationError("Forbidden: You do not have permission to modify this account.")
        raise AuthorizationError("Forbidden: Insufficient privileges")

    return caller


def EditableUserFields(caller: Optional[SessionUser], target_user_id: str) -> FrozenSet[str]:
    """
    Fields of a user record the caller may change

    Self-edits may change everything. An admin editing someone else may only
    change the full name; other submitted fields are dropped, not rejected.
    """
    if IsSelf(caller, target_user_id):
        return SELF_EDITABLE_FIELDS
    if IsAdmin(caller):
        return ADMIN_EDITABLE_FIELDS
    return frozenset()


def FilterUserChanges(caller: Optional[SessionUser], target_user_id: str, requested: dict) -> dict:
    """Drop submitted fields the caller may not change, and unset (None) values"""
    allowed = EditableUserFields(caller, target_user_id)
    return {
        field: value
        for field, value in requested.items()
        if field in allowed and value is not None
    }


def RequiresStepUp(caller: Optional[SessionUser], action: Action, target_user_id: Optional[str] = None) -> bool:
    """
    Whether the action needs the caller's current password

    Every account deletion does, and so does every self-service profile
    update. An admin renaming someone else does not.
    """
    if action == Action.USER_DELETE:
        return True
    if action == Action.USER_UPDATE:
        return IsSelf(caller, target_user_id)
    return False


def IsLastAdminProtected(target_role: str, admin_count: int) -> bool:
    """True if deleting an account with target_role would leave no admin"""
    try:
        role = Role.Parse(target_role)
    except ValueError:
        return False
    return role == Role.ADMIN and admin_count <= 1
