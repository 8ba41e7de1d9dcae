"""
Tests for the authorization policy in Research Library Server

The policy is pure, so these tests use hand-made session snapshots.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import policy
from policy import Action
from exceptions import AuthenticationError, AuthorizationError
from models.auth import SessionUser

ADMIN = SessionUser(id="a1", username="admin", full_name="System Admin", role="admin")
VIEWER = SessionUser(id="v1", username="val", full_name="Val Viewer", role="viewer")
EDITOR = SessionUser(id="e1", username="ed", full_name="Ed Editor", role="editor")
DRIFTED = SessionUser(id="x1", username="old", full_name="Legacy Account", role="superuser")


def test_public_actions_need_no_session():
    """Browsing papers, strands and stats is open to anonymous callers"""
    for action in (Action.PAPER_READ, Action.STRAND_READ, Action.STATS_READ):
        assert policy.CanPerform(None, action)
        assert policy.Require(None, action) is None


def test_anonymous_caller_is_unauthenticated():
    """Non-public actions without a session raise AuthenticationError"""
    assert not policy.CanPerform(None, Action.PAPER_CREATE)

    with pytest.raises(AuthenticationError):
        policy.Require(None, Action.PAPER_CREATE)
    with pytest.raises(AuthenticationError):
        policy.Require(None, Action.LOG_READ)


def test_admin_only_actions():
    """Admin-only actions reject viewers and editors with AuthorizationError"""
    admin_actions = [
        Action.PAPER_DELETE, Action.LOG_READ, Action.LOG_DELETE, Action.USER_LIST,
        Action.USER_CREATE, Action.USER_KICK, Action.SESSION_LIST,
        Action.SETTINGS_READ, Action.SETTINGS_UPDATE
    ]
    for action in admin_actions:
        assert policy.CanPerform(ADMIN, action)
        assert not policy.CanPerform(VIEWER, action)
        assert not policy.CanPerform(EDITOR, action)
        with pytest.raises(AuthorizationError):
            policy.Require(VIEWER, action)


def test_any_signed_in_user_actions():
    """Papers, strands and the dashboard are open to every signed-in role"""
    for action in (Action.PAPER_CREATE, Action.PAPER_UPDATE, Action.STRAND_CREATE,
                   Action.STRAND_UPDATE, Action.STRAND_DELETE, Action.DASHBOARD_READ):
        for caller in (ADMIN, EDITOR, VIEWER):
            assert policy.CanPerform(caller, action)


def test_editor_is_treated_as_viewer():
    """Every decision for an editor matches the one for a viewer"""
    for action in Action:
        assert policy.CanPerform(EDITOR, action, "other") == policy.CanPerform(VIEWER, action, "other")


def test_unknown_role_is_treated_as_viewer():
    """A stored role outside the enum gets viewer rights, never admin"""
    assert not policy.IsAdmin(DRIFTED)
    assert policy.CanPerform(DRIFTED, Action.PAPER_CREATE)
    assert not policy.CanPerform(DRIFTED, Action.PAPER_DELETE)


def test_self_or_admin_user_actions():
    """Users may update or delete themselves; only admins may touch others"""
    assert policy.CanPerform(VIEWER, Action.USER_UPDATE, "v1")
    assert policy.CanPerform(VIEWER, Action.USER_DELETE, "v1")
    assert not policy.CanPerform(VIEWER, Action.USER_UPDATE, "e1")
    assert policy.CanPerform(ADMIN, Action.USER_DELETE, "v1")

    with pytest.raises(AuthorizationError) as error:
        policy.Require(VIEWER, Action.USER_DELETE, "e1")
    assert "modify this account" in error.value.message


def test_self_check_is_string_equality():
    """Ids compare as strings, ignoring surrounding whitespace"""
    assert policy.IsSelf(VIEWER, "v1")
    assert policy.IsSelf(VIEWER, " v1 ")
    assert not policy.IsSelf(VIEWER, "V1")
    assert not policy.IsSelf(None, "v1")
    assert not policy.IsSelf(VIEWER, None)


def test_field_restriction_for_admin_editing_others():
    """An admin editing someone else may only change the full name"""
    requested = {"full_name": "New Name", "username": "hijack", "role": "admin", "password": "pw123456"}

    assert policy.FilterUserChanges(ADMIN, "v1", requested) == {"full_name": "New Name"}
    assert policy.FilterUserChanges(VIEWER, "v1", requested) == requested
    assert policy.FilterUserChanges(VIEWER, "e1", requested) == {}


def test_field_restriction_drops_unset_values():
    requested = {"full_name": None, "username": "val2", "role": None, "password": None}
    assert policy.FilterUserChanges(VIEWER, "v1", requested) == {"username": "val2"}


def test_step_up_requirements():
    """Deletes and self-updates need the current password; admin renames don't"""
    assert policy.RequiresStepUp(VIEWER, Action.USER_UPDATE, "v1")
    assert policy.RequiresStepUp(ADMIN, Action.USER_UPDATE, "a1")
    assert not policy.RequiresStepUp(ADMIN, Action.USER_UPDATE, "v1")
    assert policy.RequiresStepUp(ADMIN, Action.USER_DELETE, "v1")
    assert policy.RequiresStepUp(VIEWER, Action.USER_DELETE, "v1")
    assert not policy.RequiresStepUp(ADMIN, Action.PAPER_DELETE)


def test_last_admin_protection():
    assert policy.IsLastAdminProtected("admin", 1)
    assert policy.IsLastAdminProtected("ADMIN", 0)
    assert not policy.IsLastAdminProtected("admin", 2)
    assert not policy.IsLastAdminProtected("viewer", 1)
    assert not policy.IsLastAdminProtected("superuser", 1)


if __name__ == "__main__":
    print("Running policy tests...")
    print()

    test_public_actions_need_no_session()
    test_anonymous_caller_is_unauthenticated()
    test_admin_only_actions()
    test_any_signed_in_user_actions()
    test_editor_is_treated_as_viewer()
    test_unknown_role_is_treated_as_viewer()
    test_self_or_admin_user_actions()
    test_self_check_is_string_equality()
    test_field_restriction_for_admin_editing_others()
    test_field_restriction_drops_unset_values()
    test_step_up_requirements()
    test_last_admin_protection()

    print()
    print("All tests passed!")
