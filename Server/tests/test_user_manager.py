"""
Tests for user management in Research Library Server

Tests account creation, self-service and admin edits, deletion with
password re-authentication, the last-admin guard and session kicks.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from models.api import CreateUserRequest, UpdateUserRequest
from library_testing import NewLibrary, Run, AdminCaller, AddUser, LoadUser, ADMIN_PASSWORD


def test_create_user_defaults_to_viewer():
    """Admins create accounts; the role defaults to viewer and the action is logged"""
    library = NewLibrary()
    admin = AdminCaller(library)

    created = Run(library.users.CreateUser(
        admin, CreateUserRequest(username="maria", password="secret123", full_name="Maria Santos")
    ))

    assert created["role"] == "viewer"
    assert "password_hash" not in created

    newest = library.activity_log.ListRecent()[0]
    assert newest["actionType"] == "Added User"
    assert newest["targetItem"] == "Maria Santos"
    assert newest["changeDetails"] == "Account created with 'viewer' role"
    assert newest["performedBy"] == "System Admin"


def test_create_user_duplicate_username():
    """Usernames are unique regardless of case"""
    library = NewLibrary()
    admin = AdminCaller(library)
    AddUser(library, "maria")

    with pytest.raises(ConflictError) as error:
        Run(library.users.CreateUser(
            admin, CreateUserRequest(username="MARIA", password="secret123", full_name="Other Maria")
        ))
    assert error.value.message == "Username already exists"


def test_create_user_requires_admin():
    library = NewLibrary()
    viewer = AddUser(library, "val")

    with pytest.raises(AuthorizationError):
        Run(library.users.CreateUser(
            viewer, CreateUserRequest(username="sneaky", password="secret123", full_name="Sneaky")
        ))


def test_self_update_requires_current_password():
    """A profile update without currentPassword is rejected before anything changes"""
    library = NewLibrary()
    viewer = AddUser(library, "val", full_name="Val Viewer")

    with pytest.raises(ValidationError):
        Run(library.users.UpdateUser(viewer, viewer.id, UpdateUserRequest(full_name="Renamed")))

    assert LoadUser(library, viewer.id).full_name == "Val Viewer"


def test_self_update_wrong_current_password():
    library = NewLibrary()
    viewer = AddUser(library, "val", full_name="Val Viewer")

    with pytest.raises(AuthorizationError) as error:
        Run(library.users.UpdateUser(
            viewer, viewer.id, UpdateUserRequest(full_name="Renamed", currentPassword="wrong-password")
        ))
    assert error.value.message == "Incorrect current password"
    assert LoadUser(library, viewer.id).full_name == "Val Viewer"


def test_self_credential_change_logs_out_other_sessions():
    """Changing username or password keeps the current session and ends the others"""
    library = NewLibrary()
    viewer = AddUser(library, "val", password="secret123", full_name="Val Viewer")
    current = library.session_manager.CreateSession(viewer)
    other = library.session_manager.CreateSession(viewer)

    result = Run(library.users.UpdateUser(
        viewer, viewer.id,
        UpdateUserRequest(username="valerie", password="newsecret1", currentPassword="secret123"),
        current_session_id=current
    ))

    assert result["changes"] == ["Username", "Password"]
    stored = LoadUser(library, viewer.id)
    assert stored.username == "valerie"
    assert library.db_manager.VerifyPassword("newsecret1", stored.password_hash)

    assert library.session_manager.GetCurrentUser(current) is not None
    assert library.session_manager.GetCurrentUser(other) is None

    newest = library.activity_log.ListRecent()[0]
    assert newest["actionType"] == "Updated Profile"
    assert newest["targetItem"] == "Self"
    assert newest["changeDetails"] == "Modified: Username, Password"


def test_self_update_username_taken():
    library = NewLibrary()
    AddUser(library, "maria")
    viewer = AddUser(library, "val", password="secret123")

    with pytest.raises(ConflictError) as error:
        Run(library.users.UpdateUser(
            viewer, viewer.id, UpdateUserRequest(username="Maria", currentPassword="secret123")
        ))
    assert error.value.message == "Username taken"


def test_admin_edit_of_other_user_only_changes_full_name():
    """Username, role and password in an admin's edit of someone else are ignored"""
    library = NewLibrary()
    admin = AdminCaller(library)
    viewer = AddUser(library, "val", password="secret123", full_name="Val Viewer")

    result = Run(library.users.UpdateUser(
        admin, viewer.id,
        UpdateUserRequest(full_name="Valerie Viewer", username="hijacked", role="admin", password="changed123")
    ))

    assert result["changes"] == ["Full Name"]
    stored = LoadUser(library, viewer.id)
    assert stored.full_name == "Valerie Viewer"
    assert stored.username == "val"
    assert stored.role == "viewer"
    assert library.db_manager.VerifyPassword("secret123", stored.password_hash)

    newest = library.activity_log.ListRecent()[0]
    assert newest["actionType"] == "Edited User Account"
    assert newest["targetItem"] == "Val Viewer"


def test_viewer_cannot_edit_others():
    library = NewLibrary()
    viewer = AddUser(library, "val", password="secret123")
    other = AddUser(library, "otto")

    with pytest.raises(AuthorizationError):
        Run(library.users.UpdateUser(
            viewer, other.id, UpdateUserRequest(full_name="Pwned", currentPassword="secret123")
        ))


def test_log_labels_survive_rename():
    """Historical entries keep the names they were written with"""
    library = NewLibrary()
    admin = AdminCaller(library)
    viewer = AddUser(library, "val", password="secret123", full_name="Val Viewer")

    library.activity_log.Record(viewer, "Added Paper", "Tide Pools of Cebu", "New research paper added to library")

    Run(library.users.UpdateUser(admin, viewer.id, UpdateUserRequest(full_name="Valerie Cruz")))

    paper_entry = [log for log in library.activity_log.ListRecent() if log["actionType"] == "Added Paper"][0]
    assert paper_entry["performedBy"] == "Val Viewer"

    edit_entry = [log for log in library.activity_log.ListRecent() if log["actionType"] == "Edited User Account"][0]
    assert edit_entry["targetItem"] == "Val Viewer"


def test_sole_admin_cannot_be_deleted():
    """Deleting the only admin is refused, whoever asks"""
    library = NewLibrary()
    admin = AdminCaller(library)
    viewer = AddUser(library, "val", password="secret123")

    with pytest.raises(AuthorizationError) as error:
        Run(library.users.DeleteUser(admin, admin.id, ADMIN_PASSWORD))
    assert error.value.message == "Cannot delete the only administrator account"

    with pytest.raises(AuthorizationError):
        Run(library.users.DeleteUser(viewer, admin.id, "secret123"))

    assert LoadUser(library, admin.id) is not None


def test_admin_can_be_deleted_when_another_exists():
    library = NewLibrary()
    admin = AdminCaller(library)
    second = AddUser(library, "root2", password="secret123", role="admin", full_name="Second Admin")
    library.session_manager.CreateSession(second)

    is_self = Run(library.users.DeleteUser(admin, second.id, ADMIN_PASSWORD))

    assert is_self is False
    assert LoadUser(library, second.id) is None
    assert second.id not in library.session_manager.ListActiveUserIds()

    newest = library.activity_log.ListRecent()[0]
    assert newest["actionType"] == "Deleted User"
    assert newest["targetItem"] == "Second Admin"
    assert newest["changeDetails"] == "Administrative deletion"


def test_self_deletion():
    library = NewLibrary()
    viewer = AddUser(library, "val", password="secret123")

    assert Run(library.users.DeleteUser(viewer, viewer.id, "secret123")) is True
    assert library.activity_log.ListRecent()[0]["changeDetails"] == "Self-deletion"


def test_delete_requires_actor_password():
    """The actor's own password is required and checked"""
    library = NewLibrary()
    admin = AdminCaller(library)
    viewer = AddUser(library, "val", password="secret123")

    with pytest.raises(ValidationError):
        Run(library.users.DeleteUser(admin, viewer.id, None))

    # The target's password is not the actor's password
    with pytest.raises(AuthorizationError):
        Run(library.users.DeleteUser(admin, viewer.id, "secret123"))

    with pytest.raises(NotFoundError):
        Run(library.users.DeleteUser(admin, "missing-user", ADMIN_PASSWORD))

    assert LoadUser(library, viewer.id) is not None


def test_kick_user():
    """Kicking ends every session of the user; kicking again returns 0"""
    library = NewLibrary()
    admin = AdminCaller(library)
    viewer = AddUser(library, "val", full_name="Val Viewer")
    library.session_manager.CreateSession(viewer)
    library.session_manager.CreateSession(viewer)

    assert library.users.ListActiveSessionUsers(admin) == [viewer.id]
    assert library.users.KickUser(admin, viewer.id) == 2
    assert library.users.KickUser(admin, viewer.id) == 0
    assert library.users.KickUser(admin, "no-such-user") == 0

    kicks = [log for log in library.activity_log.ListRecent() if log["actionType"] == "Kicked User"]
    assert len(kicks) == 3
    assert {log["targetItem"] for log in kicks} == {"Val Viewer", "User ID: no-such-user"}


def test_failing_audit_sink_does_not_fail_mutation():
    """An activity log that cannot be written never blocks the change"""
    def BrokenWriter(entry):
        raise RuntimeError("audit store unavailable")

    library = NewLibrary(activity_writer=BrokenWriter)
    admin = AdminCaller(library)

    created = Run(library.users.CreateUser(
        admin, CreateUserRequest(username="maria", password="secret123", full_name="Maria Santos")
    ))

    assert LoadUser(library, created["id"]).username == "maria"
    assert library.activity_log.RecordAs("System", "Login", "Nobody") is False


if __name__ == "__main__":
    print("Running user manager tests...")
    print()

    test_create_user_defaults_to_viewer()
    test_create_user_duplicate_username()
    test_create_user_requires_admin()
    test_self_update_requires_current_password()
    test_self_update_wrong_current_password()
    test_self_credential_change_logs_out_other_sessions()
    test_self_update_username_taken()
    test_admin_edit_of_other_user_only_changes_full_name()
    test_viewer_cannot_edit_others()
    test_log_labels_survive_rename()
    test_sole_admin_cannot_be_deleted()
    test_admin_can_be_deleted_when_another_exists()
    test_self_deletion()
    test_delete_requires_actor_password()
    test_kick_user()
    test_failing_audit_sink_does_not_fail_mutation()

    print()
    print("All tests passed!")
