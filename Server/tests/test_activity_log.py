"""
Tests for the activity log in Research Library Server
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from exceptions import ValidationError
from models.database import ActivityLog
from library_testing import NewLibrary, AdminCaller, AddUser


def test_record_copies_caller_name():
    library = NewLibrary()
    viewer = AddUser(library, "val", full_name="Val Viewer")

    assert library.activity_log.Record(viewer, "Added Strand", "ICT", "New strand 'ICT' added to strand list")

    entry = library.activity_log.ListRecent()[0]
    assert entry["performedBy"] == "Val Viewer"
    assert entry["targetItem"] == "ICT"


def test_record_without_caller_uses_system():
    library = NewLibrary()

    library.activity_log.Record(None, "Logout", None, "Session expired due to inactivity")

    entry = library.activity_log.ListRecent()[0]
    assert entry["performedBy"] == "System"
    assert entry["targetItem"] == "System"


def test_list_recent_is_newest_first_and_limited():
    library = NewLibrary()
    admin = AdminCaller(library)
    for index in range(5):
        library.activity_log.Record(admin, "Login", f"Entry {index}")

    entries = library.activity_log.ListRecent(limit=3)

    assert len(entries) == 3
    timestamps = [entry["timestamp"] for entry in entries]
    assert timestamps == sorted(timestamps, reverse=True)


def test_delete_logs_records_itself():
    """Bulk deletion removes the entries and logs how many went"""
    library = NewLibrary()
    admin = AdminCaller(library)
    library.activity_log.Record(admin, "Login", "System Admin")
    library.activity_log.Record(admin, "Logout", "System Admin")
    ids = [entry["id"] for entry in library.activity_log.ListRecent()]

    assert library.activity_log.DeleteLogs(admin, ids + ["unknown-id"]) == 2

    entries = library.activity_log.ListRecent()
    assert len(entries) == 1
    assert entries[0]["actionType"] == "Deleted Logs"
    assert entries[0]["targetItem"] == "System"
    assert entries[0]["changeDetails"] == "Permanently removed 2 activity logs"


def test_delete_logs_requires_id_list():
    library = NewLibrary()
    admin = AdminCaller(library)

    for bad_ids in (None, [], "abc", {"id": 1}):
        with pytest.raises(ValidationError) as error:
            library.activity_log.DeleteLogs(admin, bad_ids)
        assert error.value.message == "No log IDs provided"


def test_entries_past_retention_are_purged():
    """Entries older than log_retention_days disappear before listing"""
    library = NewLibrary()
    admin = AdminCaller(library)

    session = library.db_manager.GetSession()
    try:
        session.add(ActivityLog(
            timestamp=datetime.now(timezone.utc) - timedelta(days=400),
            performed_by="System Admin", action_type="Login", target_item="System Admin",
            change_details="Successful login"
        ))
        session.commit()
    finally:
        session.close()

    library.activity_log.Record(admin, "Login", "System Admin", "Successful login")

    entries = library.activity_log.ListRecent()
    assert len(entries) == 1

    library.db_manager.UpdateSettings({"log_retention_days": 1})
    assert library.activity_log.PurgeExpired(now=datetime.now(timezone.utc) + timedelta(days=2)) == 1


if __name__ == "__main__":
    print("Running activity log tests...")
    print()

    test_record_copies_caller_name()
    test_record_without_caller_uses_system()
    test_list_recent_is_newest_first_and_limited()
    test_delete_logs_records_itself()
    test_delete_logs_requires_id_list()
    test_entries_past_retention_are_purged()

    print()
    print("All tests passed!")
