"""
Research Library Server - Activity Log Manager

Writes and reads the audit trail. Writing is best-effort: a failed write is
reported on the operator log and never reaches the caller, so the action
that triggered it still succeeds.

Labels (who did it, what it was done to) are copied into the entry as plain
strings at write time.
"""

import logging
from datetime import datetime, timezone, timedelta
from typing import Callable, List, Optional

from exceptions import ValidationError
from models.auth import SessionUser
from models.database import ActivityLog, UtcNow

logger = logging.getLogger(__name__)

# performed_by when no caller is available
SYSTEM_ACTOR = "System"


class ActivityLogManager:
    """
    Audit log writer and reader
    """

    def __init__(self, db_manager, writer: Optional[Callable[[dict], None]] = None):
        """
        Args:
            db_manager: DatabaseManager instance
            writer: Sink for new entries; defaults to inserting an activity_logs row
        """
        self.db_manager = db_manager
        self.writer = writer or self.WriteRow

    def WriteRow(self, entry: dict) -> None:
        """Default sink: persist one entry"""
        session = self.db_manager.GetSession()
        try:
            session.add(ActivityLog(**entry))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def RecordAs(self, performed_by: Optional[str], action_type: str, target_label: Optional[str], details: str = "") -> bool:
        """
        Append an entry with an explicit actor label

        Returns:
            bool: True if the entry was written
        """
        entry = {
            "timestamp": UtcNow(),
            "performed_by": str(performed_by) if performed_by else SYSTEM_ACTOR,
            "action_type": action_type,
            "target_item": str(target_label) if target_label else SYSTEM_ACTOR,
            "change_details": details or ""
        }

        try:
            self.writer(entry)
            return True
        except Exception:
            logger.exception(f"Error logging activity '{action_type}' on '{entry['target_item']}'")
            return False

    def Record(self, caller: Optional[SessionUser], action_type: str, target_label: Optional[str], details: str = "") -> bool:
        """
        Append an entry performed by the caller

        The caller's full name is read now and stored by value.
        """
        performed_by = caller.full_name if caller and caller.full_name else None
        return self.RecordAs(performed_by, action_type, target_label, details)

    def ListRecent(self, limit: Optional[int] = None) -> List[dict]:
        """
        Newest entries first, after dropping entries past retention

        Args:
            limit: Maximum entries (defaults to the activity_log_page_size setting)
        """
        self.PurgeExpired()

        if limit is None:
            limit = self.db_manager.GetIntSetting("activity_log_page_size")

        session = self.db_manager.GetSession()
        try:
            logs = session.query(ActivityLog).order_by(ActivityLog.timestamp.desc()).limit(limit).all()
            return [log.ToDict() for log in logs]
        finally:
            session.close()

    def DeleteLogs(self, caller: Optional[SessionUser], ids) -> int:
        """
        Permanently delete entries by id, then record the deletion itself

        Args:
            caller: Admin performing the deletion
            ids: List of log ids

        Returns:
            int: Number of entries removed

        Raises:
            ValidationError: If ids is not a non-empty list
        """
        if not isinstance(ids, list) or len(ids) == 0:
            raise ValidationError("No log IDs provided")

        id_values = [str(log_id) for log_id in ids]

        session = self.db_manager.GetSession()
        try:
            deleted_count = session.query(ActivityLog).filter(
                ActivityLog.log_id.in_(id_values)
            ).delete(synchronize_session=False)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        self.Record(caller, "Deleted Logs", SYSTEM_ACTOR, f"Permanently removed {deleted_count} activity logs")

        return deleted_count

    def PurgeExpired(self, now: Optional[datetime] = None) -> int:
        """
        Delete entries older than the log_retention_days setting

        Returns:
            int: Number of entries removed
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=self.db_manager.GetIntSetting("log_retention_days"))

        session = self.db_manager.GetSession()
        try:
            removed = session.query(ActivityLog).filter(
                ActivityLog.timestamp < cutoff
            ).delete(synchronize_session=False)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if removed:
            logger.info(f"Purged {removed} activity log entries past retention")

        return removed
