"""
Research Library Server - Activity Log Database Model

Append-only audit trail. performed_by and target_item are plain strings
copied at write time, never foreign keys, so later renames leave history intact.
"""

from sqlalchemy import Column, String, DateTime, Index

from models.database.base import Base, NewId, UtcNow


class ActivityLog(Base):
    """
    Activity logs table
    """
    __tablename__ = "activity_logs"

    log_id = Column(String(32), primary_key=True, default=NewId)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=UtcNow)
    performed_by = Column(String, nullable=False)
    action_type = Column(String, nullable=False)
    target_item = Column(String, nullable=False)
    change_details = Column(String, nullable=True)

    __table_args__ = (
        Index("ix_activity_logs_timestamp", "timestamp"),
    )

    def ToDict(self) -> dict:
        return {
            "id": self.log_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "performedBy": self.performed_by,
            "actionType": self.action_type,
            "targetItem": self.target_item,
            "changeDetails": self.change_details or "",
        }
