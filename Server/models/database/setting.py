"""
Research Library Server - Setting Database Model

Admin-tunable server settings, one row per key with the value stored as
text. Defaults are written at startup for any missing key:

- session_idle_minutes: idle timeout for sessions and the session cookie
- log_retention_days: how long activity log entries are kept
- activity_log_page_size: entries returned by the activity log listing
"""

from sqlalchemy import Column, String

from models.database.base import Base


class Setting(Base):
    """Key/value row in the settings table; read through DatabaseManager.GetIntSetting"""
    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
