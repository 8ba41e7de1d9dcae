"""
Research Library Server - Managers Package

This package contains manager classes for the database, sessions, the login
throttle, the activity log and the paper/strand/user entities.
"""

from managers.database_manager import DatabaseManager
from managers.session_store import SessionStore, InMemorySessionStore, DatabaseSessionStore
from managers.session_manager import SessionManager
from managers.login_throttle import LoginThrottle
from managers.activity_log_manager import ActivityLogManager
from managers.user_manager import UserManager
from managers.strand_manager import StrandManager
from managers.paper_manager import PaperManager
from managers.stats_manager import StatsManager

__all__ = [
    'DatabaseManager',
    'SessionStore',
    'InMemorySessionStore',
    'DatabaseSessionStore',
    'SessionManager',
    'LoginThrottle',
    'ActivityLogManager',
    'UserManager',
    'StrandManager',
    'PaperManager',
    'StatsManager',
]
