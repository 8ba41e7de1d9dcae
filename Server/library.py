"""
Research Library Server - Service Container

Builds the managers once per application and wires their dependencies.
Routes reach them through request.app.state.library (see auth.GetLibrary).
"""

from dataclasses import dataclass
from typing import Callable, Optional

from file_storage import PaperStorage
from managers import (
    DatabaseManager, SessionStore, DatabaseSessionStore, SessionManager,
    LoginThrottle, ActivityLogManager, UserManager, StrandManager,
    PaperManager, StatsManager
)


@dataclass
class LibraryServices:
    """Every manager the routes use"""
    db_manager: DatabaseManager
    storage: PaperStorage
    session_manager: SessionManager
    throttle: LoginThrottle
    activity_log: ActivityLogManager
    users: UserManager
    strands: StrandManager
    papers: PaperManager
    stats: StatsManager


def BuildServices(db_path: str = None, storage_root: str = None,
                  session_store: Optional[SessionStore] = None,
                  activity_writer: Optional[Callable[[dict], None]] = None) -> LibraryServices:
    """
    Create and wire all managers

    Args:
        db_path: SQLite file (defaults to config)
        storage_root: PDF directory (defaults to config)
        session_store: Session backend (defaults to the sessions table)
        activity_writer: Audit sink override (tests inject failing sinks)

    Returns:
        LibraryServices
    """
    db_manager = DatabaseManager(db_path)
    storage = PaperStorage(storage_root)
    session_manager = SessionManager(session_store or DatabaseSessionStore(db_manager))
    activity_log = ActivityLogManager(db_manager, writer=activity_writer)

    return LibraryServices(
        db_manager=db_manager,
        storage=storage,
        session_manager=session_manager,
        throttle=LoginThrottle(db_manager),
        activity_log=activity_log,
        users=UserManager(db_manager, session_manager, activity_log),
        strands=StrandManager(db_manager, activity_log),
        papers=PaperManager(db_manager, storage, activity_log),
        stats=StatsManager(db_manager)
    )
