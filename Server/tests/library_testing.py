"""
Shared setup for Research Library Server tests

Each test builds its own library over a fresh temporary directory: a SQLite
file, a PDF folder and an in-memory session store.
"""

import sys
import asyncio
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from library import BuildServices
from managers import InMemorySessionStore
from models.auth import SessionUser
from models.database import User
from models.infrastructure import UploadedPdf

ADMIN_PASSWORD = "admin"


def NewLibrary(activity_writer=None):
    """Build and initialize managers over a new temporary directory"""
    root = Path(tempfile.mkdtemp(prefix="research-library-test-"))
    library = BuildServices(
        db_path=str(root / "library.db"),
        storage_root=str(root / "papers"),
        session_store=InMemorySessionStore(),
        activity_writer=activity_writer
    )
    library.db_manager.InitializeDatabase()
    library.storage.InitializeStorage()
    return library


def Run(coroutine):
    """Drive an async manager method to completion"""
    return asyncio.run(coroutine)


def Snapshot(user: User) -> SessionUser:
    return SessionUser(id=user.user_id, username=user.username, full_name=user.full_name, role=user.role)


def AdminCaller(library) -> SessionUser:
    """Session snapshot of the bootstrap admin"""
    session = library.db_manager.GetSession()
    try:
        return Snapshot(library.db_manager.FindUserByLogin(session, "admin"))
    finally:
        session.close()


def AddUser(library, username: str, password: str = "secret123", role: str = "viewer",
            full_name: str = None) -> SessionUser:
    """Insert an account directly and return its session snapshot"""
    session = library.db_manager.GetSession()
    try:
        user = User(
            username=username,
            password_hash=library.db_manager.HashPassword(password),
            full_name=full_name or username.title(),
            role=role
        )
        session.add(user)
        session.commit()
        return Snapshot(user)
    finally:
        session.close()


def LoadUser(library, user_id: str) -> User:
    session = library.db_manager.GetSession()
    try:
        return session.query(User).filter(User.user_id == user_id).first()
    finally:
        session.close()


def Pdf(content: bytes = b"%PDF-1.4 research paper") -> UploadedPdf:
    return UploadedPdf(filename="paper.pdf", content_type="application/pdf", content=content)
