"""
Research Library Server - Session Stores

Key-value storage for session blobs. The session manager only ever sees
opaque strings; stores are responsible for idle expiry.

- InMemorySessionStore: process-local dict (tests, single-process dev)
- DatabaseSessionStore: sessions table, survives restarts
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional, Tuple

from models.database import SessionRecord, AsUtc
from models.infrastructure import StoredSession

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Interface the session manager depends on"""

    @abstractmethod
    def Get(self, session_id: str) -> Optional[str]:
        """Blob for a live session, or None if missing or expired"""

    @abstractmethod
    def Set(self, session_id: str, data: str, expires_at_utc: datetime) -> None:
        """Create or replace a session blob"""

    @abstractmethod
    def Touch(self, session_id: str, data: str, expires_at_utc: datetime) -> bool:
        """Refresh an existing session only; returns False if it is gone"""

    @abstractmethod
    def Delete(self, session_id: str) -> bool:
        """Remove a session; returns False if it was already gone"""

    @abstractmethod
    def Scan(self) -> Iterator[Tuple[str, str]]:
        """Yield (session_id, blob) for every live session"""

    @abstractmethod
    def PurgeExpired(self) -> int:
        """Remove expired sessions and return how many were removed"""


class InMemorySessionStore(SessionStore):
    """
    Sessions stored in-memory only (no persistence across restarts)
    """

    def __init__(self):
        self._sessions: Dict[str, StoredSession] = {}

    def Get(self, session_id: str) -> Optional[str]:
        if not session_id:
            return None

        session = self._sessions.get(session_id)
        if not session:
            return None

        if session.IsExpired():
            del self._sessions[session_id]
            return None

        return session.data

    def Set(self, session_id: str, data: str, expires_at_utc: datetime) -> None:
        self._sessions[session_id] = StoredSession(
            session_id=session_id,
            data=data,
            expires_at_utc=expires_at_utc
        )

    def Touch(self, session_id: str, data: str, expires_at_utc: datetime) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False

        session.data = data
        session.expires_at_utc = expires_at_utc
        return True

    def Delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def Scan(self) -> Iterator[Tuple[str, str]]:
        now = datetime.now(timezone.utc)
        # Snapshot so callers may delete while iterating
        for session_id, session in list(self._sessions.items()):
            if not session.IsExpired(now):
                yield session_id, session.data

    def PurgeExpired(self) -> int:
        now = datetime.now(timezone.utc)
        expired_ids = [
            session_id
            for session_id, session in self._sessions.items()
            if session.IsExpired(now)
        ]

        for session_id in expired_ids:
            del self._sessions[session_id]

        return len(expired_ids)


class DatabaseSessionStore(SessionStore):
    """
    Sessions stored in the sessions table
    """

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def Get(self, session_id: str) -> Optional[str]:
        if not session_id:
            return None

        session = self.db_manager.GetSession()
        try:
            record = session.query(SessionRecord).filter(SessionRecord.session_id == session_id).first()
            if not record:
                return None

            if datetime.now(timezone.utc) >= AsUtc(record.expires_at):
                session.delete(record)
                session.commit()
                return None

            return record.data
        finally:
            session.close()

    def Set(self, session_id: str, data: str, expires_at_utc: datetime) -> None:
        session = self.db_manager.GetSession()
        try:
            record = session.query(SessionRecord).filter(SessionRecord.session_id == session_id).first()
            if record:
                record.data = data
                record.expires_at = expires_at_utc
            else:
                session.add(SessionRecord(session_id=session_id, data=data, expires_at=expires_at_utc))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def Touch(self, session_id: str, data: str, expires_at_utc: datetime) -> bool:
        session = self.db_manager.GetSession()
        try:
            updated = session.query(SessionRecord).filter(SessionRecord.session_id == session_id).update(
                {SessionRecord.data: data, SessionRecord.expires_at: expires_at_utc},
                synchronize_session=False
            )
            session.commit()
            return updated > 0
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def Delete(self, session_id: str) -> bool:
        session = self.db_manager.GetSession()
        try:
            deleted = session.query(SessionRecord).filter(SessionRecord.session_id == session_id).delete()
            session.commit()
            return deleted > 0
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def Scan(self) -> Iterator[Tuple[str, str]]:
        now = datetime.now(timezone.utc)
        session = self.db_manager.GetSession()
        try:
            rows = session.query(SessionRecord.session_id, SessionRecord.data, SessionRecord.expires_at).all()
        finally:
            session.close()

        for session_id, data, expires_at in rows:
            if now < AsUtc(expires_at):
                yield session_id, data

    def PurgeExpired(self) -> int:
        session = self.db_manager.GetSession()
        try:
            deleted = session.query(SessionRecord).filter(
                SessionRecord.expires_at <= datetime.now(timezone.utc)
            ).delete()
            session.commit()
            return deleted
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
