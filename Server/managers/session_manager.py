"""
Research Library Server - Session Management

Server-side sessions for the library API. A session holds a snapshot of the
user taken at login time plus a rolling idle expiry that is refreshed on
every request that touches it.

Multiple sessions per user are allowed (one per device).
"""

import json
import secrets
import logging
from datetime import datetime, timezone, timedelta
from typing import Optional, Set

from models.auth import SessionUser
from managers.session_store import SessionStore

logger = logging.getLogger(__name__)

# Session configuration
SESSION_IDLE_MINUTES = 15


class SessionManager:
    """
    Creates, resolves and destroys sessions held in a SessionStore
    """

    def __init__(self, store: SessionStore, idle_minutes: int = SESSION_IDLE_MINUTES):
        """
        Args:
            store: Backing store for session blobs
            idle_minutes: Rolling idle timeout
        """
        self.store = store
        self.idle_minutes = idle_minutes

    def _ExpiresAt(self) -> datetime:
        return datetime.now(timezone.utc) + timedelta(minutes=self.idle_minutes)

    @staticmethod
    def _Encode(user: SessionUser) -> str:
        return json.dumps({
            "user": user.model_dump(),
            "lastActivity": datetime.now(timezone.utc).isoformat()
        })

    @staticmethod
    def _Decode(data: str) -> Optional[SessionUser]:
        """
        Parse a session blob

        Returns:
            SessionUser, or None if the blob is corrupt or carries no user
        """
        try:
            payload = json.loads(data)
            user = payload.get("user") if isinstance(payload, dict) else None
            if not user or not user.get("id"):
                return None
            return SessionUser(
                id=str(user["id"]),
                username=str(user.get("username", "")),
                full_name=str(user.get("full_name", "")),
                role=str(user.get("role", ""))
            )
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping unparseable session record: {e}")
            return None

    def CreateSession(self, user) -> str:
        """
        Create a new session for a verified user

        Args:
            user: User row or SessionUser

        Returns:
            str: Opaque session key to hand to the client
        """
        if isinstance(user, SessionUser):
            snapshot = user
        else:
            snapshot = SessionUser(
                id=str(user.user_id),
                username=user.username,
                full_name=user.full_name,
                role=user.role
            )

        session_id = secrets.token_urlsafe(32)
        self.store.Set(session_id, self._Encode(snapshot), self._ExpiresAt())

        logger.info(f"Created session for user '{snapshot.username}' (idle timeout {self.idle_minutes} minutes)")

        return session_id

    def GetCurrentUser(self, session_id: str) -> Optional[SessionUser]:
        """
        Resolve a session key to its user snapshot and refresh the idle expiry

        Args:
            session_id: Session key from the cookie

        Returns:
            SessionUser if the session is live, None otherwise
        """
        if not session_id:
            return None

        data = self.store.Get(session_id)
        if data is None:
            return None

        user = self._Decode(data)
        if user is None:
            return None

        # Rolling expiry; never recreates a session destroyed since the Get
        if not self.store.Touch(session_id, self._Encode(user), self._ExpiresAt()):
            return None

        return user

    def DestroySession(self, session_id: str) -> None:
        """
        Delete a session (logout). Destroying a missing session is not an error.

        Args:
            session_id: Session key to delete
        """
        if session_id and self.store.Delete(session_id):
            logger.info("Destroyed session")

    def ListActiveUserIds(self) -> Set[str]:
        """
        Distinct user ids that currently hold at least one live session
        """
        active_user_ids = set()
        for _, data in self.store.Scan():
            user = self._Decode(data)
            if user:
                active_user_ids.add(user.id)
        return active_user_ids

    def DestroyAllSessionsForUser(self, user_id: str, except_session_id: Optional[str] = None) -> int:
        """
        Destroy every session that belongs to a user ("kick")

        Args:
            user_id: Id of the user whose sessions are destroyed
            except_session_id: Session to keep (log out other devices only)

        Returns:
            int: Number of sessions destroyed
        """
        target_id = str(user_id).strip()
        deleted_count = 0

        for session_id, data in self.store.Scan():
            if session_id == except_session_id:
                continue
            user = self._Decode(data)
            if user and user.id.strip() == target_id:
                if self.store.Delete(session_id):
                    deleted_count += 1

        if deleted_count:
            logger.info(f"Destroyed {deleted_count} session(s) for user id {target_id}")

        return deleted_count

    def CleanupExpiredSessions(self) -> int:
        """
        Remove all expired sessions from the store

        Returns:
            Number of sessions cleaned up
        """
        removed = self.store.PurgeExpired()
        if removed:
            logger.info(f"Cleaned up {removed} expired sessions")
        return removed
